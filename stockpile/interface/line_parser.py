"""LINE webhook payload parser."""

import logging
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


logger = logging.getLogger(__name__)


class EventSource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = Field(..., description="Source type (user, group, room)")
    user_id: str | None = Field(None, alias="userId", description="LINE user ID of the sender")


class MessageContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = Field(..., description="Message type (text, image, sticker, ...)")
    text: str | None = Field(None, description="Text content (text messages only)")


class PostbackContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: str = Field(..., description="Postback data query string")


class _EventBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    source: EventSource
    reply_token: str | None = Field(None, alias="replyToken")
    timestamp: int | None = None

    @property
    def user_id(self) -> str | None:
        return self.source.user_id


class MessageEvent(_EventBase):
    type: Literal["message"]
    message: MessageContent

    @property
    def text(self) -> str | None:
        """Message text, or None for non-text messages."""
        if self.message.type != "text":
            return None
        return self.message.text


class PostbackEvent(_EventBase):
    type: Literal["postback"]
    postback: PostbackContent


class FollowEvent(_EventBase):
    type: Literal["follow"]


WebhookEvent = Annotated[MessageEvent | PostbackEvent | FollowEvent, Field(discriminator="type")]

_event_adapter: TypeAdapter[WebhookEvent] = TypeAdapter(WebhookEvent)

SUPPORTED_EVENT_TYPES = frozenset({"message", "postback", "follow"})


def parse_webhook_events(payload: dict[str, Any]) -> list[MessageEvent | PostbackEvent | FollowEvent]:
    """Parse the events of a webhook body in arrival order.

    Unsupported event types (unfollow, join, beacon, ...) and malformed events
    are logged and skipped.
    """
    raw_events = payload.get("events")
    if not isinstance(raw_events, list):
        logger.warning("Webhook body has no events list")
        return []

    events = []
    for raw in raw_events:
        event_type = raw.get("type") if isinstance(raw, dict) else None
        if event_type not in SUPPORTED_EVENT_TYPES:
            logger.info("Ignoring unsupported webhook event", extra={"event_type": event_type})
            continue

        try:
            events.append(_event_adapter.validate_python(raw))
        except ValidationError as e:
            logger.warning("Skipping malformed webhook event", extra={"event_type": event_type, "error": str(e)})
    return events
