"""LINE Messaging API client for reply and push messages.

Delivery is attempted once. A failed send is reported in the returned
SendMessageResult and never raised, so callers decide how to handle it.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field

from stockpile.core.config import Constants, constants, settings


logger = logging.getLogger(__name__)


# HTTP status code constants for error handling
HTTP_CLIENT_ERROR_START = 400
HTTP_CLIENT_ERROR_END = 500

REPLY_PATH = "/v2/bot/message/reply"
PUSH_PATH = "/v2/bot/message/push"


class SendMessageResult(BaseModel):
    """Result of sending LINE messages."""

    success: bool = Field(..., description="Whether the API accepted the messages")
    status_code: int | None = Field(None, description="HTTP status returned by the API")
    error: str | None = Field(None, description="Error message if failed")


def _headers() -> dict[str, str]:
    token = settings.require_credential("line_channel_access_token", "LINE Messaging API")
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {token}",
    }


async def _post(*, path: str, payload: dict[str, Any]) -> SendMessageResult:
    """POST one request to the Messaging API."""
    url = f"{settings.line_api_base_url.rstrip('/')}{path}"

    try:
        headers = _headers()
    except ValueError as e:
        logger.error("LINE access token not configured", extra={"path": path})
        return SendMessageResult(success=False, error=str(e))

    try:
        async with httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS) as client:
            response = await client.post(url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        logger.warning("LINE API request failed", extra={"path": path, "error": str(e)})
        return SendMessageResult(success=False, error=f"Request failed: {e!s}")

    if response.is_success:
        return SendMessageResult(success=True, status_code=response.status_code)

    if HTTP_CLIENT_ERROR_START <= response.status_code < HTTP_CLIENT_ERROR_END:
        error = f"Client error: {response.text}"
    else:
        error = f"Server error: {response.status_code}"

    logger.warning("LINE API rejected request", extra={"path": path, "status_code": response.status_code})
    return SendMessageResult(success=False, status_code=response.status_code, error=error)


def _limit(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    if len(messages) > Constants.LINE_MAX_MESSAGES_PER_REQUEST:
        logger.warning(
            "Truncating message list", extra={"count": len(messages), "limit": Constants.LINE_MAX_MESSAGES_PER_REQUEST}
        )
    return messages[: Constants.LINE_MAX_MESSAGES_PER_REQUEST]


async def reply_message(*, reply_token: str, messages: list[dict[str, Any]]) -> SendMessageResult:
    """Answer the turn identified by reply_token."""
    return await _post(path=REPLY_PATH, payload={"replyToken": reply_token, "messages": _limit(messages)})


async def push_message(*, user_id: str, messages: list[dict[str, Any]]) -> SendMessageResult:
    """Send messages to a user outside of any turn."""
    return await _post(path=PUSH_PATH, payload={"to": user_id, "messages": _limit(messages)})
