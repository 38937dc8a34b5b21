"""LINE webhook endpoint and per-event turn handling."""

import json
import logging
from datetime import date

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request

from stockpile.core import message_templates
from stockpile.core.config import Constants, settings
from stockpile.core.errors import AuthenticationError, classify_error
from stockpile.core.logging import log_with_user_context, span
from stockpile.domain import postback
from stockpile.domain.postback import ItemAction, MenuAction, PostbackActionType
from stockpile.interface import line_messages, line_sender, responses, webhook_security
from stockpile.interface.line_messages import Message
from stockpile.interface.line_parser import FollowEvent, MessageEvent, PostbackEvent, parse_webhook_events
from stockpile.models.service_models import ConsumeOutcome
from stockpile.services import inventory_service, registration
from stockpile.services.registration import TurnSignal


router = APIRouter(prefix="/webhook", tags=["webhook"])
logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Line-Signature"

LineEvent = MessageEvent | PostbackEvent | FollowEvent

_MENU_SIGNALS: dict[PostbackActionType, TurnSignal] = {
    PostbackActionType.REGISTER: TurnSignal.START,
    PostbackActionType.LIST: TurnSignal.LIST,
    PostbackActionType.HELP: TurnSignal.HELP,
    PostbackActionType.CONFIRM: TurnSignal.CONFIRM,
    PostbackActionType.CANCEL: TurnSignal.CANCEL,
}


@router.post("")
async def receive_webhook(request: Request, background_tasks: BackgroundTasks) -> dict[str, str]:
    """Receive a LINE webhook batch.

    The signature is checked against the raw body before anything is parsed;
    a mismatch rejects the whole batch. Accepted events are processed in a
    background task after the 200 response.

    Raises:
        HTTPException: 401 on a bad or missing signature, 400 on a malformed body
    """
    body = await request.body()

    try:
        webhook_security.authenticate_webhook(
            body,
            request.headers.get(SIGNATURE_HEADER),
            settings.line_channel_secret,
        )
    except AuthenticationError as e:
        error_response = classify_error(e)
        logger.warning(
            "Webhook security check failed: %s",
            e,
            extra={"reason": str(e), "error_code": error_response.code, "severity": error_response.severity.value},
        )
        raise HTTPException(status_code=Constants.HTTP_UNAUTHORIZED, detail=str(e)) from e

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=Constants.HTTP_BAD_REQUEST, detail="Invalid JSON payload") from e

    if not isinstance(payload, dict):
        raise HTTPException(status_code=Constants.HTTP_BAD_REQUEST, detail="Invalid JSON payload")

    events = parse_webhook_events(payload)
    if events:
        background_tasks.add_task(process_events, events)

    return {"status": "received"}


async def process_events(events: list[LineEvent]) -> None:
    """Process a batch sequentially in arrival order; one failing event never stops the rest."""
    for event in events:
        try:
            await process_event(event)
        except Exception as e:
            await _handle_event_error(e, event)


async def process_event(event: LineEvent, *, today: date | None = None) -> None:
    """Handle one turn and send its reply."""
    with span("webhook.process_event"):
        if event.user_id is None:
            logger.info("Ignoring event without a user source", extra={"event_type": event.type})
            return

        if isinstance(event, FollowEvent):
            messages = [line_messages.text_message(message_templates.WELCOME)]
        elif isinstance(event, MessageEvent):
            if event.text is None:
                logger.debug("Ignoring non-text message", extra={"message_type": event.message.type})
                return
            messages = await _handle_text(event.user_id, event.text, today=today)
        else:
            messages = await _handle_postback(event.user_id, event.postback.data, today=today)

        await _reply(event, messages)


async def _handle_text(user_id: str, text: str, *, today: date | None) -> list[Message]:
    result = await registration.handle_turn(user_id=user_id, signal=TurnSignal.TEXT, text=text, today=today)
    return await responses.render_turn(result, today=today)


async def _handle_postback(user_id: str, data: str, *, today: date | None) -> list[Message]:
    """Route a postback to the registration flow or an item action.

    Raises:
        PostbackDecodeError: If data is not a known action
        ItemNotFoundError: If an item action names an item the user does not have
        StoreError: If an item action fails to read or write
    """
    action = postback.decode(data)

    if isinstance(action, MenuAction):
        result = await registration.handle_turn(user_id=user_id, signal=_MENU_SIGNALS[action.action], today=today)
        return await responses.render_turn(result, today=today)

    return await _handle_item_action(user_id, action)


async def _handle_item_action(user_id: str, action: ItemAction) -> list[Message]:
    match action.action:
        case PostbackActionType.CONSUME:
            result = await inventory_service.consume_item(user_id=user_id, item_id=action.item_id)
            if result.outcome == ConsumeOutcome.DELETED:
                return [line_messages.text_message(message_templates.UPDATE_DELETED)]
            return [line_messages.text_message(message_templates.UPDATE_SUCCESS)]
        case PostbackActionType.DELETE:
            item = await inventory_service.get_item_for_deletion(user_id=user_id, item_id=action.item_id)
            return [line_messages.delete_confirm(item)]
        case PostbackActionType.CONFIRM_DELETE:
            await inventory_service.delete_item(user_id=user_id, item_id=action.item_id)
            return [line_messages.text_message(message_templates.DELETE_SUCCESS)]
        case _:
            return [line_messages.text_message(message_templates.DELETE_CANCEL)]


async def _reply(event: LineEvent, messages: list[Message]) -> None:
    if not event.reply_token:
        logger.info("No reply token, skipping reply", extra={"user_id": event.user_id})
        return

    result = await line_sender.reply_message(reply_token=event.reply_token, messages=messages)
    if not result.success:
        log_with_user_context(
            logger,
            "warning",
            "Failed to send reply",
            user_id=event.user_id,
            status_code=result.status_code,
            error=result.error,
        )


async def _handle_event_error(e: Exception, event: LineEvent) -> None:
    """Log a failed turn and answer it with the classified user message."""
    error_response = classify_error(e)

    log_with_user_context(
        logger,
        "error",
        "Error processing webhook event",
        user_id=event.user_id,
        event_type=event.type,
        error_code=error_response.code,
        severity=error_response.severity.value,
        error=str(e),
    )

    try:
        await _reply(event, [line_messages.text_message(error_response.message)])
    except Exception as send_error:
        logger.error("Failed to send error message to user: %s", send_error)
