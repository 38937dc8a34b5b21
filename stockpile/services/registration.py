"""Registration flow: a per-user state machine driven one turn at a time.

States advance idle -> selecting_category -> entering_name ->
entering_quantity -> entering_expiry -> confirming -> idle. Only a confirm
signal in the confirming state writes to the item store.
"""

import logging
from datetime import date
from enum import StrEnum
from typing import NamedTuple

from stockpile.core.errors import FieldValidationError, StoreError, ValidationErrorKind
from stockpile.core.logging import span
from stockpile.domain.session import ConfirmingSession, Session, SessionState
from stockpile.domain.stock import StockItem, StockItemCreate
from stockpile.services import item_store, validators
from stockpile.services.session_store import session_store


logger = logging.getLogger(__name__)


class TurnSignal(StrEnum):
    """What the user did in one turn."""

    TEXT = "text"
    START = "start"
    LIST = "list"
    HELP = "help"
    CONFIRM = "confirm"
    CANCEL = "cancel"


class TurnIntent(StrEnum):
    """What the reply to a turn should do."""

    PROMPT = "prompt"  # ask for the field of session.state
    CONFIRM = "confirm"  # show the confirmation summary
    SUCCESS = "success"
    CANCELLED = "cancelled"
    ERROR = "error"  # validation error (error set) or item or session store failure (error None)
    MENU = "menu"
    SHOW_LIST = "show_list"
    SHOW_HELP = "show_help"


class TurnResult(NamedTuple):
    """Outcome of one turn."""

    intent: TurnIntent
    session: Session
    error: ValidationErrorKind | None = None
    item: StockItem | None = None


# Keywords recognised in free text while idle, checked in order
_TEXT_COMMANDS: tuple[tuple[str, TurnSignal], ...] = (
    ("登録", TurnSignal.START),
    ("一覧", TurnSignal.LIST),
    ("ヘルプ", TurnSignal.HELP),
)


def parse_text_command(text: str) -> TurnSignal | None:
    """Map idle free text to a top-level command, or None."""
    for keyword, signal in _TEXT_COMMANDS:
        if keyword in text:
            return signal
    return None


async def handle_turn(
    *,
    user_id: str,
    signal: TurnSignal,
    text: str = "",
    today: date | None = None,
) -> TurnResult:
    """Advance the user's registration session by one turn.

    Args:
        user_id: LINE user ID
        signal: The kind of input received
        text: Message text (for TurnSignal.TEXT)
        today: Reference date for the past-date check (defaults to today)

    Returns:
        TurnResult with the reply intent and the session after the turn
    """
    with span("registration.handle_turn"):
        session = await session_store.get(user_id)

        if signal == TurnSignal.TEXT and session.state == SessionState.IDLE:
            command = parse_text_command(text)
            if command is None:
                return TurnResult(TurnIntent.MENU, session)
            signal = command

        if signal == TurnSignal.LIST:
            return TurnResult(TurnIntent.SHOW_LIST, session)
        if signal == TurnSignal.HELP:
            return TurnResult(TurnIntent.SHOW_HELP, session)

        if signal == TurnSignal.START:
            return await _start(user_id)

        if signal == TurnSignal.CANCEL:
            if session.state == SessionState.IDLE:
                return TurnResult(TurnIntent.MENU, session)
            logger.info("Registration cancelled", extra={"user_id": user_id, "state": session.state})
            return TurnResult(TurnIntent.CANCELLED, await session_store.reset(user_id))

        if signal == TurnSignal.CONFIRM:
            if isinstance(session, ConfirmingSession):
                return await _complete(session)
            if session.state == SessionState.IDLE:
                return TurnResult(TurnIntent.MENU, session)
            return TurnResult(TurnIntent.PROMPT, session)

        return await _handle_input(session, text, today=today)


async def _start(user_id: str) -> TurnResult:
    idle = await session_store.reset(user_id)
    try:
        session = await session_store.update(idle, state=SessionState.SELECTING_CATEGORY)
    except StoreError as e:
        logger.error("Failed to start registration", extra={"user_id": user_id, "error": str(e)})
        return TurnResult(TurnIntent.ERROR, idle)

    logger.info("Registration started", extra={"user_id": user_id})
    return TurnResult(TurnIntent.PROMPT, session)


async def _handle_input(session: Session, text: str, *, today: date | None) -> TurnResult:
    user_id = session.user_id
    try:
        match session.state:
            case SessionState.SELECTING_CATEGORY:
                category = validators.validate_category(text)
                updated = await session_store.update(
                    session, state=SessionState.ENTERING_NAME, draft={"category": category}
                )
            case SessionState.ENTERING_NAME:
                name = validators.validate_name(text)
                updated = await session_store.update(
                    session, state=SessionState.ENTERING_QUANTITY, draft={"name": name}
                )
            case SessionState.ENTERING_QUANTITY:
                quantity = validators.validate_quantity(text)
                updated = await session_store.update(
                    session, state=SessionState.ENTERING_EXPIRY, draft={"quantity": quantity}
                )
            case SessionState.ENTERING_EXPIRY:
                expiry_date = validators.validate_expiry_date(text, today=today)
                updated = await session_store.update(
                    session, state=SessionState.CONFIRMING, draft={"expiry_date": expiry_date}
                )
                return TurnResult(TurnIntent.CONFIRM, updated)
            case _:
                # Free text while confirming
                return TurnResult(TurnIntent.MENU, session)
    except FieldValidationError as e:
        logger.info("Registration input rejected", extra={"user_id": user_id, "state": session.state, "kind": e.kind})
        return TurnResult(TurnIntent.ERROR, session, error=e.kind)
    except StoreError as e:
        logger.error(
            "Failed to save registration step",
            extra={"user_id": user_id, "state": session.state, "error": str(e)},
        )
        return TurnResult(TurnIntent.ERROR, session)

    return TurnResult(TurnIntent.PROMPT, updated)


async def _complete(session: ConfirmingSession) -> TurnResult:
    """Write the drafted item and return to idle.

    A store failure leaves the session in confirming so the user can confirm
    again. A retried confirm after an unacknowledged write can create a
    duplicate item.
    """
    new_item = StockItemCreate(
        user_id=session.user_id,
        name=session.name,
        category=session.category,
        quantity=session.quantity,
        expiry_date=session.expiry_date,
    )
    try:
        item = await item_store.create_item(item=new_item)
    except StoreError as e:
        logger.error("Failed to save registered item", extra={"user_id": session.user_id, "error": str(e)})
        return TurnResult(TurnIntent.ERROR, session)

    idle = await session_store.reset(session.user_id)
    logger.info("Registration completed", extra={"user_id": session.user_id, "item_id": item.id})
    return TurnResult(TurnIntent.SUCCESS, idle, item=item)
