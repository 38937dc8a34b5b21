"""Turn results rendered as LINE reply messages."""

from datetime import date

from stockpile.core import message_templates
from stockpile.domain.session import ConfirmingSession, Session, SessionState
from stockpile.interface import line_messages
from stockpile.interface.line_messages import Message
from stockpile.services import inventory_service
from stockpile.services.registration import TurnIntent, TurnResult


def prompt_for(session: Session) -> Message:
    """The question asked in the session's current state."""
    if isinstance(session, ConfirmingSession):
        return line_messages.registration_confirm(
            name=session.name,
            category=session.category,
            quantity=session.quantity,
            expiry_date=session.expiry_date,
        )

    match session.state:
        case SessionState.SELECTING_CATEGORY:
            return line_messages.category_quick_reply()
        case SessionState.ENTERING_NAME:
            return line_messages.text_message(message_templates.REGISTER_NAME)
        case SessionState.ENTERING_QUANTITY:
            return line_messages.quantity_quick_reply()
        case SessionState.ENTERING_EXPIRY:
            return line_messages.text_message(message_templates.REGISTER_EXPIRY)
        case _:
            return line_messages.text_message(message_templates.USE_MENU)


async def stock_list_reply(*, user_id: str, today: date | None = None) -> list[Message]:
    grouped = await inventory_service.list_items_by_category(user_id=user_id)
    return [line_messages.stock_list(grouped, today=today)]


async def render_turn(result: TurnResult, *, today: date | None = None) -> list[Message]:
    """Build the reply for one registration turn."""
    match result.intent:
        case TurnIntent.PROMPT | TurnIntent.CONFIRM:
            return [prompt_for(result.session)]
        case TurnIntent.SUCCESS:
            return [line_messages.text_message(message_templates.REGISTER_SUCCESS)]
        case TurnIntent.CANCELLED:
            return [line_messages.text_message(message_templates.REGISTER_CANCEL)]
        case TurnIntent.ERROR if result.error is not None:
            return [
                line_messages.text_message(message_templates.validation_error(result.error)),
                prompt_for(result.session),
            ]
        case TurnIntent.ERROR:
            # Store failure: the session is unchanged, ask its current step again
            return [line_messages.text_message(message_templates.ERROR_GENERAL), prompt_for(result.session)]
        case TurnIntent.SHOW_LIST:
            return await stock_list_reply(user_id=result.session.user_id, today=today)
        case TurnIntent.SHOW_HELP:
            return [line_messages.text_message(message_templates.HELP)]
        case _:
            return [line_messages.text_message(message_templates.USE_MENU)]
