"""Postback action schema with a single encode/decode pair.

Wire form is a flat query string, e.g. ``action=consume&itemId=3f2a...``.
"""

from enum import StrEnum
from typing import Annotated, Literal
from urllib.parse import parse_qsl, urlencode

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from stockpile.core.errors import PostbackDecodeError


class PostbackActionType(StrEnum):
    """Postback action kinds."""

    REGISTER = "register"
    LIST = "list"
    HELP = "help"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    CONSUME = "consume"
    DELETE = "delete"
    CONFIRM_DELETE = "confirm_delete"
    CANCEL_DELETE = "cancel_delete"


class MenuAction(BaseModel):
    """An action without payload (rich menu buttons and registration confirm)."""

    model_config = ConfigDict(frozen=True)

    action: Literal[
        PostbackActionType.REGISTER,
        PostbackActionType.LIST,
        PostbackActionType.HELP,
        PostbackActionType.CONFIRM,
        PostbackActionType.CANCEL,
    ]


class ItemAction(BaseModel):
    """An action that targets one stock item."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    action: Literal[
        PostbackActionType.CONSUME,
        PostbackActionType.DELETE,
        PostbackActionType.CONFIRM_DELETE,
        PostbackActionType.CANCEL_DELETE,
    ]
    item_id: str = Field(..., alias="itemId", min_length=1, pattern=r"^[A-Za-z0-9-]+$")


PostbackAction = Annotated[MenuAction | ItemAction, Field(discriminator="action")]

_postback_adapter: TypeAdapter[PostbackAction] = TypeAdapter(PostbackAction)


def encode(action: MenuAction | ItemAction) -> str:
    """Serialize an action to postback data."""
    return urlencode(action.model_dump(mode="json", by_alias=True))


def decode(data: str) -> MenuAction | ItemAction:
    """Parse postback data into an action.

    Raises:
        PostbackDecodeError: If the data is not a known, well-formed action
    """
    try:
        fields = dict(parse_qsl(data, strict_parsing=True))
    except ValueError as e:
        msg = f"Malformed postback data: {data!r}"
        raise PostbackDecodeError(msg) from e

    try:
        return _postback_adapter.validate_python(fields)
    except ValidationError as e:
        msg = f"Unknown postback action: {data!r}"
        raise PostbackDecodeError(msg) from e


def menu(action: PostbackActionType) -> str:
    return encode(MenuAction(action=action))


def for_item(action: PostbackActionType, item_id: str) -> str:
    return encode(ItemAction(action=action, item_id=item_id))
