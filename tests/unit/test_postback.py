"""Tests for postback data encoding and decoding."""

import pytest

from stockpile.core.errors import PostbackDecodeError
from stockpile.domain import postback
from stockpile.domain.postback import ItemAction, MenuAction, PostbackActionType


@pytest.mark.unit
class TestEncode:
    """Tests for the wire form of postback actions."""

    def test_menu_action(self) -> None:
        assert postback.menu(PostbackActionType.REGISTER) == "action=register"

    def test_item_action_uses_item_id_key(self) -> None:
        assert postback.for_item(PostbackActionType.CONSUME, "abc-123") == "action=consume&itemId=abc-123"

    def test_encoded_item_action_decodes_to_same_action(self) -> None:
        action = ItemAction(action=PostbackActionType.CONFIRM_DELETE, item_id="3f2a-77")

        assert postback.decode(postback.encode(action)) == action


@pytest.mark.unit
class TestDecode:
    """Tests for postback.decode."""

    @pytest.mark.parametrize("name", ["register", "list", "help", "confirm", "cancel"])
    def test_menu_actions(self, name: str) -> None:
        action = postback.decode(f"action={name}")

        assert isinstance(action, MenuAction)
        assert action.action == PostbackActionType(name)

    @pytest.mark.parametrize("name", ["consume", "delete", "confirm_delete", "cancel_delete"])
    def test_item_actions(self, name: str) -> None:
        action = postback.decode(f"action={name}&itemId=item-42")

        assert isinstance(action, ItemAction)
        assert action.item_id == "item-42"

    @pytest.mark.parametrize(
        "data",
        [
            "",
            "action=settings",
            "action=consume",
            "action=consume&itemId=",
            "action=delete&itemId=a%26b",
            "itemId=abc",
            "garbage",
        ],
    )
    def test_rejects_unknown_or_malformed(self, data: str) -> None:
        with pytest.raises(PostbackDecodeError):
            postback.decode(data)
