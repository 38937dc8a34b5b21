"""Tests for expiry notification grouping and dispatch."""

from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from stockpile.core.errors import StoreError
from stockpile.domain.stock import Category, StockItem
from stockpile.interface.line_sender import SendMessageResult
from stockpile.services import notification_service


def make_item(item_id: str, user_id: str, expiry: date, *, name: str = "保存水", quantity: int = 1) -> StockItem:
    now = datetime(2030, 1, 1, tzinfo=UTC)
    return StockItem(
        id=item_id,
        user_id=user_id,
        name=name,
        category=Category.WATER,
        quantity=quantity,
        expiry_date=expiry,
        created_at=now,
        updated_at=now,
    )


@pytest.mark.unit
class TestGroupItemsByUser:
    """Tests for group_items_by_user."""

    def test_only_exact_offset_matches(self, today: date) -> None:
        items = [
            make_item("a", "U1", today + timedelta(days=29)),
            make_item("b", "U1", today + timedelta(days=30)),
            make_item("c", "U1", today + timedelta(days=31)),
        ]

        grouped = notification_service.group_items_by_user(items, target_offset=30, today=today)

        assert grouped == {"U1": [items[1]]}

    def test_groups_per_user(self, today: date) -> None:
        expiry = today + timedelta(days=7)
        items = [
            make_item("a", "U1", expiry),
            make_item("b", "U2", expiry),
            make_item("c", "U1", expiry),
        ]

        grouped = notification_service.group_items_by_user(items, target_offset=7, today=today)

        assert set(grouped) == {"U1", "U2"}
        assert [item.id for item in grouped["U1"]] == ["a", "c"]

    def test_same_name_items_are_not_merged(self, today: date) -> None:
        items = [make_item("a", "U1", today, name="缶詰"), make_item("b", "U1", today, name="缶詰")]

        grouped = notification_service.group_items_by_user(items, target_offset=0, today=today)

        assert len(grouped["U1"]) == 2

    def test_expired_items_never_match(self, today: date) -> None:
        items = [make_item("a", "U1", today - timedelta(days=1))]

        for offset in (30, 7, 0):
            assert notification_service.group_items_by_user(items, target_offset=offset, today=today) == {}

    def test_empty_input(self, today: date) -> None:
        assert notification_service.group_items_by_user([], target_offset=0, today=today) == {}


@pytest.mark.unit
class TestDispatchNotifications:
    """Tests for dispatch_notifications."""

    async def test_sends_one_push_per_user(self, today: date) -> None:
        grouped = {
            "U1": [make_item("a", "U1", today), make_item("b", "U1", today)],
            "U2": [make_item("c", "U2", today)],
        }

        with patch(
            "stockpile.services.notification_service.line_sender.push_message", new_callable=AsyncMock
        ) as mock_push:
            mock_push.return_value = SendMessageResult(success=True, status_code=200)

            results = await notification_service.dispatch_notifications(grouped, offset_days=0)

        assert mock_push.await_count == 2
        assert [r.user_id for r in results] == ["U1", "U2"]
        assert all(r.success for r in results)
        assert results[0].item_count == 2
        pushed_to = [call.kwargs["user_id"] for call in mock_push.await_args_list]
        assert pushed_to == ["U1", "U2"]
        assert len(mock_push.await_args_list[0].kwargs["messages"]) == 1

    async def test_failure_for_one_user_does_not_stop_others(self, today: date) -> None:
        """A rejected push and a raised error are both recorded and the run continues."""
        grouped = {
            "U1": [make_item("a", "U1", today)],
            "U2": [make_item("b", "U2", today)],
            "U3": [make_item("c", "U3", today)],
        }

        with patch(
            "stockpile.services.notification_service.line_sender.push_message", new_callable=AsyncMock
        ) as mock_push:
            mock_push.side_effect = [
                SendMessageResult(success=False, status_code=400, error="Client error: invalid user"),
                RuntimeError("connection reset"),
                SendMessageResult(success=True, status_code=200),
            ]

            results = await notification_service.dispatch_notifications(grouped, offset_days=7)

        assert mock_push.await_count == 3
        assert [r.success for r in results] == [False, False, True]
        assert "invalid user" in (results[0].error or "")
        assert "connection reset" in (results[1].error or "")


@pytest.mark.unit
class TestSendExpiryNotifications:
    """Tests for the full notification run."""

    async def test_dispatches_offsets_in_order(self, today: date) -> None:
        items = [
            make_item("zero", "U1", today),
            make_item("seven", "U1", today + timedelta(days=7)),
            make_item("thirty", "U2", today + timedelta(days=30)),
            make_item("ignored", "U2", today + timedelta(days=8)),
        ]

        with (
            patch(
                "stockpile.services.notification_service.item_store.scan_all_items", new_callable=AsyncMock
            ) as mock_scan,
            patch(
                "stockpile.services.notification_service.line_sender.push_message", new_callable=AsyncMock
            ) as mock_push,
        ):
            mock_scan.return_value = items
            mock_push.return_value = SendMessageResult(success=True, status_code=200)

            results = await notification_service.send_expiry_notifications(today=today)

        mock_scan.assert_awaited_once()
        assert [(r.user_id, r.offset_days) for r in results] == [("U2", 30), ("U1", 7), ("U1", 0)]

    async def test_nothing_due_sends_nothing(self, today: date) -> None:
        with (
            patch(
                "stockpile.services.notification_service.item_store.scan_all_items", new_callable=AsyncMock
            ) as mock_scan,
            patch(
                "stockpile.services.notification_service.line_sender.push_message", new_callable=AsyncMock
            ) as mock_push,
        ):
            mock_scan.return_value = [make_item("a", "U1", today + timedelta(days=12))]

            results = await notification_service.send_expiry_notifications(today=today)

        assert results == []
        mock_push.assert_not_awaited()

    async def test_scan_failure_propagates(self, today: date) -> None:
        with patch(
            "stockpile.services.notification_service.item_store.scan_all_items", new_callable=AsyncMock
        ) as mock_scan:
            mock_scan.side_effect = StoreError("database locked")

            with pytest.raises(StoreError):
                await notification_service.send_expiry_notifications(today=today)
