"""Inventory service for listing, consuming and deleting stock items."""

import logging

from stockpile.core.logging import span
from stockpile.domain.stock import CATEGORY_ORDER, Category, StockItem
from stockpile.models.service_models import ConsumeOutcome, ConsumeResult
from stockpile.services import item_store


logger = logging.getLogger(__name__)


async def consume_item(*, user_id: str, item_id: str) -> ConsumeResult:
    """Consume exactly one unit of an item.

    The item is deleted when its quantity would reach zero, so a stored item
    never has quantity 0.

    Args:
        user_id: LINE user ID of the owner
        item_id: Item to consume

    Returns:
        ConsumeResult with outcome UPDATED or DELETED

    Raises:
        ItemNotFoundError: If the user has no such item (nothing is changed)
        StoreError: If the update or delete fails
    """
    with span("inventory_service.consume_item"):
        item = await item_store.get_item(user_id=user_id, item_id=item_id)
        new_quantity = item.quantity - 1

        if new_quantity <= 0:
            await item_store.delete_item(user_id=user_id, item_id=item_id)
            logger.info("Consumed last unit, item deleted", extra={"user_id": user_id, "item_id": item_id})
            return ConsumeResult(outcome=ConsumeOutcome.DELETED, item=item, remaining=0)

        updated = await item_store.update_quantity(user_id=user_id, item_id=item_id, quantity=new_quantity)
        logger.info(
            "Consumed one unit", extra={"user_id": user_id, "item_id": item_id, "remaining": new_quantity}
        )
        return ConsumeResult(outcome=ConsumeOutcome.UPDATED, item=updated, remaining=new_quantity)


async def get_item_for_deletion(*, user_id: str, item_id: str) -> StockItem:
    """Look up the item a delete confirmation will name.

    Raises:
        ItemNotFoundError: If the user has no such item
    """
    with span("inventory_service.get_item_for_deletion"):
        return await item_store.get_item(user_id=user_id, item_id=item_id)


async def delete_item(*, user_id: str, item_id: str) -> StockItem:
    """Delete an item after the user confirmed. Returns the deleted item."""
    with span("inventory_service.delete_item"):
        item = await item_store.get_item(user_id=user_id, item_id=item_id)
        await item_store.delete_item(user_id=user_id, item_id=item_id)
        logger.info("Item deleted by user", extra={"user_id": user_id, "item_id": item_id})
        return item


async def list_items_by_category(*, user_id: str) -> dict[Category, list[StockItem]]:
    """Group the user's items by category.

    Categories appear in fixed display order and only when non-empty; items
    within a category are ordered by expiry date, soonest first.
    """
    with span("inventory_service.list_items_by_category"):
        items = await item_store.list_items(user_id=user_id)

        grouped: dict[Category, list[StockItem]] = {}
        for category in CATEGORY_ORDER:
            in_category = sorted(
                (item for item in items if item.category == category),
                key=lambda item: (item.expiry_date, item.created_at),
            )
            if in_category:
                grouped[category] = in_category
        return grouped
