"""Item store: persistence of stock items in the stock_items collection.

Every owner-scoped lookup filters on both user_id and id, so a user can never
read or change another user's item by guessing its ID.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from stockpile.core import db_client
from stockpile.core.config import Constants
from stockpile.core.db_client import DatabaseError, sanitize_param
from stockpile.core.errors import ItemNotFoundError, StoreError
from stockpile.core.logging import span
from stockpile.domain.stock import StockItem, StockItemCreate


logger = logging.getLogger(__name__)

COLLECTION = "stock_items"


def _to_item(record: dict[str, Any]) -> StockItem:
    return StockItem.model_validate(record)


def _owner_filter(user_id: str, item_id: str) -> str:
    return f'user_id = "{sanitize_param(user_id)}" && id = "{sanitize_param(item_id)}"'


async def create_item(*, item: StockItemCreate) -> StockItem:
    """Persist a new item with a fresh ID and timestamps.

    Raises:
        StoreError: If the database write fails
    """
    with span("item_store.create_item"):
        now = datetime.now(UTC)
        data = {
            **item.model_dump(mode="json"),
            "created_at": now,
            "updated_at": now,
        }
        try:
            record = await db_client.create_record(collection=COLLECTION, data=data)
        except (DatabaseError, db_client.RecordNotFoundError) as e:
            msg = f"Failed to create item for {item.user_id}: {e}"
            raise StoreError(msg) from e

        stored = _to_item(record)
        logger.info("Created stock item", extra={"user_id": item.user_id, "item_id": stored.id})
        return stored


async def get_item(*, user_id: str, item_id: str) -> StockItem:
    """Fetch one of the user's items.

    Raises:
        ItemNotFoundError: If the user has no item with this ID
        StoreError: If the database read fails
    """
    with span("item_store.get_item"):
        try:
            record = await db_client.get_first_record(
                collection=COLLECTION,
                filter_query=_owner_filter(user_id, item_id),
            )
        except DatabaseError as e:
            msg = f"Failed to read item {item_id}: {e}"
            raise StoreError(msg) from e

        if record is None:
            raise ItemNotFoundError(user_id, item_id)
        return _to_item(record)


async def list_items(*, user_id: str) -> list[StockItem]:
    """All of the user's items, soonest expiry first."""
    with span("item_store.list_items"):
        items: list[StockItem] = []
        page = 1
        while True:
            try:
                records = await db_client.list_records(
                    collection=COLLECTION,
                    filter_query=f'user_id = "{sanitize_param(user_id)}"',
                    sort="expiry_date ASC",
                    page=page,
                    per_page=Constants.DEFAULT_PER_PAGE_LIMIT,
                )
            except DatabaseError as e:
                msg = f"Failed to list items for {user_id}: {e}"
                raise StoreError(msg) from e

            items.extend(_to_item(record) for record in records)
            if len(records) < Constants.DEFAULT_PER_PAGE_LIMIT:
                break
            page += 1

        logger.debug("Listed stock items", extra={"user_id": user_id, "count": len(items)})
        return items


async def update_quantity(*, user_id: str, item_id: str, quantity: int) -> StockItem:
    """Set a new quantity on one of the user's items.

    Raises:
        ValueError: If quantity is below 1 (an empty item must be deleted instead)
        ItemNotFoundError: If the user has no item with this ID
        StoreError: If the database write fails
    """
    if quantity < 1:
        msg = f"Quantity must be at least 1, got {quantity}"
        raise ValueError(msg)

    with span("item_store.update_quantity"):
        await get_item(user_id=user_id, item_id=item_id)
        try:
            record = await db_client.update_record(
                collection=COLLECTION,
                record_id=item_id,
                data={"quantity": quantity, "updated_at": datetime.now(UTC)},
            )
        except db_client.RecordNotFoundError:
            raise ItemNotFoundError(user_id, item_id) from None
        except DatabaseError as e:
            msg = f"Failed to update item {item_id}: {e}"
            raise StoreError(msg) from e

        logger.info("Updated stock quantity", extra={"user_id": user_id, "item_id": item_id, "quantity": quantity})
        return _to_item(record)


async def delete_item(*, user_id: str, item_id: str) -> None:
    """Delete one of the user's items.

    Raises:
        ItemNotFoundError: If the user has no item with this ID
        StoreError: If the database write fails
    """
    with span("item_store.delete_item"):
        await get_item(user_id=user_id, item_id=item_id)
        try:
            await db_client.delete_record(collection=COLLECTION, record_id=item_id)
        except db_client.RecordNotFoundError:
            raise ItemNotFoundError(user_id, item_id) from None
        except DatabaseError as e:
            msg = f"Failed to delete item {item_id}: {e}"
            raise StoreError(msg) from e

        logger.info("Deleted stock item", extra={"user_id": user_id, "item_id": item_id})


async def scan_all_items() -> list[StockItem]:
    """Every item of every user. Used only by the notification run."""
    with span("item_store.scan_all_items"):
        items: list[StockItem] = []
        page = 1
        while True:
            try:
                records = await db_client.list_records(
                    collection=COLLECTION,
                    sort="id ASC",
                    page=page,
                    per_page=Constants.DEFAULT_PER_PAGE_LIMIT,
                )
            except DatabaseError as e:
                msg = f"Failed to scan stock items: {e}"
                raise StoreError(msg) from e

            items.extend(_to_item(record) for record in records)
            if len(records) < Constants.DEFAULT_PER_PAGE_LIMIT:
                break
            page += 1

        logger.info("Scanned stock items", extra={"count": len(items)})
        return items
