"""Expiry notifications: grouping the inventory by day-offset and pushing batches.

Each run scans every item once, then for each configured offset (30, 7, 0
days, in that order) sends one message per user whose items expire exactly
that many days from today. A failed delivery is logged and the run moves on
to the next user; nothing is retried or deduplicated across runs.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from stockpile.core import dates
from stockpile.core.config import Constants
from stockpile.core.errors import DispatchError
from stockpile.core.logging import span
from stockpile.domain.stock import StockItem
from stockpile.interface import line_messages, line_sender
from stockpile.models.service_models import NotificationResult
from stockpile.services import item_store


logger = logging.getLogger(__name__)


def group_items_by_user(
    items: Iterable[StockItem],
    *,
    target_offset: int,
    today: date,
) -> dict[str, list[StockItem]]:
    """Select items whose expiry is exactly target_offset days after today, grouped by owner.

    Items at any other offset (e.g. 29 or 31 for a 30-day run) are excluded.
    Users without a match are absent from the result; item order and
    duplicates are preserved.
    """
    grouped: dict[str, list[StockItem]] = defaultdict(list)
    for item in items:
        if dates.days_until_expiry(item.expiry_date, reference=today) == target_offset:
            grouped[item.user_id].append(item)
    return dict(grouped)


async def _dispatch_batch(*, user_id: str, items: list[StockItem], offset_days: int) -> None:
    """Push one batch.

    Raises:
        DispatchError: If the Messaging API did not accept the push
    """
    message = line_messages.expiry_notification(items, offset_days=offset_days)
    result = await line_sender.push_message(user_id=user_id, messages=[message])
    if not result.success:
        raise DispatchError(user_id, offset_days, result.error or "unknown error")


async def dispatch_notifications(
    grouped: dict[str, list[StockItem]],
    *,
    offset_days: int,
) -> list[NotificationResult]:
    """Send one batch per user. A failure for one user never stops the others."""
    results: list[NotificationResult] = []
    for user_id, items in grouped.items():
        try:
            await _dispatch_batch(user_id=user_id, items=items, offset_days=offset_days)
        except Exception as e:
            logger.error(
                "Failed to send expiry notification",
                extra={"user_id": user_id, "offset_days": offset_days, "item_count": len(items), "error": str(e)},
            )
            results.append(
                NotificationResult(
                    user_id=user_id, offset_days=offset_days, item_count=len(items), success=False, error=str(e)
                )
            )
            continue

        logger.info(
            "Sent expiry notification",
            extra={"user_id": user_id, "offset_days": offset_days, "item_count": len(items)},
        )
        results.append(NotificationResult(user_id=user_id, offset_days=offset_days, item_count=len(items), success=True))
    return results


async def send_expiry_notifications(*, today: date | None = None) -> list[NotificationResult]:
    """Run one full notification pass.

    Args:
        today: Reference date (defaults to today in the configured timezone)

    Returns:
        One NotificationResult per (user, offset) batch, in dispatch order

    Raises:
        StoreError: If the inventory scan fails (nothing is sent)
    """
    with span("notification_service.send_expiry_notifications"):
        reference = today or dates.today()
        items = await item_store.scan_all_items()

        results: list[NotificationResult] = []
        for offset_days in Constants.NOTIFICATION_OFFSET_DAYS:
            grouped = group_items_by_user(items, target_offset=offset_days, today=reference)
            logger.info(
                "Expiry notification batches",
                extra={"offset_days": offset_days, "users": len(grouped), "date": reference.isoformat()},
            )
            results.extend(await dispatch_notifications(grouped, offset_days=offset_days))

        logger.info(
            "Expiry notification run complete",
            extra={
                "batches": len(results),
                "successful": sum(1 for r in results if r.success),
                "failed": sum(1 for r in results if not r.success),
            },
        )
        return results
