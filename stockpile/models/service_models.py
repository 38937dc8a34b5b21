"""Pydantic models for service layer return types."""

from enum import StrEnum

from pydantic import BaseModel

from stockpile.domain.stock import StockItem


class ConsumeOutcome(StrEnum):
    UPDATED = "updated"
    DELETED = "deleted"


class ConsumeResult(BaseModel):
    """Result of consuming one unit of an item."""

    outcome: ConsumeOutcome
    item: StockItem  # after the update, or as it was before deletion
    remaining: int


class NotificationResult(BaseModel):
    """Delivery result for one (user, offset) notification batch."""

    user_id: str
    offset_days: int
    item_count: int
    success: bool
    error: str | None = None
