"""Domain models and DTOs."""

from stockpile.domain.postback import ItemAction, MenuAction, PostbackAction, PostbackActionType
from stockpile.domain.session import (
    ConfirmingSession,
    EnteringExpirySession,
    EnteringNameSession,
    EnteringQuantitySession,
    IdleSession,
    SelectingCategorySession,
    Session,
    SessionState,
)
from stockpile.domain.stock import CATEGORY_LABELS, Category, StockItem, StockItemCreate


__all__ = [
    "CATEGORY_LABELS",
    "Category",
    "ConfirmingSession",
    "EnteringExpirySession",
    "EnteringNameSession",
    "EnteringQuantitySession",
    "IdleSession",
    "ItemAction",
    "MenuAction",
    "PostbackAction",
    "PostbackActionType",
    "SelectingCategorySession",
    "Session",
    "SessionState",
    "StockItem",
    "StockItemCreate",
]
