"""Stock item domain models and enums."""

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class Category(StrEnum):
    """Closed set of stockpile categories."""

    WATER = "water"
    STAPLE = "staple"
    DISH = "dish"
    SNACK = "snack"
    OTHER = "other"


CATEGORY_LABELS: dict[Category, str] = {
    Category.WATER: "水",
    Category.STAPLE: "主食",
    Category.DISH: "おかず",
    Category.SNACK: "お菓子",
    Category.OTHER: "その他",
}

# Display order for category pickers and the stock list
CATEGORY_ORDER: tuple[Category, ...] = tuple(Category)


def category_label(category: Category | str) -> str:
    return CATEGORY_LABELS.get(Category(category), str(category))


class StockItem(BaseModel):
    """A persisted stockpile item owned by one LINE user."""

    id: str = Field(..., description="Opaque item ID (UUID)")
    user_id: str = Field(..., description="LINE user ID of the owner")
    name: str = Field(..., min_length=1, description="Display name (e.g. '保存水 2L')")
    category: Category = Field(..., description="Item category")
    quantity: int = Field(..., ge=1, description="Units in stock; an item at zero is deleted")
    expiry_date: date = Field(..., description="Best-before date")
    created_at: datetime = Field(..., description="When the item was registered")
    updated_at: datetime = Field(..., description="When the item was last changed")


class StockItemCreate(BaseModel):
    """Fields collected by a completed registration."""

    user_id: str
    name: str = Field(..., min_length=1)
    category: Category
    quantity: int = Field(..., ge=1)
    expiry_date: date
