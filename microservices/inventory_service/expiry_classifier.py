"""
Expiry Classifier

Pure functions deriving freshness and stock indicators from inventory items.
"""

import math
from datetime import date, datetime, timedelta
from typing import Optional, Union

from .models import ExpiryStatus, InventoryItem, InventoryItemView, ItemCategory


# Default days from purchase to expiry per category
SHELF_LIFE_DAYS = {
    ItemCategory.DAIRY: 7,
    ItemCategory.MEAT: 3,
    ItemCategory.SEAFOOD: 2,
    ItemCategory.PRODUCE: 5,
    ItemCategory.BAKERY: 4,
    ItemCategory.GROCERY: 180,
    ItemCategory.FROZEN: 90,
    ItemCategory.PREPARED: 3,
    ItemCategory.BEVERAGE: 14,
    ItemCategory.OTHER: 7,
}
DEFAULT_SHELF_LIFE_DAYS = 7

# Quantity below which an item of the category counts as low stock
LOW_STOCK_THRESHOLDS = {
    ItemCategory.MEAT: 2,
    ItemCategory.PRODUCE: 3,
    ItemCategory.DAIRY: 2,
}
DEFAULT_LOW_STOCK_THRESHOLD = 1

DateLike = Union[date, datetime, str]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def calculate_expiry_date(purchase_date: DateLike, category: Union[ItemCategory, str]) -> date:
    """Purchase date plus the category's shelf life (7 days when unknown)"""
    try:
        days = SHELF_LIFE_DAYS[ItemCategory(category)]
    except ValueError:
        days = DEFAULT_SHELF_LIFE_DAYS
    return _as_date(purchase_date) + timedelta(days=days)


def days_until_expiry(expiry_date: DateLike, now: Optional[DateLike] = None) -> int:
    """
    Whole days from today's midnight to the expiry date's midnight.

    0 on the expiry day itself, negative once expired.
    """
    today = _as_date(now) if now is not None else date.today()
    delta = _as_date(expiry_date) - today
    return math.ceil(delta / timedelta(days=1))


def expiry_status(days: int) -> ExpiryStatus:
    """Map days until expiry to an urgency bucket"""
    if days < 0:
        return ExpiryStatus.EXPIRED
    if days <= 1:
        return ExpiryStatus.CRITICAL
    if days <= 3:
        return ExpiryStatus.WARNING
    return ExpiryStatus.NORMAL


def is_low_stock(item: InventoryItem) -> bool:
    threshold = LOW_STOCK_THRESHOLDS.get(item.category, DEFAULT_LOW_STOCK_THRESHOLD)
    return item.quantity < threshold or item.quantity < DEFAULT_LOW_STOCK_THRESHOLD


def classify(item: InventoryItem, now: Optional[DateLike] = None) -> InventoryItemView:
    """Attach expiry and stock indicators to an item"""
    days = days_until_expiry(item.expiry_date, now)
    return InventoryItemView(
        **item.model_dump(),
        days_until_expiry=days,
        expiry_status=expiry_status(days),
        is_low_stock=is_low_stock(item),
    )


__all__ = [
    "SHELF_LIFE_DAYS",
    "LOW_STOCK_THRESHOLDS",
    "calculate_expiry_date",
    "days_until_expiry",
    "expiry_status",
    "is_low_stock",
    "classify",
]
