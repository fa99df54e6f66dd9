"""
Unit Tests for Expiry Classifier

Shelf-life defaults, days-until-expiry arithmetic, urgency buckets and
low-stock thresholds.
"""

import pytest
from datetime import date, datetime

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.inventory_service.expiry_classifier import (
    SHELF_LIFE_DAYS,
    calculate_expiry_date,
    classify,
    days_until_expiry,
    expiry_status,
    is_low_stock,
)
from microservices.inventory_service.models import (
    ExpiryStatus,
    InventoryItem,
    ItemCategory,
    ItemUnit,
)


def make_item(category: ItemCategory, quantity: float, expiry_date: date = date(2023, 1, 8)) -> InventoryItem:
    return InventoryItem(
        item_id="inv_unit_1",
        name="Test Item",
        quantity=quantity,
        unit=ItemUnit.KG,
        category=category,
        purchase_date=date(2023, 1, 1),
        expiry_date=expiry_date,
    )


@pytest.mark.unit
class TestCalculateExpiryDate:
    """Shelf-life based expiry dates"""

    def test_meat_expires_after_three_days(self):
        assert calculate_expiry_date("2023-01-01", "meat") == date(2023, 1, 4)

    def test_dairy_expires_after_seven_days(self):
        assert calculate_expiry_date("2023-01-01", "dairy") == date(2023, 1, 8)

    def test_accepts_date_and_enum(self):
        assert calculate_expiry_date(date(2023, 1, 1), ItemCategory.SEAFOOD) == date(2023, 1, 3)

    def test_grocery_long_shelf_life(self):
        assert calculate_expiry_date(date(2023, 1, 1), ItemCategory.GROCERY) == date(2023, 6, 30)

    def test_unknown_category_defaults_to_seven_days(self):
        assert calculate_expiry_date("2023-01-01", "spices") == date(2023, 1, 8)

    def test_every_category_has_shelf_life(self):
        assert set(SHELF_LIFE_DAYS) == set(ItemCategory)


@pytest.mark.unit
class TestDaysUntilExpiry:
    """Calendar-day difference to the expiry date"""

    def test_zero_on_expiry_day(self):
        assert days_until_expiry(date(2023, 1, 10), now=date(2023, 1, 10)) == 0

    def test_time_of_day_is_ignored(self):
        assert days_until_expiry(date(2023, 1, 10), now=datetime(2023, 1, 10, 23, 59)) == 0
        assert days_until_expiry(date(2023, 1, 11), now=datetime(2023, 1, 10, 0, 1)) == 1

    def test_negative_once_expired(self):
        assert days_until_expiry(date(2023, 1, 9), now=date(2023, 1, 10)) == -1

    def test_future_expiry(self):
        assert days_until_expiry("2023-01-13", now="2023-01-10") == 3

    def test_pure(self):
        first = days_until_expiry(date(2023, 2, 1), now=date(2023, 1, 10))
        second = days_until_expiry(date(2023, 2, 1), now=date(2023, 1, 10))
        assert first == second == 22


@pytest.mark.unit
class TestExpiryStatus:
    """Urgency buckets"""

    @pytest.mark.parametrize(
        "days,expected",
        [
            (-5, ExpiryStatus.EXPIRED),
            (-1, ExpiryStatus.EXPIRED),
            (0, ExpiryStatus.CRITICAL),
            (1, ExpiryStatus.CRITICAL),
            (2, ExpiryStatus.WARNING),
            (3, ExpiryStatus.WARNING),
            (4, ExpiryStatus.NORMAL),
            (30, ExpiryStatus.NORMAL),
        ],
    )
    def test_bucket(self, days, expected):
        assert expiry_status(days) == expected


@pytest.mark.unit
class TestIsLowStock:
    """Per-category low-stock thresholds"""

    def test_dairy_low_at_one(self):
        assert is_low_stock(make_item(ItemCategory.DAIRY, 1)) is True

    def test_dairy_not_low_at_two(self):
        assert is_low_stock(make_item(ItemCategory.DAIRY, 2)) is False

    def test_meat_threshold(self):
        assert is_low_stock(make_item(ItemCategory.MEAT, 1.5)) is True
        assert is_low_stock(make_item(ItemCategory.MEAT, 2)) is False

    def test_produce_threshold(self):
        assert is_low_stock(make_item(ItemCategory.PRODUCE, 2.9)) is True
        assert is_low_stock(make_item(ItemCategory.PRODUCE, 3)) is False

    def test_any_category_below_one(self):
        assert is_low_stock(make_item(ItemCategory.GROCERY, 0.5)) is True
        assert is_low_stock(make_item(ItemCategory.GROCERY, 1)) is False


@pytest.mark.unit
class TestClassify:
    """Item view with derived indicators"""

    def test_view_carries_item_and_indicators(self):
        item = make_item(ItemCategory.DAIRY, 1, expiry_date=date(2023, 1, 11))

        view = classify(item, now=date(2023, 1, 10))

        assert view.item_id == item.item_id
        assert view.quantity == 1
        assert view.days_until_expiry == 1
        assert view.expiry_status == ExpiryStatus.CRITICAL
        assert view.is_low_stock is True

    def test_expired_item(self):
        item = make_item(ItemCategory.MEAT, 5, expiry_date=date(2023, 1, 1))

        view = classify(item, now=date(2023, 1, 10))

        assert view.days_until_expiry == -9
        assert view.expiry_status == ExpiryStatus.EXPIRED
        assert view.is_low_stock is False
