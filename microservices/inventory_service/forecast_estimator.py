"""
Forecast Estimator

Flat-average consumption forecast from daily totals.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from .models import ConsumptionEvent, DailyQuantity, InventoryItem, ItemForecast

# Fewer distinct days than this yields an all-zero forecast
MIN_HISTORY_DAYS = 3
DEFAULT_HORIZON_DAYS = 7
HISTORY_DISPLAY_DAYS = 7


def group_by_day(events: Iterable[ConsumptionEvent]) -> Dict[date, float]:
    """Sum event quantities per calendar day (days without events are absent)"""
    grouped: Dict[date, float] = {}
    for event in events:
        grouped[event.consumption_date] = grouped.get(event.consumption_date, 0.0) + event.quantity
    return grouped


def forecast(grouped: Dict[date, float], horizon_days: int = DEFAULT_HORIZON_DAYS) -> List[float]:
    """
    Predict daily consumption for the next horizon_days.

    Average over days that have data, repeated for each day of the horizon.
    With under three days of history the prediction is all zeros.
    """
    if len(grouped) < MIN_HISTORY_DAYS:
        return [0.0] * horizon_days
    average = sum(grouped.values()) / len(grouped)
    return [average] * horizon_days


def build_item_forecast(
    item: InventoryItem,
    events: Iterable[ConsumptionEvent],
    today: Optional[date] = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> ItemForecast:
    """Last seven days of actuals (zero-filled) plus the next horizon_days of predictions"""
    today = today or date.today()
    grouped = group_by_day(e for e in events if e.item_id == item.item_id)

    historical = [
        DailyQuantity(day=day, quantity=grouped.get(day, 0.0))
        for day in (today - timedelta(days=offset) for offset in range(HISTORY_DISPLAY_DAYS - 1, -1, -1))
    ]
    predicted = [
        DailyQuantity(day=today + timedelta(days=offset + 1), quantity=quantity)
        for offset, quantity in enumerate(forecast(grouped, horizon_days))
    ]

    return ItemForecast(
        item_id=item.item_id,
        item_name=item.name,
        unit=item.unit,
        history_days=len(grouped),
        historical=historical,
        predicted=predicted,
    )


__all__ = ["group_by_day", "forecast", "build_item_forecast"]
