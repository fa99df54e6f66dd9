"""
Inventory Service Business Logic

Composes the ledger, depletion recorder, sharing matcher and forecast
estimator over one document store, and derives the dashboard and report
views from them.
"""

import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Union

from .depletion_recorder import DepletionRecorder
from .expiry_classifier import classify, is_low_stock
from .forecast_estimator import build_item_forecast
from .inventory_ledger import InventoryLedger
from .models import (
    ConsumptionEvent,
    DashboardSummary,
    Identity,
    InventoryItem,
    InventoryItemCreateRequest,
    InventoryItemUpdateRequest,
    InventoryItemView,
    ItemFilter,
    ItemForecast,
    SharingRequest,
    UsageReport,
    WasteBreakdown,
    WasteEvent,
    WasteReason,
)
from .protocols import DocumentStoreError, DocumentStoreProtocol
from .sharing_matcher import SCOPE_ALL, SharingMatcher

logger = logging.getLogger(__name__)


class InventoryService:
    """Inventory service business logic layer"""

    def __init__(
        self,
        store: DocumentStoreProtocol,
        expiring_window_days: int = 3,
        forecast_window_days: int = 30,
        forecast_horizon_days: int = 7,
        report_window_days: int = 30,
        sharing_scope: str = SCOPE_ALL,
    ):
        self.store = store
        self.ledger = InventoryLedger(store)
        self.recorder = DepletionRecorder(store, self.ledger)
        self.sharing = SharingMatcher(store, self.ledger, scope=sharing_scope)

        self.expiring_window_days = expiring_window_days
        self.forecast_window_days = forecast_window_days
        self.forecast_horizon_days = forecast_horizon_days
        self.report_window_days = report_window_days

    # ====================
    # Inventory
    # ====================

    async def create_item(
        self,
        fields: Union[InventoryItemCreateRequest, Dict[str, Any]],
        owner_id: Optional[str] = None,
    ) -> InventoryItemView:
        return classify(await self.ledger.create_item(fields, owner_id=owner_id))

    async def get_item(self, item_id: str) -> InventoryItemView:
        return classify(await self.ledger.get_item(item_id))

    async def update_item(
        self,
        item_id: str,
        fields: Union[InventoryItemUpdateRequest, Dict[str, Any]],
    ) -> InventoryItemView:
        return classify(await self.ledger.update_item(item_id, fields))

    async def delete_item(self, item_id: str) -> None:
        await self.ledger.delete_item(item_id)

    async def list_items(
        self,
        item_filter: ItemFilter = ItemFilter.ALL,
        days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[InventoryItemView]:
        days = self.expiring_window_days if days is None else days
        items = await self.ledger.list_items(item_filter, days=days, today=today)
        return [classify(item, today) for item in items]

    # ====================
    # Depletion
    # ====================

    async def record_consumption(
        self,
        item_id: str,
        quantity: float,
        consumption_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> ConsumptionEvent:
        return await self.recorder.record_consumption(item_id, quantity, consumption_date, notes)

    async def record_waste(
        self,
        item_id: str,
        quantity: float,
        reason: WasteReason,
        disposal_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> WasteEvent:
        return await self.recorder.record_waste(item_id, quantity, reason, disposal_date, notes)

    async def list_consumption(
        self,
        since: Optional[date] = None,
        item_id: Optional[str] = None,
    ) -> List[ConsumptionEvent]:
        return await self.recorder.list_consumption(since=since, item_id=item_id)

    async def list_waste(self, since: Optional[date] = None) -> List[WasteEvent]:
        return await self.recorder.list_waste(since=since)

    # ====================
    # Sharing
    # ====================

    async def list_available(self, requester_id: Optional[str] = None) -> List[InventoryItem]:
        return await self.sharing.list_available(requester_id)

    async def list_shared_by(self, owner_id: str) -> List[InventoryItem]:
        return await self.sharing.list_shared_by(owner_id)

    async def request_item(
        self,
        item_id: str,
        requester: Identity,
        notes: Optional[str] = None,
    ) -> SharingRequest:
        return await self.sharing.request_item(item_id, requester, notes)

    async def list_requests(self, requester_id: Optional[str] = None) -> List[SharingRequest]:
        return await self.sharing.list_requests(requester_id)

    # ====================
    # Derived reads
    # ====================

    async def _gather(self, label: str, *reads):
        """Run independent reads concurrently; any store failure fails the whole read"""
        tasks = [asyncio.ensure_future(read) for read in reads]
        try:
            return await asyncio.gather(*tasks)
        except DocumentStoreError as e:
            logger.error(f"Failed to fetch {label} data: {e}")
            raise DocumentStoreError(f"Failed to fetch {label} data: {e}") from e
        finally:
            # Reads still running after a failure are cancelled and awaited
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def get_dashboard_summary(self, today: Optional[date] = None) -> DashboardSummary:
        """
        Dashboard counts: all items, all waste events, items expiring within
        the window (today included) and items below their low-stock threshold.
        """
        today = today or date.today()
        expiring, inventory, waste = await self._gather(
            "dashboard",
            self.ledger.list_items(ItemFilter.EXPIRING, days=self.expiring_window_days, today=today),
            self.ledger.list_items(ItemFilter.ALL),
            self.recorder.list_waste(),
        )

        expiring_views = [classify(item, today) for item in expiring]
        low_stock_views = [classify(item, today) for item in inventory if is_low_stock(item)]
        return DashboardSummary(
            inventory_count=len(inventory),
            waste_count=len(waste),
            expiring_count=len(expiring_views),
            low_stock_count=len(low_stock_views),
            expiring_items=expiring_views,
            low_stock_items=low_stock_views,
        )

    async def get_waste_breakdown(
        self,
        window_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> WasteBreakdown:
        window_days = self.report_window_days if window_days is None else window_days
        today = today or date.today()
        waste = await self.recorder.list_waste(since=today - timedelta(days=window_days))

        by_reason = _sum_by_reason(waste)
        return WasteBreakdown(
            window_days=window_days,
            total_waste=sum(by_reason.values()),
            by_reason=by_reason,
        )

    async def get_usage_report(
        self,
        window_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> UsageReport:
        """Waste against consumption over the trailing window"""
        window_days = self.report_window_days if window_days is None else window_days
        since = (today or date.today()) - timedelta(days=window_days)
        inventory, waste, consumption = await self._gather(
            "report",
            self.ledger.list_items(ItemFilter.ALL),
            self.recorder.list_waste(since=since),
            self.recorder.list_consumption(since=since),
        )

        by_reason = _sum_by_reason(waste)
        total_waste = sum(by_reason.values())
        total_consumption = sum(event.quantity for event in consumption)
        waste_percentage = (
            round(total_waste / (total_waste + total_consumption) * 100, 2)
            if total_consumption > 0
            else 0.0
        )
        return UsageReport(
            window_days=window_days,
            inventory_count=len(inventory),
            total_waste=total_waste,
            total_consumption=total_consumption,
            waste_percentage=waste_percentage,
            by_reason=by_reason,
        )

    async def get_forecast_for(self, item_id: str, today: Optional[date] = None) -> ItemForecast:
        today = today or date.today()
        item, events = await self._gather(
            "forecast",
            self.ledger.get_item(item_id),
            self.recorder.list_consumption(
                since=today - timedelta(days=self.forecast_window_days), item_id=item_id
            ),
        )
        return build_item_forecast(item, events, today, horizon_days=self.forecast_horizon_days)

    async def health_check(self) -> bool:
        return await self.store.health_check()


def _sum_by_reason(events: List[WasteEvent]) -> Dict[WasteReason, float]:
    totals: Dict[WasteReason, float] = {}
    for event in events:
        totals[event.reason] = totals.get(event.reason, 0.0) + event.quantity
    return totals


__all__ = ["InventoryService"]
