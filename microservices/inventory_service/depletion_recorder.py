"""
Depletion Recorder

Records consumption and waste: validates the amount against the item,
decrements stock atomically, then appends the event log entry.
"""

import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

from .inventory_ledger import InventoryLedger
from .models import (
    ConsumptionEvent,
    FilterOp,
    InventoryItem,
    QueryFilter,
    WasteEvent,
    WasteReason,
)
from .protocols import (
    CONSUMPTION_COLLECTION,
    WASTE_COLLECTION,
    DocumentStoreError,
    DocumentStoreProtocol,
    InventoryValidationError,
)

logger = logging.getLogger(__name__)


def _format_quantity(value: float) -> str:
    return f"{value:g}"


class DepletionRecorder:
    """Consumption and waste logging over the ledger"""

    def __init__(self, store: DocumentStoreProtocol, ledger: InventoryLedger):
        self.store = store
        self.ledger = ledger

    # ====================
    # Record
    # ====================

    async def record_consumption(
        self,
        item_id: str,
        quantity: float,
        consumption_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> ConsumptionEvent:
        item = await self._deplete(item_id, quantity)
        record = {
            "item_id": item.item_id,
            "item_name": item.name,
            "unit": item.unit.value,
            "quantity": quantity,
            "consumption_date": (consumption_date or date.today()).isoformat(),
            "notes": notes,
        }
        event_id = await self._append(CONSUMPTION_COLLECTION, record, item.item_id, quantity)
        logger.info(f"Recorded consumption {event_id}: {quantity} {item.unit.value} of {item.name}")
        return ConsumptionEvent.from_document(await self.store.get(CONSUMPTION_COLLECTION, event_id))

    async def record_waste(
        self,
        item_id: str,
        quantity: float,
        reason: WasteReason,
        disposal_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> WasteEvent:
        try:
            reason = WasteReason(reason)
        except ValueError as e:
            raise InventoryValidationError(f"Invalid waste reason: {reason}", field="reason") from e

        item = await self._deplete(item_id, quantity)
        record = {
            "item_id": item.item_id,
            "item_name": item.name,
            "unit": item.unit.value,
            "quantity": quantity,
            "reason": reason.value,
            "disposal_date": (disposal_date or date.today()).isoformat(),
            "notes": notes,
        }
        event_id = await self._append(WASTE_COLLECTION, record, item.item_id, quantity)
        logger.info(f"Recorded waste {event_id}: {quantity} {item.unit.value} of {item.name} ({reason.value})")
        return WasteEvent.from_document(await self.store.get(WASTE_COLLECTION, event_id))

    async def _deplete(self, item_id: str, quantity: float) -> InventoryItem:
        """Validate the amount and take it out of stock; returns the updated item"""
        item = await self.ledger.get_item(item_id)

        if quantity is None or not math.isfinite(quantity):
            raise InventoryValidationError("Quantity must be a finite number", field="quantity")
        if quantity <= 0:
            raise InventoryValidationError("Quantity must be greater than 0", field="quantity")
        if quantity > item.quantity:
            raise InventoryValidationError(
                f"Quantity exceeds available stock "
                f"(available: {_format_quantity(item.quantity)} {item.unit.value})",
                field="quantity",
            )

        updated = await self.ledger.decrement_quantity(item_id, quantity)
        if updated is None:
            # Stock was drained between the check and the write
            raise InventoryValidationError(
                f"Quantity exceeds available stock after a concurrent update on {item.name}",
                field="quantity",
            )
        return updated

    async def _append(
        self,
        collection: str,
        record: Dict[str, Any],
        item_id: str,
        quantity: float,
    ) -> str:
        try:
            return await self.store.create(collection, record)
        except DocumentStoreError:
            logger.error(f"Failed to append {collection} event for {item_id}, restoring {quantity}")
            try:
                await self.ledger.restore_quantity(item_id, quantity)
            except DocumentStoreError as restore_error:
                logger.critical(f"Failed to restore {quantity} on {item_id}: {restore_error}")
            raise

    # ====================
    # History
    # ====================

    async def list_consumption(
        self,
        since: Optional[date] = None,
        item_id: Optional[str] = None,
    ) -> List[ConsumptionEvent]:
        """Consumption events, newest first"""
        filters: List[QueryFilter] = []
        if since is not None:
            filters.append(QueryFilter("consumption_date", FilterOp.GTE, since))
        if item_id is not None:
            filters.append(QueryFilter("item_id", FilterOp.EQ, item_id))

        documents = await self.store.query(
            CONSUMPTION_COLLECTION, filters, order_by="consumption_date", descending=True
        )
        return [ConsumptionEvent.from_document(d) for d in documents]

    async def list_waste(self, since: Optional[date] = None) -> List[WasteEvent]:
        """Waste events, newest first"""
        filters = [QueryFilter("disposal_date", FilterOp.GTE, since)] if since is not None else []
        documents = await self.store.query(
            WASTE_COLLECTION, filters, order_by="disposal_date", descending=True
        )
        return [WasteEvent.from_document(d) for d in documents]


__all__ = ["DepletionRecorder"]
