"""
Inventory Ledger

Owns inventory item records and their quantity invariant (quantity >= 0).
"""

import logging
import math
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .expiry_classifier import calculate_expiry_date
from .models import (
    FilterOp,
    InventoryItem,
    InventoryItemCreateRequest,
    InventoryItemUpdateRequest,
    ItemFilter,
    QueryFilter,
)
from .protocols import (
    INVENTORY_COLLECTION,
    DocumentNotFoundError,
    DocumentStoreProtocol,
    InventoryValidationError,
)

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)


def _parse_request(model: Type[RequestT], fields: Union[RequestT, Dict[str, Any]]) -> RequestT:
    """Accept a request model or a plain dict; report bad input as InventoryValidationError"""
    if isinstance(fields, model):
        return fields
    try:
        return model.model_validate(fields)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise InventoryValidationError(f"Invalid {field or 'input'}: {first.get('msg')}", field=field) from e


class InventoryLedger:
    """Inventory item CRUD over the injected document store"""

    def __init__(self, store: DocumentStoreProtocol):
        self.store = store

    # ====================
    # Create / Read
    # ====================

    async def create_item(
        self,
        fields: Union[InventoryItemCreateRequest, Dict[str, Any]],
        owner_id: Optional[str] = None,
    ) -> InventoryItem:
        """
        Create an inventory item.

        purchase_date defaults to today; a missing expiry_date is derived
        from the category shelf life.
        """
        request = _parse_request(InventoryItemCreateRequest, fields)

        purchase_date = request.purchase_date or date.today()
        expiry_date = request.expiry_date or calculate_expiry_date(purchase_date, request.category)
        self._check_dates(purchase_date, expiry_date)

        record = {
            "name": request.name,
            "quantity": request.quantity,
            "unit": request.unit.value,
            "category": request.category.value,
            "purchase_date": purchase_date.isoformat(),
            "expiry_date": expiry_date.isoformat(),
            "notes": request.notes,
            "sharing_available": request.sharing_available,
            "owner_id": owner_id,
        }
        item_id = await self.store.create(INVENTORY_COLLECTION, record)
        logger.info(f"Created inventory item {item_id} ({request.name}, {request.quantity} {request.unit.value})")
        return await self.get_item(item_id)

    async def get_item(self, item_id: str) -> InventoryItem:
        document = await self.store.get(INVENTORY_COLLECTION, item_id)
        if document is None:
            raise DocumentNotFoundError(INVENTORY_COLLECTION, item_id)
        return InventoryItem.from_document(document)

    async def list_items(
        self,
        item_filter: ItemFilter = ItemFilter.ALL,
        days: int = 3,
        today: Optional[date] = None,
    ) -> List[InventoryItem]:
        """
        List items ordered by expiry date (soonest first).

        expiring: expiry_date within [today, today + days]
        sharing: sharing_available is set
        """
        filters: List[QueryFilter] = []
        if item_filter == ItemFilter.EXPIRING:
            if days < 0:
                raise InventoryValidationError("days must not be negative", field="days")
            today = today or date.today()
            filters = [
                QueryFilter("expiry_date", FilterOp.GTE, today),
                QueryFilter("expiry_date", FilterOp.LTE, today + timedelta(days=days)),
            ]
        elif item_filter == ItemFilter.SHARING:
            filters = [QueryFilter("sharing_available", FilterOp.EQ, True)]

        documents = await self.store.query(INVENTORY_COLLECTION, filters, order_by="expiry_date")
        return [InventoryItem.from_document(d) for d in documents]

    # ====================
    # Update / Delete
    # ====================

    async def update_item(
        self,
        item_id: str,
        fields: Union[InventoryItemUpdateRequest, Dict[str, Any]],
    ) -> InventoryItem:
        """Partial update; the merged record is re-validated"""
        request = _parse_request(InventoryItemUpdateRequest, fields)
        current = await self.get_item(item_id)

        changes = request.model_dump(exclude_unset=True, mode="json")
        if not changes:
            return current

        for required in ("name", "quantity", "unit", "category", "purchase_date", "expiry_date", "sharing_available"):
            if required in changes and changes[required] is None:
                raise InventoryValidationError(f"{required} cannot be cleared", field=required)

        merged = current.model_copy(update=request.model_dump(exclude_unset=True))
        self._check_dates(merged.purchase_date, merged.expiry_date)

        await self.store.update(INVENTORY_COLLECTION, item_id, changes)
        logger.info(f"Updated inventory item {item_id}: {sorted(changes)}")
        return await self.get_item(item_id)

    async def delete_item(self, item_id: str) -> None:
        """Delete an item; depletion and sharing history keep their snapshots"""
        await self.store.delete(INVENTORY_COLLECTION, item_id)
        logger.info(f"Deleted inventory item {item_id}")

    # ====================
    # Quantity adjustments
    # ====================

    async def decrement_quantity(self, item_id: str, amount: float) -> Optional[InventoryItem]:
        """
        Atomically subtract amount if enough stock remains.

        Returns the updated item, or None when the stock no longer covers it.
        """
        self._check_amount(amount)
        document = await self.store.increment(
            INVENTORY_COLLECTION, item_id, "quantity", -amount, floor=0
        )
        return InventoryItem.from_document(document) if document is not None else None

    async def restore_quantity(self, item_id: str, amount: float) -> InventoryItem:
        """Add amount back (compensates a decrement whose event was not recorded)"""
        self._check_amount(amount)
        document = await self.store.increment(INVENTORY_COLLECTION, item_id, "quantity", amount)
        return InventoryItem.from_document(document)

    @staticmethod
    def _check_amount(amount: float) -> None:
        if not math.isfinite(amount) or amount < 0:
            raise InventoryValidationError(f"Invalid quantity change: {amount}", field="quantity")

    @staticmethod
    def _check_dates(purchase_date: date, expiry_date: date) -> None:
        if expiry_date < purchase_date:
            raise InventoryValidationError(
                f"expiry_date {expiry_date} is before purchase_date {purchase_date}",
                field="expiry_date",
            )


__all__ = ["InventoryLedger"]
