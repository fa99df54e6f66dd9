"""
Sharing Matcher

Lists items offered for sharing and records requests for them.
"""

import logging
from typing import List, Optional

from core.config.inventory_config import SCOPE_ALL, SCOPE_OTHERS, SHARING_SCOPES

from .inventory_ledger import InventoryLedger
from .models import (
    FilterOp,
    Identity,
    InventoryItem,
    ItemFilter,
    QueryFilter,
    SharingRequest,
    SharingStatus,
)
from .protocols import (
    SHARING_COLLECTION,
    DocumentStoreProtocol,
    InventoryValidationError,
)

logger = logging.getLogger(__name__)


class SharingMatcher:
    """
    Sharing marketplace over the inventory.

    scope "all" lists every shared item to every caller; "others" hides
    the caller's own items from the available list.
    """

    def __init__(self, store: DocumentStoreProtocol, ledger: InventoryLedger, scope: str = SCOPE_ALL):
        if scope not in SHARING_SCOPES:
            raise ValueError(f"Unknown sharing scope: {scope}")
        self.store = store
        self.ledger = ledger
        self.scope = scope

    async def list_available(self, requester_id: Optional[str] = None) -> List[InventoryItem]:
        items = await self.ledger.list_items(ItemFilter.SHARING)
        if self.scope == SCOPE_OTHERS and requester_id is not None:
            items = [item for item in items if item.owner_id != requester_id]
        return items

    async def list_shared_by(self, owner_id: str) -> List[InventoryItem]:
        items = await self.ledger.list_items(ItemFilter.SHARING)
        return [item for item in items if item.owner_id == owner_id]

    async def request_item(
        self,
        item_id: str,
        requester: Identity,
        notes: Optional[str] = None,
    ) -> SharingRequest:
        """Record a request for a shared item; the item itself is left as is"""
        item = await self.ledger.get_item(item_id)
        if not item.sharing_available:
            raise InventoryValidationError(f"Item {item.name} is not available for sharing", field="item_id")

        record = {
            "item_id": item.item_id,
            "item_name": item.name,
            "quantity": item.quantity,
            "unit": item.unit.value,
            "expiry_date": item.expiry_date.isoformat(),
            "status": SharingStatus.REQUESTED.value,
            "requester_id": requester.user_id,
            "requester_name": requester.display_name,
            "notes": notes,
        }
        request_id = await self.store.create(SHARING_COLLECTION, record)
        logger.info(f"Sharing request {request_id}: {requester.user_id} requested {item.name}")
        return SharingRequest.from_document(await self.store.get(SHARING_COLLECTION, request_id))

    async def list_requests(self, requester_id: Optional[str] = None) -> List[SharingRequest]:
        """Requests newest first; all requests when requester_id is None"""
        filters = [QueryFilter("requester_id", FilterOp.EQ, requester_id)] if requester_id is not None else []
        documents = await self.store.query(
            SHARING_COLLECTION, filters, order_by="created_at", descending=True
        )
        return [SharingRequest.from_document(d) for d in documents]


__all__ = ["SharingMatcher", "SCOPE_ALL", "SCOPE_OTHERS"]
