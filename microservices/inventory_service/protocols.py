"""
Inventory Service Protocols

Defines interfaces for dependency injection and testing.
NO import-time I/O dependencies - safe to import anywhere.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from .models import QueryFilter


# ====================
# Collections
# ====================

INVENTORY_COLLECTION = "inventory"
CONSUMPTION_COLLECTION = "consumption"
WASTE_COLLECTION = "waste"
SHARING_COLLECTION = "sharing"


# ====================
# Document Store Protocol
# ====================


@runtime_checkable
class DocumentStoreProtocol(Protocol):
    """
    Interface for the document store.

    Records are plain JSON-compatible dicts. Returned records carry their
    identifier under ``"id"`` plus store-managed ``created_at``/``updated_at``.
    Backend failures are raised as DocumentStoreError.
    """

    async def initialize(self) -> None:
        """Open connections / create storage"""
        ...

    async def close(self) -> None:
        """Release connections"""
        ...

    async def health_check(self) -> bool:
        """Return True when the backend is reachable"""
        ...

    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        """Insert a record and return its new id"""
        ...

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a record by id, None if absent"""
        ...

    async def update(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        """Merge fields into an existing record (DocumentNotFoundError if absent)"""
        ...

    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a record (DocumentNotFoundError if absent)"""
        ...

    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Query records matching all filters"""
        ...

    async def increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        delta: float,
        floor: Optional[float] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Atomically add ``delta`` to a numeric field.

        Returns the updated record, or None when the result would fall
        below ``floor``. DocumentNotFoundError if the record is absent.
        """
        ...


# ====================
# Custom Exceptions
# ====================


class InventoryServiceError(Exception):
    """Base exception for inventory service errors"""
    pass


class InventoryValidationError(InventoryServiceError):
    """Raised on bad or missing input and quantity rule violations"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class DocumentNotFoundError(InventoryServiceError):
    """Raised when a referenced item or document is absent"""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection} document {doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


class DocumentStoreError(InventoryServiceError):
    """Raised when the underlying persistence fails"""
    pass


class AuthError(InventoryServiceError):
    """Raised when the caller identity cannot be resolved"""
    pass


class PermissionDeniedError(InventoryServiceError):
    """Raised when the caller's role does not allow a view"""
    pass


__all__ = [
    "INVENTORY_COLLECTION",
    "CONSUMPTION_COLLECTION",
    "WASTE_COLLECTION",
    "SHARING_COLLECTION",
    "DocumentStoreProtocol",
    "InventoryServiceError",
    "InventoryValidationError",
    "DocumentNotFoundError",
    "DocumentStoreError",
    "AuthError",
    "PermissionDeniedError",
]
