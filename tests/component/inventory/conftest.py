"""
Component Test Fixtures for Inventory Service

Real components over the in-memory document store; FastAPI TestClient with
the service dependency overridden.
"""

import pytest
import pytest_asyncio
from datetime import date
from typing import Any, Dict

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.inventory_service.depletion_recorder import DepletionRecorder
from microservices.inventory_service.document_store import InMemoryDocumentStore
from microservices.inventory_service.inventory_ledger import InventoryLedger
from microservices.inventory_service.inventory_service import InventoryService
from microservices.inventory_service.models import InventoryItem
from tests.fixtures import make_item_create_request


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Fresh in-memory document store for each test"""
    return InMemoryDocumentStore()


@pytest.fixture
def ledger(store) -> InventoryLedger:
    return InventoryLedger(store)


@pytest.fixture
def recorder(store, ledger) -> DepletionRecorder:
    return DepletionRecorder(store, ledger)


@pytest.fixture
def service(store) -> InventoryService:
    return InventoryService(store)


@pytest.fixture
def make_item(ledger):
    """Create an item through the ledger"""

    async def _make(**overrides: Any) -> InventoryItem:
        fields: Dict[str, Any] = make_item_create_request()
        fields.update(overrides)
        owner_id = fields.pop("owner_id", None)
        return await ledger.create_item(fields, owner_id=owner_id)

    return _make


@pytest_asyncio.fixture
async def milk(make_item) -> InventoryItem:
    """5 l of dairy bought 2023-01-01"""
    return await make_item(
        name="Whole Milk",
        quantity=5,
        unit="l",
        category="dairy",
        purchase_date="2023-01-01",
    )


@pytest.fixture
def client(service):
    """Create FastAPI test client with the in-memory service"""
    from fastapi.testclient import TestClient
    from microservices.inventory_service.main import app, get_service

    app.dependency_overrides[get_service] = lambda: service

    # No context manager: the lifespan (and its real factory) is skipped
    test_client = TestClient(app, raise_server_exceptions=False)
    yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def reference_day() -> date:
    return date(2023, 1, 10)
