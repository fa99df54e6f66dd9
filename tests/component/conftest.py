"""
Component Test Layer Configuration (Layer 3)

Structure:
    tests/component/
    ├── inventory/   Service components and HTTP API
    └── mocks/       Mock implementations

Usage:
    pytest tests/component -v
    pytest tests/component/inventory -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"
os.environ["STORE_BACKEND"] = "memory"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

# Load test environment variables
from pathlib import Path
from dotenv import load_dotenv

project_root = Path(__file__).parent.parent.parent
test_env_file = project_root / "tests" / "config" / ".env.test"
if test_env_file.exists():
    load_dotenv(test_env_file, override=True)

from tests.component.mocks import (
    FailingDocumentStore,
    MockAsyncpgConnection,
    MockAsyncpgPool,
)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )


# =============================================================================
# Database Mocks
# =============================================================================

@pytest.fixture
def mock_connection() -> MockAsyncpgConnection:
    """Mock asyncpg connection"""
    return MockAsyncpgConnection()


@pytest.fixture
def mock_pool(mock_connection: MockAsyncpgConnection) -> MockAsyncpgPool:
    """Mock asyncpg pool handing out mock_connection"""
    return MockAsyncpgPool(mock_connection)


# =============================================================================
# Document Store Mocks
# =============================================================================

@pytest.fixture
def failing_store() -> FailingDocumentStore:
    """In-memory store with injectable failures"""
    return FailingDocumentStore()
