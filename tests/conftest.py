"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/  : Component tests (in-memory store, mocked asyncpg, TestClient)
    - unit/       : Unit tests (pure functions, no I/O)
"""
import os
import sys
from datetime import date

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

# Import shared fixtures from tests/fixtures
from tests.fixtures import (
    make_user_id,
    make_email,
    make_item_create_request,
    make_identity_headers,
)


# =============================================================================
# Test Configuration
# =============================================================================

class TestConfig:
    """Centralized test configuration"""

    SERVICE_NAME = "inventory_service"
    SERVICE_PORT = int(os.getenv("SERVICE_PORT", "8260"))
    API_PREFIX = "/api/v1/inventory"

    # Fixed "today" for date-dependent assertions
    TODAY = date(2023, 1, 10)


@pytest.fixture(scope="session")
def test_config() -> TestConfig:
    """Provide test configuration"""
    return TestConfig()


@pytest.fixture
def today() -> date:
    """Fixed reference date"""
    return TestConfig.TODAY


# =============================================================================
# Test Data Generators
# =============================================================================

@pytest.fixture
def user_id() -> str:
    return make_user_id()


@pytest.fixture
def user_headers() -> dict:
    """Identity headers of a regular user"""
    return make_identity_headers(role="user")


@pytest.fixture
def admin_headers() -> dict:
    """Identity headers of an administrator"""
    return make_identity_headers(role="admin", email=make_email("admin"))


@pytest.fixture
def item_request() -> dict:
    """Valid item creation request"""
    return make_item_create_request()
