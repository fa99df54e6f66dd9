"""
Shared Test Fixtures

Centralized factories used across all test layers.

Structure:
    - common.py: Base ID generators, dates
    - {service}_fixtures.py: Per-service factories
"""

# Common utilities
from .common import (
    make_user_id,
    make_email,
    days_from,
)

# Inventory service fixtures
from .inventory_fixtures import (
    make_item_id,
    make_item_create_request,
    make_item_document,
    make_identity_headers,
)

__all__ = [
    "make_user_id",
    "make_email",
    "days_from",
    "make_item_id",
    "make_item_create_request",
    "make_item_document",
    "make_identity_headers",
]
