"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace real I/O dependencies (database, document store).
"""

from .db_mock import MockAsyncpgConnection, MockAsyncpgPool
from .store_mock import FailingDocumentStore

__all__ = [
    'MockAsyncpgConnection',
    'MockAsyncpgPool',
    'FailingDocumentStore',
]
