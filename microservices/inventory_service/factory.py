"""
Inventory Service Factory

Factory for creating inventory service instances with proper dependency injection.
The only module that picks a concrete document store backend.
"""

import logging
from dataclasses import replace
from typing import Optional

from core.config_manager import ConfigManager

from .document_store import InMemoryDocumentStore, PostgresDocumentStore
from .inventory_service import InventoryService
from .protocols import DocumentStoreProtocol

logger = logging.getLogger(__name__)


class InventoryServiceFactory:
    """Factory for creating inventory service components"""

    def __init__(self, config: Optional[ConfigManager] = None):
        self.config = config or ConfigManager("inventory_service")
        self._store: Optional[DocumentStoreProtocol] = None
        self._service: Optional[InventoryService] = None

    def create_store(self) -> DocumentStoreProtocol:
        """Build the document store selected by STORE_BACKEND"""
        infra = self.config.get_service_config().infrastructure

        if infra.store_backend == "memory":
            logger.info("Using in-memory document store")
            return InMemoryDocumentStore()

        if infra.store_backend == "postgres":
            host, port = self.config.discover_service(
                service_name="postgres_service",
                default_host=infra.postgres_host,
                default_port=infra.postgres_port,
                env_host_key="POSTGRES_HOST",
                env_port_key="POSTGRES_PORT",
            )
            infra = replace(infra, postgres_host=host, postgres_port=port)
            logger.info(f"Using PostgreSQL document store at {host}:{port} (schema={infra.postgres_schema})")
            return PostgresDocumentStore(
                dsn=infra.postgres_dsn,
                schema=infra.postgres_schema,
                min_size=infra.postgres_pool_min,
                max_size=infra.postgres_pool_max,
            )

        raise ValueError(f"Unknown STORE_BACKEND: {infra.store_backend}")

    async def initialize(self, store: Optional[DocumentStoreProtocol] = None) -> None:
        """Initialize all components"""
        logger.info("Initializing Inventory Service components...")

        self._store = store or self.create_store()
        await self._store.initialize()

        policy = self.config.get_service_config().policy
        self._service = InventoryService(
            store=self._store,
            expiring_window_days=policy.expiring_window_days,
            forecast_window_days=policy.forecast_window_days,
            forecast_horizon_days=policy.forecast_horizon_days,
            report_window_days=policy.report_window_days,
            sharing_scope=policy.sharing_scope,
        )

        logger.info("Inventory Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing Inventory Service components...")

        if self._store:
            await self._store.close()

        logger.info("Inventory Service components closed")

    @property
    def store(self) -> DocumentStoreProtocol:
        """Get document store"""
        if not self._store:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._store

    @property
    def service(self) -> InventoryService:
        """Get inventory service"""
        if not self._service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._service


__all__ = [
    "InventoryServiceFactory",
]
