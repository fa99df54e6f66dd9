#!/usr/bin/env python3
"""Storage backend configuration

The document store runs either in process memory or on PostgreSQL (JSONB
documents through native asyncpg).
"""
import os
from dataclasses import dataclass

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class InfraConfig:
    """Document store backend settings"""

    # ===========================================
    # Backend selection: "memory" | "postgres"
    # ===========================================
    store_backend: str = "memory"

    # ===========================================
    # PostgreSQL (native asyncpg - port 5432)
    # ===========================================
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "postgres"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_schema: str = "inventory"
    postgres_pool_min: int = 1
    postgres_pool_max: int = 10

    @property
    def postgres_dsn(self) -> str:
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @classmethod
    def from_env(cls) -> 'InfraConfig':
        """Load storage configuration from environment variables"""
        return cls(
            store_backend=os.getenv("STORE_BACKEND", "memory").lower(),
            postgres_host=os.getenv("POSTGRES_HOST", "localhost"),
            postgres_port=_int(os.getenv("POSTGRES_PORT", "5432"), 5432),
            postgres_db=os.getenv("POSTGRES_DB", "postgres"),
            postgres_user=os.getenv("POSTGRES_USER", "postgres"),
            postgres_password=os.getenv("POSTGRES_PASSWORD", "postgres"),
            postgres_schema=os.getenv("INVENTORY_SCHEMA", "inventory"),
            postgres_pool_min=_int(os.getenv("POSTGRES_POOL_MIN", "1"), 1),
            postgres_pool_max=_int(os.getenv("POSTGRES_POOL_MAX", "10"), 10),
        )
