#!/usr/bin/env python3
"""Modular configuration system for the kitchen inventory service

Configuration hierarchy:
- logging_config: Logging configuration
- infra_config: Document store backend (memory / PostgreSQL)
- inventory_config: Inventory windows and sharing policy
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .inventory_config import InventoryConfig, InventoryPolicyConfig, SCOPE_ALL, SCOPE_OTHERS, SHARING_SCOPES

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = InventoryConfig.from_env()

def get_settings() -> InventoryConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> InventoryConfig:
    """Reload settings from environment"""
    global settings
    settings = InventoryConfig.from_env()
    return settings

__all__ = [
    'InventoryConfig',
    'get_settings',
    'reload_settings',
    'settings',
    'LoggingConfig',
    'InfraConfig',
    'InventoryPolicyConfig',
    'SCOPE_ALL',
    'SCOPE_OTHERS',
    'SHARING_SCOPES',
]
