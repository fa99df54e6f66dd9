#!/usr/bin/env python3
"""
Core Module for the Kitchen Inventory Service

Shared infrastructure used by the microservices in this repository.

COMPONENTS:
    - config/: Environment-driven configuration (logging, storage, inventory policy)
    - config_manager.py: Per-service configuration access
    - logger.py: Service logger setup

USAGE:
    from core.config_manager import ConfigManager

    # Initialize configuration for a service
    config = ConfigManager("inventory_service")
"""

from .config_manager import ConfigManager, Environment, ServiceConfig

__all__ = [
    "ConfigManager",
    "Environment",
    "ServiceConfig",
]

__version__ = "1.0.0"
