#!/usr/bin/env python3
"""
Centralized Configuration Manager

Builds the per-service configuration from environment variables (loaded from
the deployment env file by ``core.config``) and resolves backing service
endpoints.

Usage:
    from core.config_manager import ConfigManager

    config_manager = ConfigManager("inventory_service")
    config = config_manager.get_service_config()
    host, port = config_manager.discover_service(
        service_name="postgres_service",
        default_host="localhost",
        default_port=5432,
        env_host_key="POSTGRES_HOST",
        env_port_key="POSTGRES_PORT",
    )
"""

import logging
import os
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from core.config import InventoryConfig, InfraConfig, InventoryPolicyConfig, reload_settings

logger = logging.getLogger(__name__)

_SECRET_MARKERS = ("password", "secret", "token", "key")


class Environment(str, Enum):
    """Deployment environment"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_value(cls, value: str) -> "Environment":
        aliases = {"dev": "development", "test": "testing", "prod": "production"}
        value = aliases.get(value.lower(), value.lower())
        try:
            return cls(value)
        except ValueError:
            return cls.DEVELOPMENT


@dataclass
class ServiceConfig:
    """Effective configuration of one microservice"""
    service_name: str
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    service_host: str = "0.0.0.0"
    service_port: int = 8260
    log_level: str = "INFO"
    log_file: str = ""
    infrastructure: InfraConfig = field(default_factory=InfraConfig)
    policy: InventoryPolicyConfig = field(default_factory=InventoryPolicyConfig)


class ConfigManager:
    """Per-service configuration access"""

    def __init__(self, service_name: str, settings: Optional[InventoryConfig] = None):
        self.service_name = service_name
        self._settings = settings or reload_settings()
        self._service_config: Optional[ServiceConfig] = None

    def get_service_config(self) -> ServiceConfig:
        """Get (and cache) the effective service configuration"""
        if self._service_config is None:
            settings = self._settings
            port = os.getenv("SERVICE_PORT")
            self._service_config = ServiceConfig(
                service_name=self.service_name,
                environment=Environment.from_value(settings.environment),
                debug=settings.debug,
                service_host=settings.default_host,
                service_port=int(port) if port and port.isdigit() else settings.default_port,
                log_level=settings.logging.log_level,
                log_file=settings.logging.log_file,
                infrastructure=settings.infrastructure,
                policy=settings.policy,
            )
        return self._service_config

    def discover_service(
        self,
        service_name: str,
        default_host: str = "localhost",
        default_port: int = 0,
        env_host_key: Optional[str] = None,
        env_port_key: Optional[str] = None,
    ) -> Tuple[str, int]:
        """Resolve host/port of a backing service from environment with defaults"""
        host = os.getenv(env_host_key, default_host) if env_host_key else default_host
        port_value = os.getenv(env_port_key) if env_port_key else None
        try:
            port = int(port_value) if port_value else default_port
        except ValueError:
            logger.warning(f"Invalid port {port_value!r} for {service_name}, using {default_port}")
            port = default_port

        logger.debug(f"Resolved {service_name} at {host}:{port}")
        return host, port

    def get_config_summary(self, show_secrets: bool = False) -> Dict[str, Any]:
        """Get effective configuration as a flat dictionary"""
        summary = _flatten(asdict(self.get_service_config()))
        if not show_secrets:
            for key in summary:
                if any(marker in key.lower() for marker in _SECRET_MARKERS):
                    summary[key] = "***"
        return summary

    def print_config_summary(self, show_secrets: bool = False) -> None:
        """Log the effective configuration"""
        logger.info(f"Configuration for {self.service_name}:")
        for key, value in sorted(self.get_config_summary(show_secrets).items()):
            logger.info(f"  {key} = {value}")


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{name}."))
        elif isinstance(value, Enum):
            flat[name] = value.value
        else:
            flat[name] = value
    return flat
