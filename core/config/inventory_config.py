#!/usr/bin/env python3
"""Kitchen inventory settings

Time windows and policy switches used by the inventory service. Combined
with the logging and storage sub-configs into ``InventoryConfig``.
"""
import os
from dataclasses import dataclass, field

from .infra_config import InfraConfig
from .logging_config import LoggingConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


SCOPE_ALL = "all"
SCOPE_OTHERS = "others"
SHARING_SCOPES = (SCOPE_ALL, SCOPE_OTHERS)


@dataclass
class InventoryPolicyConfig:
    """Windows for dashboards, reports and forecasting"""
    expiring_window_days: int = 3
    forecast_window_days: int = 30
    forecast_horizon_days: int = 7
    report_window_days: int = 30

    # "all": every shared item is visible to every party
    # "others": a requester never sees their own shared items
    sharing_scope: str = SCOPE_ALL

    @classmethod
    def from_env(cls) -> 'InventoryPolicyConfig':
        scope = os.getenv("SHARING_SCOPE", SCOPE_ALL).lower()
        if scope not in SHARING_SCOPES:
            raise ValueError(f"SHARING_SCOPE must be one of {SHARING_SCOPES}, got {scope!r}")
        return cls(
            expiring_window_days=_int(os.getenv("EXPIRING_WINDOW_DAYS", "3"), 3),
            forecast_window_days=_int(os.getenv("FORECAST_WINDOW_DAYS", "30"), 30),
            forecast_horizon_days=_int(os.getenv("FORECAST_HORIZON_DAYS", "7"), 7),
            report_window_days=_int(os.getenv("REPORT_WINDOW_DAYS", "30"), 30),
            sharing_scope=scope,
        )


@dataclass
class InventoryConfig:
    """Main inventory platform configuration with all sub-configs"""

    environment: str = "development"
    debug: bool = False

    default_host: str = "0.0.0.0"
    default_port: int = 8260

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    infrastructure: InfraConfig = field(default_factory=InfraConfig)
    policy: InventoryPolicyConfig = field(default_factory=InventoryPolicyConfig)

    @classmethod
    def from_env(cls) -> 'InventoryConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),
            default_host=os.getenv("HOST", "0.0.0.0"),
            default_port=_int(os.getenv("PORT", "8260"), 8260),
            logging=LoggingConfig.from_env(),
            infrastructure=InfraConfig.from_env(),
            policy=InventoryPolicyConfig.from_env(),
        )
