#!/usr/bin/env python3
"""Logging configuration for the inventory service"""
import os
from dataclasses import dataclass, field
from typing import List

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def _bool(val: str) -> bool:
    return val.lower() == "true"

def _list(val: str) -> List[str]:
    return [part.strip() for part in val.split(",") if part.strip()]


@dataclass
class LoggingConfig:
    """Console/file logging settings"""
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT
    log_file: str = ""
    enable_console: bool = True

    # Third-party loggers held at WARNING
    quiet_loggers: List[str] = field(default_factory=lambda: ["asyncpg", "uvicorn.access"])

    service_name: str = "inventory_service"
    environment: str = "development"

    @classmethod
    def from_env(cls) -> 'LoggingConfig':
        """Load logging config from environment variables"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        quiet = os.getenv("LOG_QUIET_LOGGERS")
        return cls(
            log_level=os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO"),
            log_format=os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT),
            log_file=os.getenv("LOG_FILE", ""),
            enable_console=_bool(os.getenv("LOG_CONSOLE", "true")),
            quiet_loggers=_list(quiet) if quiet is not None else ["asyncpg", "uvicorn.access"],
            service_name=os.getenv("SERVICE_NAME", "inventory_service"),
            environment=env,
        )
