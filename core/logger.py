#!/usr/bin/env python3
"""
Service Logger Setup

Standard-library logging configured from ``LoggingConfig``.

Usage:
    from core.logger import setup_service_logger
    logger = setup_service_logger("inventory_service", level="INFO")
"""

import logging
import sys
from typing import Optional

from core.config import LoggingConfig


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure the root logger for a service and return the service logger.

    Args:
        service_name: Logger name for the service
        level: Log level override (defaults to LOG_LEVEL)
        config: Logging config (loaded from environment if not provided)

    Returns:
        Logger named after the service
    """
    config = config or LoggingConfig.from_env()
    log_level = getattr(logging, (level or config.log_level).upper(), logging.INFO)
    formatter = logging.Formatter(config.log_format)

    root = logging.getLogger()
    root.setLevel(log_level)

    # Replace handlers installed by a previous call
    for handler in list(root.handlers):
        if getattr(handler, "_service_handler", False):
            root.removeHandler(handler)

    if config.enable_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        console._service_handler = True
        root.addHandler(console)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(formatter)
        file_handler._service_handler = True
        root.addHandler(file_handler)

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)
    return logger


__all__ = ["setup_service_logger"]
