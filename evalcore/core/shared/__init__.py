"""
Shared utilities module

Logging helpers used across the evaluation engine.
"""

from .logger import (
    ColoredFormatter,
    ContextFormatter,
    ContextLogger,
    JSONFormatter,
    configure_logging,
    configure_logging_from_settings,
    get_evaluator_logger,
    get_logger,
    get_service_logger,
)

__all__ = [
    "ColoredFormatter",
    "ContextFormatter",
    "ContextLogger",
    "JSONFormatter",
    "configure_logging",
    "configure_logging_from_settings",
    "get_evaluator_logger",
    "get_logger",
    "get_service_logger",
]
