"""Logging utilities for the fee engine.

This module provides standardized logging functionality for engine operations.
"""

import logging
from enum import Enum
from typing import Any, Dict

ROOT_LOGGER_NAME = "parking_fee_engine"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class LogLevel(int, Enum):
    """Log levels for the engine."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogEvent(str, Enum):
    """Event types for engine logging."""

    TARIFF_NORMALIZATION = "tariff_normalization"
    INTERVAL_DECOMPOSITION = "interval_decomposition"
    SEGMENT_RESOLUTION = "segment_resolution"
    FEE_AGGREGATION = "fee_aggregation"
    TARIFF_DOCUMENT = "tariff_document"


def get_logger(name: str) -> logging.Logger:
    """Get a child logger of the engine's root logger.

    Args:
        name: Short component name, e.g. ``"resolver"``

    Returns:
        The ``parking_fee_engine.<name>`` logger
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


_logger = get_logger("events")


def _log(
    level: LogLevel,
    event: LogEvent,
    message: str,
    data: Dict[str, Any],
) -> None:
    """Log an event with its structured data attached.

    Args:
        level: Severity level
        event: Event type
        message: Human readable message
        data: Dictionary of event data
    """
    if not _logger.isEnabledFor(level):
        return
    _logger.log(
        level,
        "[%s] %s",
        event.value,
        message,
        extra={"event": event.value, "data": data},
    )


def log_debug(event: LogEvent, message: str, **data: Any) -> None:
    """Log a debug-level event."""
    _log(LogLevel.DEBUG, event, message, data)


def log_info(event: LogEvent, message: str, **data: Any) -> None:
    """Log an info-level event."""
    _log(LogLevel.INFO, event, message, data)


def log_warning(event: LogEvent, message: str, **data: Any) -> None:
    """Log a warning-level event."""
    _log(LogLevel.WARNING, event, message, data)


def log_error(event: LogEvent, message: str, **data: Any) -> None:
    """Log an error-level event."""
    _log(LogLevel.ERROR, event, message, data)
