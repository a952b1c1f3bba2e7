"""Tests for engine logging."""

import logging
from typing import Callable

import pytest

from parking_fee_engine.logging import (
    ROOT_LOGGER_NAME,
    LogEvent,
    LogLevel,
    get_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
)


def test_get_logger_is_child_of_root() -> None:
    """Test logger naming."""
    logger = get_logger("resolver")
    assert logger.name == "parking_fee_engine.resolver"
    assert logger.parent is logging.getLogger(ROOT_LOGGER_NAME)


def test_root_logger_has_null_handler() -> None:
    """Test that the library installs a NullHandler and nothing else."""
    handlers = logging.getLogger(ROOT_LOGGER_NAME).handlers
    assert any(isinstance(handler, logging.NullHandler) for handler in handlers)


def test_log_levels_match_logging() -> None:
    """Test that LogLevel mirrors the logging module."""
    assert LogLevel.DEBUG == logging.DEBUG
    assert LogLevel.WARNING == logging.WARNING


def test_event_data_attached(caplog: pytest.LogCaptureFixture) -> None:
    """Test that the event and its data ride along on the record."""
    caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)
    log_info(LogEvent.FEE_AGGREGATION, "Fee calculated", fee=400, minutes=60)

    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert record.getMessage() == "[fee_aggregation] Fee calculated"
    assert record.event == "fee_aggregation"  # type: ignore[attr-defined]
    assert record.data == {"fee": 400, "minutes": 60}  # type: ignore[attr-defined]


@pytest.mark.parametrize(
    "log_func,level",
    [
        (log_debug, logging.DEBUG),
        (log_info, logging.INFO),
        (log_warning, logging.WARNING),
        (log_error, logging.ERROR),
    ],
)
def test_level_helpers(caplog: pytest.LogCaptureFixture, log_func: Callable[..., None], level: int) -> None:
    """Test each level helper."""
    caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)
    log_func(LogEvent.SEGMENT_RESOLUTION, "message")
    assert caplog.records[-1].levelno == level


def test_disabled_level_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    """Test that records below the logger level are not emitted."""
    caplog.set_level(logging.WARNING, logger=ROOT_LOGGER_NAME)
    log_debug(LogEvent.TARIFF_NORMALIZATION, "quiet")
    assert not [r for r in caplog.records if r.name.startswith(ROOT_LOGGER_NAME)]
