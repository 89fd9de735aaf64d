"""
Unit tests for logging configuration.
"""

from __future__ import annotations

import json
import logging
from typing import Iterator

import pytest
import structlog

from front_desk.logging_config import QUIET_LOGGERS, add_service, setup_logging


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Put the default configuration back after each test."""
    root_level = logging.getLogger().level
    yield
    structlog.reset_defaults()
    setup_logging()
    logging.getLogger().setLevel(root_level)


@pytest.mark.unit
def test_info_level_renders_json_with_service_and_exception(capfd: pytest.CaptureFixture[str]) -> None:
    """Test that non-debug output is one JSON object per event, tracebacks included."""
    setup_logging("INFO")
    logger = structlog.get_logger("front_desk.test")

    try:
        raise RuntimeError("drawer jammed")
    except RuntimeError:
        logger.exception("shift_reconciliation_failed", operator_id=3)

    line = capfd.readouterr().out.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "shift_reconciliation_failed"
    assert event["service"] == "front-desk"
    assert event["operator_id"] == 3
    assert event["level"] == "error"
    assert "RuntimeError: drawer jammed" in event["exception"]


@pytest.mark.unit
def test_warning_level_still_renders_json(capfd: pytest.CaptureFixture[str]) -> None:
    """Test that only DEBUG switches to the console renderer."""
    setup_logging("warning")
    structlog.get_logger("front_desk.test").warning("duplicate_shifts_closed", operator_id=3)

    event = json.loads(capfd.readouterr().out.strip().splitlines()[-1])
    assert event["event"] == "duplicate_shifts_closed"


@pytest.mark.unit
def test_info_level_filters_debug_events(capfd: pytest.CaptureFixture[str]) -> None:
    """Test that events below the configured level are dropped."""
    setup_logging("INFO")
    structlog.get_logger("front_desk.test").debug("shift_payment_recorded")

    assert "shift_payment_recorded" not in capfd.readouterr().out


@pytest.mark.unit
def test_debug_level_uses_console_renderer() -> None:
    """Test the development renderer."""
    setup_logging("DEBUG")

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


@pytest.mark.unit
def test_library_loggers_are_quieted() -> None:
    """Test that SQL and access logs are held at WARNING."""
    setup_logging("DEBUG")

    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


@pytest.mark.unit
def test_add_service_keeps_explicit_value() -> None:
    """Test that a bound service name is not overwritten."""
    assert add_service(None, "info", {"service": "night-audit"})["service"] == "night-audit"
    assert add_service(None, "info", {})["service"] == "front-desk"
