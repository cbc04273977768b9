"""Unit tests for structured logging utilities in ``observability``."""

from __future__ import annotations

import io
import logging

import pytest

from lib_test_launcher import bind_trace_id, get_logger
from lib_test_launcher.observability import TRACE_ID, enable_console_logging, log_info, log_warning, make_event


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_test_launcher")
    bind_trace_id("run-123")
    try:
        log_info("engine_resolved", stage="resolve", path=None)
    finally:
        bind_trace_id(None)
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "run-123", "stage": "resolve", "path": None}


def test_bind_trace_id_clears_context() -> None:
    bind_trace_id("run-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    assert make_event("delegate", "/srv", {"success": True}) == {"stage": "delegate", "path": "/srv", "success": True}
    assert make_event("resolve", None) == {"stage": "resolve", "path": None}


def test_console_logging_writes_context_to_stream() -> None:
    stream = io.StringIO()
    handler = enable_console_logging("warning", stream=stream)
    logger = get_logger()
    previous_level = logger.level
    try:
        log_info("hidden_event", stage="resolve", path=None)
        log_warning("option_unsupported", stage="delegate", path=None, option="watch")
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
    output = stream.getvalue()
    assert "hidden_event" not in output
    assert "WARNING lib_test_launcher: option_unsupported" in output
    assert "'option': 'watch'" in output


def test_console_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        enable_console_logging("chatty")
