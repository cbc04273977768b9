"""Structured logging helpers distilled into tiny orchestration phrases.

Purpose
    Keep every emission of launcher diagnostics predictable and contextual
    without forcing host applications to adopt a specific logging backend.

Contents
    - ``TRACE_ID``: context variable storing the active run identifier.
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``bind_trace_id``: binds or clears the active run identifier.
    - ``log_debug`` / ``log_info`` / ``log_warning`` / ``log_error``: emit
      structured entries via a single private emitter.
    - ``make_event``: convenience builder for structured event payloads.
    - ``enable_console_logging``: attaches a stderr handler for CLI runs.

System Integration
    Used by adapters, the resolver, and the CLI so every diagnostic carries the
    same run metadata. The domain layer stays free from logging concerns.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_test_launcher_trace_id", default=None)
"""Identifier of the current launcher run propagated through logging helpers."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_test_launcher")
_LOGGER.addHandler(logging.NullHandler())

_CONSOLE_FORMAT: Final[str] = "%(levelname)s %(name)s: %(message)s %(context)s"


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active run identifier.

    Examples
    --------
    >>> bind_trace_id('run-1')
    >>> TRACE_ID.get()
    'run-1'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry that includes the trace context."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry that includes the trace context."""

    _emit(logging.INFO, message, fields)


def log_warning(message: str, **fields: Any) -> None:
    """Emit a structured warning log entry that includes the trace context."""

    _emit(logging.WARNING, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry that includes the trace context."""

    _emit(logging.ERROR, message, fields)


def make_event(
    stage: str,
    path: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured logging payload for launcher lifecycle events.

    Inputs
        stage: Launcher stage emitting the event (``"validate"``, ``"resolve"``...).
        path: Filesystem path associated with the event, if available.
        payload: Optional mapping with extra diagnostic detail.

    Examples
    --------
    >>> make_event('resolve', '/srv/app', {'kind': 'bundled'})
    {'stage': 'resolve', 'path': '/srv/app', 'kind': 'bundled'}
    """

    event: dict[str, Any] = {"stage": stage, "path": path}
    if payload:
        event |= dict(payload)
    return event


def enable_console_logging(level: str | int, stream: Any = None) -> logging.Handler:
    """Attach a stderr handler to the package logger at *level*.

    Why
        The CLI is the host application for the launcher, so it may opt into
        visible diagnostics (``LIB_TEST_LAUNCHER_LOG_LEVEL=debug``) while the
        library stays silent when imported.

    Returns
        The installed handler, so callers can remove it again.
    """

    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    handler.setLevel(resolved)
    _LOGGER.addHandler(handler)
    _LOGGER.setLevel(resolved)
    return handler


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    _LOGGER.log(level, message, extra={"context": _with_trace(fields)})


def _with_trace(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Attach the current trace identifier to the provided structured fields."""

    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    return context
