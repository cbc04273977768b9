"""Public package surface of ``lib_test_launcher``.

The package root doubles as the bundled engine: :func:`run_cli` is the entry
point the launcher delegates to when a project has no local copy installed,
and the capability a project-local copy must expose to be started.
"""

from __future__ import annotations

from .adapters.engines.pytest_engine import run_cli
from .core import EXIT_FAILURE, EXIT_SUCCESS, launch, startup
from .domain.errors import (
    ConflictingOptions,
    DependencyResolutionError,
    DependentOptionMissing,
    EngineLoadError,
    EngineNotInstalled,
    IncompatibleEngine,
    InvalidFormat,
    InvalidInvocation,
    LauncherError,
    MalformedOption,
)
from .domain.options import InvocationOptions, validate_options
from .domain.settings import LauncherSettings
from .observability import bind_trace_id, get_logger
from .testing import get_env_data

__all__ = [
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "ConflictingOptions",
    "DependencyResolutionError",
    "DependentOptionMissing",
    "EngineLoadError",
    "EngineNotInstalled",
    "IncompatibleEngine",
    "InvalidFormat",
    "InvalidInvocation",
    "InvocationOptions",
    "LauncherError",
    "LauncherSettings",
    "MalformedOption",
    "bind_trace_id",
    "get_env_data",
    "get_logger",
    "launch",
    "run_cli",
    "startup",
    "validate_options",
]
