"""Composition root for ``lib_test_launcher``.

Purpose
-------
Provide the single entry point that chains project root discovery, engine
resolution, and delegation, and turns the engine's reported success flag into
a process exit code.

Contents
--------
* :data:`EXIT_SUCCESS` / :data:`EXIT_FAILURE` – the only exit codes produced.
* :func:`launch` – resolve and delegate for validated options.
* :func:`startup` – one-time settings load and environment preparation.

System Role
-----------
Callers validate options first (:func:`validate_options`); :func:`launch`
never re-checks them. Fatal resolution problems propagate as
:class:`~lib_test_launcher.domain.errors.LauncherError` subclasses while a
failing test run is just ``EXIT_FAILURE``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Final, MutableMapping

from .adapters.env.default import load_settings, prepare_environment
from .adapters.filesystem.project import find_project_root
from .application.ports import Engine
from .application.resolution import ResolvedEngine, resolve_engine
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
from .observability import log_info, log_warning, make_event

EXIT_SUCCESS: Final[int] = 0
EXIT_FAILURE: Final[int] = 1


def startup(environ: MutableMapping[str, str] | None = None) -> LauncherSettings:
    """Load settings and apply the execution-mode default exactly once.

    Examples
    --------
    >>> env = {"LIB_TEST_LAUNCHER_EXECUTION_MODE": "ci"}
    >>> startup(env).execution_mode
    'ci'
    >>> env["PYTHON_ENV"]
    'ci'
    """

    settings = load_settings(environ)
    prepare_environment(settings, environ)
    return settings


def launch(
    options: InvocationOptions,
    *,
    cwd: Path | None = None,
    settings: LauncherSettings | None = None,
    bundled: Engine | None = None,
) -> int:
    """Resolve the engine for the project around *cwd* and delegate to it.

    Parameters
    ----------
    options:
        Validated invocation options.
    cwd:
        Directory the root discovery starts from; defaults to the process cwd.
    settings:
        Resolution settings; defaults to :func:`load_settings` from the
        environment.
    bundled:
        Engine used when the project has no local copy; defaults to the engine
        shipped with this package.

    Returns
    -------
    int
        :data:`EXIT_SUCCESS` when the engine reported success, otherwise
        :data:`EXIT_FAILURE`.
    """

    active = settings or load_settings()
    root = find_project_root(cwd, active.manifest_name)
    resolved = resolve_engine(root, active, bundled=bundled)
    return _delegate(resolved, options, root)


def _delegate(resolved: ResolvedEngine, options: InvocationOptions, root: Path) -> int:
    outcome: list[bool] = []
    resolved.engine.run_cli(options, root, outcome.append)
    if not outcome:
        log_warning("engine_without_result", **make_event("delegate", str(root), {"kind": resolved.kind}))
        return EXIT_FAILURE
    success = bool(outcome[-1])
    log_info("engine_completed", **make_event("delegate", str(root), {"kind": resolved.kind, "success": success}))
    return EXIT_SUCCESS if success else EXIT_FAILURE


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
    "ResolvedEngine",
    "find_project_root",
    "launch",
    "resolve_engine",
    "startup",
    "validate_options",
]
