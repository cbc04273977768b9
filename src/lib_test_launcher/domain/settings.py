"""Launcher settings value object.

Purpose
-------
Hold the knobs that decide *where* the resolver looks: which manifest marks a
project root, which distribution counts as "the engine", and which directories
may contain a project-local copy of it.

Contents
--------
* :data:`DEFAULT_DEPENDENCY_DIRS` – glob patterns relative to the project root.
* :class:`LauncherSettings` – frozen record consumed by the resolver and CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

DEFAULT_DEPENDENCY_DIRS: Final[tuple[str, ...]] = (
    "__pypackages__/*/lib",
    ".venv/lib/python*/site-packages",
    ".venv/Lib/site-packages",
)
"""Project-local site directories searched for an installed engine, in order."""


@dataclass(frozen=True)
class LauncherSettings:
    """Resolution and startup settings.

    Attributes
    ----------
    manifest_name:
        File name whose presence marks a directory as a project root.
    engine_distribution:
        Distribution name looked up in manifest dependency declarations.
    engine_module:
        Import name of the engine package inside a dependency directory.
    dependency_dirs:
        Glob patterns, relative to the project root, of local site directories.
    execution_mode_variable / execution_mode:
        Environment variable defaulted at startup and the value it receives.
    log_level:
        Optional level name enabling console logging in the CLI.
    active_environment:
        Whether an engine installed in the interpreter running the launcher
        satisfies a manifest declaration.
    """

    manifest_name: str = "pyproject.toml"
    engine_distribution: str = "lib-test-launcher"
    engine_module: str = "lib_test_launcher"
    dependency_dirs: tuple[str, ...] = DEFAULT_DEPENDENCY_DIRS
    execution_mode_variable: str = "PYTHON_ENV"
    execution_mode: str = "test"
    log_level: str | None = None
    active_environment: bool = True
