"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by the option validator, the engine resolver,
and the CLI adapter. The hierarchy lives in the domain layer so outer layers
can depend on it without the domain depending on them.

Contents
--------
* :class:`LauncherError` – umbrella base class for every fatal launcher issue.
* :class:`InvalidInvocation` – contradictory or malformed command-line options.
* :class:`ConflictingOptions` / :class:`DependentOptionMissing` /
  :class:`MalformedOption` – the concrete validation failures.
* :class:`InvalidFormat` – a project manifest that cannot be parsed.
* :class:`DependencyResolutionError` – the project's engine pin cannot be
  honoured (:class:`EngineNotInstalled`, :class:`IncompatibleEngine`,
  :class:`EngineLoadError`).

System Role
-----------
Every class here is fatal and raised before delegation. A failing test run is
*not* an exception: engines report it through their completion callback, so
callers never confuse a configuration problem with red tests.
"""

from __future__ import annotations


class LauncherError(Exception):
    """Base type for all exceptions emitted by ``lib_test_launcher``.

    Why
    ----
    Provide a single catch-all type so the CLI can turn any fatal launcher
    problem into a diagnostic and a non-zero exit code.
    """


class InvalidInvocation(LauncherError):
    """Raised when the supplied options cannot describe a coherent test run."""


class ConflictingOptions(InvalidInvocation):
    """Two mutually exclusive options were given together.

    Typical Sources
    ---------------
    ``--run-in-band`` with ``--max-workers`` or ``--only-changed`` with
    positional path patterns.
    """


class DependentOptionMissing(InvalidInvocation):
    """An option was given without the option it depends on."""


class MalformedOption(InvalidInvocation):
    """An option value could not be decoded (JSON payloads, regex patterns)."""


class InvalidFormat(LauncherError):
    """Raised when a project manifest cannot be parsed into structured data."""


class DependencyResolutionError(LauncherError):
    """The engine the project asks for cannot be used.

    Why
    ----
    Group the resolution failures that carry remediation text (install or
    upgrade the project's engine) so callers can render them uniformly.
    """


class EngineNotInstalled(DependencyResolutionError):
    """The manifest declares the engine but no project-local copy is installed."""


class IncompatibleEngine(DependencyResolutionError):
    """The project-local engine does not expose the ``run_cli`` entry point."""


class EngineLoadError(DependencyResolutionError):
    """The project-local engine exists but importing it failed."""
