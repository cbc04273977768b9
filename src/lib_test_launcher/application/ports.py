"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts the resolver and the composition root depend
on, so a project-local engine and the bundled engine are interchangeable
instances of one capability.

Contents
--------
* :data:`CompletionCallback` – continuation receiving the success flag.
* :class:`Engine` – anything exposing ``run_cli(options, root_dir, on_complete)``.
* :class:`ManifestLoader` – parses a project manifest into a mapping.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping, Protocol, runtime_checkable

from ..domain.options import InvocationOptions

CompletionCallback = Callable[[bool], None]


@runtime_checkable
class Engine(Protocol):
    """Execute tests for a project and report the outcome.

    Why
    ----
    The launcher only chooses *which* engine runs; discovery, scheduling and
    reporting stay behind this single method.
    """

    def run_cli(self, options: InvocationOptions, root_dir: Path, on_complete: CompletionCallback) -> None:
        """Run tests under *root_dir* and call *on_complete* with ``True`` on success."""


@runtime_checkable
class ManifestLoader(Protocol):
    """Parse a structured manifest file into a mapping."""

    def load(self, path: Path) -> Mapping[str, object]:
        """Read *path* and return a mapping or raise ``InvalidFormat``."""
