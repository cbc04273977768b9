"""Shared sandbox helpers for launcher tests.

The sandbox builds throwaway project trees: manifests at chosen ancestors,
project-local engine packages inside virtualenv or ``__pypackages__`` site
directories, and nested working directories to start root discovery from.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass
from pathlib import Path

from lib_test_launcher.domain.settings import LauncherSettings

#: A local engine that records its invocation next to the project root.
CAPABLE_ENGINE = '''
import json
from pathlib import Path

from ._version import VERSION


def run_cli(options, root_dir, on_complete):
    record = {"root": str(root_dir), "patterns": list(options.patterns), "version": VERSION}
    (Path(root_dir) / "local-engine-call.json").write_text(json.dumps(record), encoding="utf-8")
    on_complete(options.bail is False)
'''

#: A local engine from before ``run_cli`` existed.
INCAPABLE_ENGINE = '''
def run(argv):
    return 0
'''

VENV_SITE = ".venv/lib/python3.12/site-packages"
PYPACKAGES_SITE = "__pypackages__/3.12/lib"


@dataclass
class ProjectSandbox:
    """A project tree rooted at :attr:`root`."""

    root: Path
    settings: LauncherSettings

    def write_manifest(self, body: str = "", *, name: str | None = None, at: Path | None = None) -> Path:
        """Write a manifest (``pyproject.toml`` by default) at *at* or the root."""

        target = (at or self.root) / (name or self.settings.manifest_name)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(textwrap.dedent(body), encoding="utf-8")
        return target

    def install_engine(
        self,
        body: str = CAPABLE_ENGINE,
        *,
        site: str = VENV_SITE,
        version: str | None = "1.0.0",
    ) -> Path:
        """Install a fake engine package into *site* and return its directory."""

        site_dir = self.root / site
        package = site_dir / self.settings.engine_module
        package.mkdir(parents=True, exist_ok=True)
        (package / "__init__.py").write_text(textwrap.dedent(body), encoding="utf-8")
        (package / "_version.py").write_text(f"VERSION = {version!r}\n", encoding="utf-8")
        if version is not None:
            info = site_dir / f"{self.settings.engine_module}-{version}.dist-info"
            info.mkdir(exist_ok=True)
            (info / "METADATA").write_text(
                f"Metadata-Version: 2.1\nName: {self.settings.engine_distribution}\nVersion: {version}\n",
                encoding="utf-8",
            )
        return package

    def nested(self, *parts: str) -> Path:
        """Create and return a directory below the root."""

        path = self.root.joinpath(*parts)
        path.mkdir(parents=True, exist_ok=True)
        return path


def create_project_sandbox(tmp_path: Path, *, settings: LauncherSettings | None = None) -> ProjectSandbox:
    """Return a sandbox rooted at a fresh ``project`` directory inside *tmp_path*.

    The default settings ignore the interpreter running the tests, which has
    this launcher installed, so only the sandbox tree decides resolution.
    """

    root = tmp_path.resolve() / "project"
    root.mkdir(parents=True)
    return ProjectSandbox(root=root, settings=settings or LauncherSettings(active_environment=False))


class RecordingEngine:
    """In-memory engine that records calls and reports a fixed outcome."""

    def __init__(self, success: bool | None = True) -> None:
        self.success = success
        self.calls: list[tuple[object, Path]] = []

    def run_cli(self, options, root_dir, on_complete) -> None:
        self.calls.append((options, Path(root_dir)))
        if self.success is not None:
            on_complete(self.success)


__all__ = [
    "CAPABLE_ENGINE",
    "INCAPABLE_ENGINE",
    "PYPACKAGES_SITE",
    "VENV_SITE",
    "ProjectSandbox",
    "RecordingEngine",
    "create_project_sandbox",
]
