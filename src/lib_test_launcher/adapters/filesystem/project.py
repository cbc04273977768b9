"""Filesystem discovery for project roots and project-local engines.

Purpose
-------
Encapsulate every filesystem probe the resolver needs: the upward walk that
finds the invoking project's root, and the lookup of an installed engine inside
the project's local site directories.

Contents
--------
* :func:`find_project_root` – nearest ancestor holding the manifest.
* :func:`iter_dependency_dirs` – existing local site directories, in order.
* :func:`locate_local_engine` – path of the installed engine package, if any.

System Role
-----------
Feeds concrete paths into :mod:`lib_test_launcher.application.resolution`.
Probes are synchronous and sequential; the ascent is bounded by the real
directory depth.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from ...domain.settings import LauncherSettings
from ...observability import log_debug


def find_project_root(cwd: Path | None, manifest_name: str) -> Path:
    """Return the nearest ancestor of *cwd* (inclusive) that contains *manifest_name*.

    The walk visits ``cwd`` and then each of ``cwd.parents``; the last parent
    is the filesystem or drive anchor, so the loop always terminates. When no
    directory holds the manifest, ``cwd`` itself is the root.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> base = Path(tmp.name).resolve()
    >>> nested = base / "pkg" / "tests"
    >>> nested.mkdir(parents=True)
    >>> _ = (base / "launcher-root.toml").write_text("", encoding="utf-8")
    >>> find_project_root(nested, "launcher-root.toml") == base
    True
    >>> find_project_root(nested, "no-such-manifest.toml") == nested
    True
    >>> tmp.cleanup()
    """

    start = (cwd or Path.cwd()).absolute()
    for candidate in (start, *start.parents):
        if (candidate / manifest_name).is_file():
            log_debug("project_root_found", stage="resolve", path=str(candidate), manifest=manifest_name)
            return candidate
    log_debug("project_root_defaulted", stage="resolve", path=str(start), manifest=manifest_name)
    return start


def iter_dependency_dirs(root: Path, patterns: Iterable[str]) -> Iterable[Path]:
    """Yield existing directories matching each glob in *patterns* under *root*.

    Matches of one pattern are yielded in sorted order before the next
    pattern is considered, so pattern order encodes precedence.
    """

    seen: set[Path] = set()
    for pattern in patterns:
        for match in sorted(root.glob(pattern)):
            if match in seen or not match.is_dir():
                continue
            seen.add(match)
            yield match


def locate_local_engine(root: Path, settings: LauncherSettings) -> Path | None:
    """Return the installed engine package (or module file) under *root*.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> site = root / ".venv" / "lib" / "python3.12" / "site-packages" / "lib_test_launcher"
    >>> site.mkdir(parents=True)
    >>> _ = (site / "__init__.py").write_text("", encoding="utf-8")
    >>> locate_local_engine(root, LauncherSettings()) == site
    True
    >>> locate_local_engine(root / ".venv", LauncherSettings()) is None
    True
    >>> tmp.cleanup()
    """

    for site_dir in iter_dependency_dirs(root, settings.dependency_dirs):
        package = site_dir / settings.engine_module
        if (package / "__init__.py").is_file():
            log_debug("local_engine_found", stage="resolve", path=str(package), kind="package")
            return package
        module = site_dir / f"{settings.engine_module}.py"
        if module.is_file():
            log_debug("local_engine_found", stage="resolve", path=str(module), kind="module")
            return module
    log_debug("local_engine_missing", stage="resolve", path=str(root), module=settings.engine_module)
    return None
