"""Engine resolution policy.

Purpose
-------
Decide which engine receives the validated options for a project root: the
project-local copy when one is installed, otherwise the bundled engine, unless
the project's manifest pins an engine that is not installed.

Contents
--------
* :class:`ResolvedEngine` – the single engine chosen for an invocation.
* :func:`manifest_declares_engine` – dependency declaration lookup.
* :func:`inspect_local_engine` – loads and describes a project-local engine.
* :func:`resolve_engine` – the resolution policy itself.

System Role
-----------
Sits between the filesystem adapters and the composition root. A stale local
engine takes precedence over the bundled one, so an incompatible local copy
is reported instead of silently falling back.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Literal, Mapping

from ..adapters.engines.module import (
    ModuleEngine,
    active_engine_version,
    bundled_engine,
    load_local_engine,
    local_engine_version,
)
from ..adapters.filesystem.project import locate_local_engine
from ..adapters.manifest.structured import load_manifest
from ..domain.errors import EngineNotInstalled, IncompatibleEngine
from ..domain.requirements import canonical_name, requirement_name
from ..domain.settings import LauncherSettings
from ..observability import log_error, log_info
from .ports import Engine

EngineKind = Literal["local", "active", "bundled"]

#: Top-level manifest sections holding ``name -> version`` dependency tables.
_KEY_VALUE_SECTIONS = ("dependencies", "devDependencies", "dev-dependencies")


@dataclass(frozen=True)
class ResolvedEngine:
    """Engine selected for one invocation.

    Attributes
    ----------
    kind:
        ``"local"`` for the project's installed copy, ``"active"`` when the
        declared engine is the one installed in the running interpreter,
        ``"bundled"`` otherwise.
    engine:
        Object implementing the :class:`~lib_test_launcher.application.ports.Engine` port.
    capable:
        Whether the implementation exposes ``run_cli``.
    origin:
        Filesystem location of a local engine; ``None`` for the bundled one.
    version:
        Installed distribution version of a local or active engine when known.
    """

    kind: EngineKind
    engine: Engine
    capable: bool
    origin: str | None = None
    version: str | None = None


def manifest_declares_engine(manifest: Mapping[str, Any], distribution: str) -> bool:
    """Return ``True`` when *manifest* lists *distribution* as a dependency.

    Both PEP 621 / PEP 735 / Poetry tables and ``name -> version`` sections
    (``dependencies``, ``devDependencies``) are inspected.

    Examples
    --------
    >>> manifest_declares_engine({"project": {"optional-dependencies": {"dev": ["Lib_Test_Launcher>=1"]}}}, "lib-test-launcher")
    True
    >>> manifest_declares_engine({"devDependencies": {"lib-test-launcher": "^1.0"}}, "lib-test-launcher")
    True
    >>> manifest_declares_engine({"project": {"dependencies": ["pytest"]}}, "lib-test-launcher")
    False
    """

    wanted = canonical_name(distribution)
    return any(canonical_name(name) == wanted for name in _declared_names(manifest))


def inspect_local_engine(location: Path, settings: LauncherSettings) -> ResolvedEngine:
    """Import the engine at *location* and describe its capability."""

    engine = load_local_engine(location, settings)
    return ResolvedEngine(
        kind="local",
        engine=engine,
        capable=engine.capable,
        origin=str(location),
        version=local_engine_version(location, settings.engine_distribution),
    )


def resolve_engine(root: Path, settings: LauncherSettings, *, bundled: Engine | None = None) -> ResolvedEngine:
    """Choose the engine for the project at *root*.

    Raises
    ------
    IncompatibleEngine
        The project-local engine lacks ``run_cli``. There is no fallback.
    EngineNotInstalled
        The manifest declares the engine but neither the project nor the
        running interpreter has it installed.
    InvalidFormat
        The manifest cannot be parsed.
    EngineLoadError
        The local engine cannot be imported.
    """

    location = locate_local_engine(root, settings)
    if location is not None:
        resolved = inspect_local_engine(location, settings)
        if not resolved.capable:
            log_error("local_engine_incompatible", stage="resolve", path=resolved.origin, version=resolved.version)
            installed = f" (version {resolved.version})" if resolved.version else ""
            raise IncompatibleEngine(
                f"This project has {settings.engine_distribution}{installed} installed at {location}, "
                "which is too old to be started by this launcher.\n"
                f"Please upgrade the project's {settings.engine_distribution} dependency."
            )
        log_info("engine_resolved", stage="resolve", path=str(root), kind="local", version=resolved.version)
        return resolved

    manifest_path = root / settings.manifest_name
    manifest = load_manifest(manifest_path)
    kind: EngineKind = "bundled"
    version: str | None = None
    if manifest and manifest_declares_engine(manifest, settings.engine_distribution):
        if settings.active_environment:
            version = active_engine_version(settings.engine_distribution)
        if version is None:
            log_error("declared_engine_missing", stage="resolve", path=str(manifest_path))
            raise EngineNotInstalled(
                f"{manifest_path} declares {settings.engine_distribution} but it is not installed in this project.\n"
                "Please install the project's dependencies to use the version intended for this project."
            )
        kind = "active"

    engine = bundled if bundled is not None else bundled_engine()
    capable = engine.capable if isinstance(engine, ModuleEngine) else callable(getattr(engine, "run_cli", None))
    log_info("engine_resolved", stage="resolve", path=str(root), kind=kind, version=version)
    return ResolvedEngine(kind=kind, engine=engine, capable=capable, version=version)


def _declared_names(manifest: Mapping[str, Any]) -> Iterable[str]:
    project = _table(manifest.get("project"))
    yield from _requirement_names(project.get("dependencies"))
    for group in _table(project.get("optional-dependencies")).values():
        yield from _requirement_names(group)
    for group in _table(manifest.get("dependency-groups")).values():
        yield from _requirement_names(group)

    poetry = _table(_table(manifest.get("tool")).get("poetry"))
    yield from _table(poetry.get("dependencies"))
    yield from _table(poetry.get("dev-dependencies"))
    for group in _table(poetry.get("group")).values():
        yield from _table(_table(group).get("dependencies"))

    for section in _KEY_VALUE_SECTIONS:
        value = manifest.get(section)
        if isinstance(value, Mapping):
            yield from value
        else:
            yield from _requirement_names(value)


def _requirement_names(values: Any) -> Iterable[str]:
    if not isinstance(values, list):
        return
    for value in values:
        if isinstance(value, str):
            name = requirement_name(value)
            if name:
                yield name


def _table(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}
