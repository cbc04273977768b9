"""Engine adapters backed by imported Python modules.

Purpose
-------
Wrap a module exposing ``run_cli`` behind the
:class:`~lib_test_launcher.application.ports.Engine` port, and import a
project-local engine package from an explicit filesystem location.

Contents
--------
* :class:`ModuleEngine` – adapter exposing a module's ``run_cli``.
* :func:`bundled_engine` – the engine shipped with this launcher.
* :func:`load_local_engine` – imports a project-local engine package.
* :func:`local_engine_version` – reads the installed distribution version.
* :func:`active_engine_version` – version installed in the running interpreter.
"""

from __future__ import annotations

import importlib
import importlib.util
import sys
from importlib import metadata
from pathlib import Path
from types import ModuleType

from ...domain.errors import EngineLoadError, IncompatibleEngine
from ...domain.options import InvocationOptions
from ...domain.requirements import canonical_name
from ...domain.settings import LauncherSettings
from ...observability import log_debug
from ...application.ports import CompletionCallback

_LOCAL_ALIAS_PREFIX = "_project_local_"


class ModuleEngine:
    """Expose a module's ``run_cli`` as an :class:`Engine`.

    The adapter does not require the capability up front; :attr:`capable`
    reports it so the resolver can reject incompatible modules before
    delegation.
    """

    def __init__(self, namespace: ModuleType, *, origin: str | None = None) -> None:
        self._namespace = namespace
        self.origin = origin

    @property
    def name(self) -> str:
        return self._namespace.__name__

    @property
    def capable(self) -> bool:
        return callable(getattr(self._namespace, "run_cli", None))

    def run_cli(self, options: InvocationOptions, root_dir: Path, on_complete: CompletionCallback) -> None:
        entry = getattr(self._namespace, "run_cli", None)
        if not callable(entry):
            raise IncompatibleEngine(f"{self.name} does not provide run_cli()")
        log_debug("engine_invoked", stage="delegate", path=str(root_dir), engine=self.name)
        entry(options, root_dir, on_complete)


def bundled_engine() -> ModuleEngine:
    """Return the engine shipped with this launcher."""

    package = importlib.import_module(__name__.split(".")[0])
    return ModuleEngine(package)


def load_local_engine(location: Path, settings: LauncherSettings) -> ModuleEngine:
    """Import the engine package at *location* under a private module alias.

    The alias keeps the project's copy apart from the launcher's own package
    in :data:`sys.modules`; relative imports inside the package resolve
    against the alias.

    Raises
    ------
    EngineLoadError
        When the package cannot be imported.
    """

    alias = f"{_LOCAL_ALIAS_PREFIX}{settings.engine_module}"
    if location.is_dir():
        spec = importlib.util.spec_from_file_location(
            alias, location / "__init__.py", submodule_search_locations=[str(location)]
        )
    else:
        spec = importlib.util.spec_from_file_location(alias, location)
    if spec is None or spec.loader is None:
        raise EngineLoadError(f"Cannot import the project's engine from {location}")

    _forget_alias(alias)
    module = importlib.util.module_from_spec(spec)
    sys.modules[alias] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        _forget_alias(alias)
        raise EngineLoadError(f"Importing the project's engine from {location} failed: {exc}") from exc
    log_debug("local_engine_loaded", stage="resolve", path=str(location), alias=alias)
    return ModuleEngine(module, origin=str(location))


def local_engine_version(location: Path, distribution: str) -> str | None:
    """Return the version recorded in the ``*.dist-info`` next to *location*.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> site = Path(tmp.name)
    >>> info = site / "lib_test_launcher-0.1.5.dist-info"
    >>> info.mkdir()
    >>> _ = (info / "METADATA").write_text("Name: lib-test-launcher\\nVersion: 0.1.5\\n", encoding="utf-8")
    >>> local_engine_version(site / "lib_test_launcher", "lib_test_launcher")
    '0.1.5'
    >>> tmp.cleanup()
    """

    wanted = canonical_name(distribution)
    for dist in metadata.distributions(path=[str(location.parent)]):
        name = dist.metadata["Name"] if dist.metadata else None
        if name and canonical_name(name) == wanted:
            return dist.version
    return None


def active_engine_version(distribution: str) -> str | None:
    """Return the version of *distribution* visible to the running interpreter.

    This is the environment the launcher itself executes in, wherever it lives
    (a Poetry, Hatch or conda environment, or a virtualenv outside the project).
    """

    try:
        return metadata.distribution(distribution).version
    except metadata.PackageNotFoundError:
        return None


def _forget_alias(alias: str) -> None:
    for name in [key for key in sys.modules if key == alias or key.startswith(f"{alias}.")]:
        del sys.modules[name]
