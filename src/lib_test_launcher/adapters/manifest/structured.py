"""Structured project manifest loaders.

Purpose
-------
Convert on-disk project manifests into Python mappings the resolver can query
for dependency declarations. Loaders are small wrappers around
``tomllib``/``json``/``yaml.safe_load`` so error handling and observability live
in one place.

Contents
--------
* :class:`BaseManifestLoader` – shared helpers for reading files and validating
  mapping outputs.
* :class:`TOMLManifestLoader` – ``pyproject.toml`` and friends.
* :class:`JSONManifestLoader` – key-value manifests such as ``package.json``.
* :class:`YAMLManifestLoader` – optional YAML support (only when PyYAML is
  installed).
* :func:`load_manifest` – suffix-based dispatch used by the resolver.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Mapping

from ...domain.errors import InvalidFormat
from ...observability import log_debug, log_error

try:
    import yaml  # type: ignore[import-not-found]
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore[assignment]


class BaseManifestLoader:
    """Common utilities shared by the structured manifest loaders."""

    format_name = "unknown"

    def _read(self, path: Path) -> bytes:
        payload = path.read_bytes()
        log_debug("manifest_read", stage="resolve", path=str(path), size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: Path) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseManifestLoader._ensure_mapping({"project": {}}, path=Path("demo"))
        {'project': {}}
        >>> BaseManifestLoader._ensure_mapping([], path=Path("demo"))
        Traceback (most recent call last):
        ...
        lib_test_launcher.domain.errors.InvalidFormat: Manifest demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"Manifest {path} did not produce a mapping")
        return data

    def _invalid(self, path: Path, exc: Exception) -> InvalidFormat:
        log_error("manifest_invalid", stage="resolve", path=str(path), format=self.format_name, error=str(exc))
        return InvalidFormat(f"Invalid {self.format_name.upper()} in {path}: {exc}")


class TOMLManifestLoader(BaseManifestLoader):
    """Load TOML manifests using the standard library parser."""

    format_name = "toml"

    def load(self, path: Path) -> Mapping[str, object]:
        try:
            data = tomllib.loads(self._read(path).decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(path, exc) from exc
        return self._ensure_mapping(data, path=path)


class JSONManifestLoader(BaseManifestLoader):
    """Load JSON manifests."""

    format_name = "json"

    def load(self, path: Path) -> Mapping[str, object]:
        try:
            data = json.loads(self._read(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(path, exc) from exc
        return self._ensure_mapping(data, path=path)


class YAMLManifestLoader(BaseManifestLoader):
    """Load YAML manifests when PyYAML is available."""

    format_name = "yaml"

    def load(self, path: Path) -> Mapping[str, object]:
        if yaml is None:
            raise InvalidFormat(f"PyYAML is required to read the YAML manifest {path}")
        try:
            data = yaml.safe_load(self._read(path))
        except yaml.YAMLError as exc:
            raise self._invalid(path, exc) from exc
        return self._ensure_mapping(data or {}, path=path)


_MANIFEST_LOADERS: dict[str, BaseManifestLoader] = {
    ".toml": TOMLManifestLoader(),
    ".json": JSONManifestLoader(),
    ".yaml": YAMLManifestLoader(),
    ".yml": YAMLManifestLoader(),
}


def load_manifest(path: Path) -> Mapping[str, object] | None:
    """Parse the manifest at *path* or return ``None`` when it does not exist.

    Manifests with an unknown suffix (``setup.cfg``, ``requirements.txt``) are
    root markers only and yield an empty mapping.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> manifest = Path(tmp.name) / "package.json"
    >>> _ = manifest.write_text('{"devDependencies": {"lib-test-launcher": "1.0"}}', encoding="utf-8")
    >>> dict(load_manifest(manifest)["devDependencies"])
    {'lib-test-launcher': '1.0'}
    >>> load_manifest(Path(tmp.name) / "missing.toml") is None
    True
    >>> tmp.cleanup()
    """

    if not path.is_file():
        return None
    loader = _MANIFEST_LOADERS.get(path.suffix.lower())
    if loader is None:
        log_debug("manifest_unparsed", stage="resolve", path=str(path))
        return {}
    data = loader.load(path)
    log_debug("manifest_loaded", stage="resolve", path=str(path), format=loader.format_name)
    return data
