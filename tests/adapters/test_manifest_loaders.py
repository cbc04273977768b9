from __future__ import annotations

from pathlib import Path

import pytest

from lib_test_launcher.adapters.manifest import structured as structured_module
from lib_test_launcher.adapters.manifest.structured import (
    JSONManifestLoader,
    TOMLManifestLoader,
    YAMLManifestLoader,
    load_manifest,
)
from lib_test_launcher.domain.errors import InvalidFormat


def test_toml_manifest(tmp_path: Path) -> None:
    path = tmp_path / "pyproject.toml"
    path.write_text('[project]\ndependencies = ["lib-test-launcher>=1"]\n', encoding="utf-8")
    data = TOMLManifestLoader().load(path)
    assert data["project"]["dependencies"] == ["lib-test-launcher>=1"]


def test_toml_manifest_invalid(tmp_path: Path) -> None:
    path = tmp_path / "pyproject.toml"
    path.write_text("[project\n", encoding="utf-8")
    with pytest.raises(InvalidFormat, match="Invalid TOML"):
        load_manifest(path)


def test_json_manifest_invalid(tmp_path: Path) -> None:
    path = tmp_path / "package.json"
    path.write_text("{invalid}", encoding="utf-8")
    with pytest.raises(InvalidFormat, match="Invalid JSON"):
        JSONManifestLoader().load(path)


def test_json_manifest_must_be_a_mapping(tmp_path: Path) -> None:
    path = tmp_path / "package.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(InvalidFormat, match="did not produce a mapping"):
        load_manifest(path)


def test_missing_manifest_returns_none(tmp_path: Path) -> None:
    assert load_manifest(tmp_path / "pyproject.toml") is None


def test_unknown_suffix_is_a_root_marker_only(tmp_path: Path) -> None:
    path = tmp_path / "setup.cfg"
    path.write_text("[metadata]\nname = demo\n", encoding="utf-8")
    assert load_manifest(path) == {}


@pytest.mark.skipif(structured_module.yaml is None, reason="PyYAML not available")
def test_yaml_manifest_handles_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "project.yaml"
    path.write_text("# empty\n", encoding="utf-8")
    assert YAMLManifestLoader().load(path) == {}
