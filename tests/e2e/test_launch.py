"""End-to-end delegation through :func:`lib_test_launcher.launch`."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from lib_test_launcher import EXIT_FAILURE, EXIT_SUCCESS, launch, startup, validate_options
from lib_test_launcher.domain.errors import EngineNotInstalled
from lib_test_launcher.domain.settings import LauncherSettings
from tests.support import RecordingEngine, create_project_sandbox


@pytest.mark.parametrize(("success", "expected"), [(True, EXIT_SUCCESS), (False, EXIT_FAILURE)])
def test_bundled_engine_receives_validated_options_and_root(tmp_path: Path, success: bool, expected: int) -> None:
    sandbox = create_project_sandbox(tmp_path)
    sandbox.write_manifest('[project]\nname = "demo"\n')
    options = validate_options({"bail": True, "test_env_data": '{"a": 1}'}, ["api"])
    bundled = RecordingEngine(success=success)

    exit_code = launch(options, cwd=sandbox.nested("src", "demo"), settings=sandbox.settings, bundled=bundled)

    assert exit_code == expected
    assert bundled.calls == [(options, sandbox.root)]
    delivered = bundled.calls[0][0]
    assert delivered.test_env_data == {"a": 1}


def test_root_defaults_to_cwd_without_manifest(tmp_path: Path) -> None:
    settings = LauncherSettings(manifest_name="lib-test-launcher-absent.manifest")
    sandbox = create_project_sandbox(tmp_path, settings=settings)
    start = sandbox.nested("nested")
    bundled = RecordingEngine()

    assert launch(validate_options({}), cwd=start, settings=settings, bundled=bundled) == EXIT_SUCCESS
    assert bundled.calls[0][1] == start


def test_engine_without_result_counts_as_failure(tmp_path: Path) -> None:
    sandbox = create_project_sandbox(tmp_path)
    sandbox.write_manifest()
    bundled = RecordingEngine(success=None)

    assert launch(validate_options({}), cwd=sandbox.root, settings=sandbox.settings, bundled=bundled) == EXIT_FAILURE


def test_local_engine_is_delegated_to(tmp_path: Path) -> None:
    sandbox = create_project_sandbox(tmp_path)
    sandbox.write_manifest('[dependency-groups]\ndev = ["lib-test-launcher"]\n')
    sandbox.install_engine(version="4.0.0")
    bundled = RecordingEngine()

    exit_code = launch(
        validate_options({}, ["unit"]),
        cwd=sandbox.nested("tests"),
        settings=sandbox.settings,
        bundled=bundled,
    )

    assert exit_code == EXIT_SUCCESS
    assert bundled.calls == []
    record = json.loads((sandbox.root / "local-engine-call.json").read_text(encoding="utf-8"))
    assert record == {"root": str(sandbox.root), "patterns": ["unit"], "version": "4.0.0"}


def test_local_engine_failure_maps_to_exit_failure(tmp_path: Path) -> None:
    sandbox = create_project_sandbox(tmp_path)
    sandbox.write_manifest()
    sandbox.install_engine()

    assert launch(validate_options({"bail": True}), cwd=sandbox.root, settings=sandbox.settings) == EXIT_FAILURE


def test_declared_missing_engine_never_reaches_bundled(tmp_path: Path) -> None:
    sandbox = create_project_sandbox(tmp_path)
    sandbox.write_manifest('[project]\ndependencies = ["lib-test-launcher"]\n')
    bundled = RecordingEngine()

    with pytest.raises(EngineNotInstalled):
        launch(validate_options({}), cwd=sandbox.root, settings=sandbox.settings, bundled=bundled)
    assert bundled.calls == []


def test_startup_defaults_execution_mode() -> None:
    environ: dict[str, str] = {}
    settings = startup(environ)
    assert environ[settings.execution_mode_variable] == "test"
