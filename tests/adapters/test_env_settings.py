from __future__ import annotations

import os

from lib_test_launcher.adapters.env.default import default_env_prefix, load_settings, prepare_environment
from lib_test_launcher.domain.settings import DEFAULT_DEPENDENCY_DIRS, LauncherSettings


def test_default_env_prefix() -> None:
    assert default_env_prefix("lib-test-launcher") == "LIB_TEST_LAUNCHER"


def test_load_settings_defaults() -> None:
    settings = load_settings({})
    assert settings == LauncherSettings()
    assert settings.dependency_dirs == DEFAULT_DEPENDENCY_DIRS


def test_load_settings_overrides() -> None:
    environ = {
        "LIB_TEST_LAUNCHER_MANIFEST": "package.json",
        "LIB_TEST_LAUNCHER_ENGINE_DISTRIBUTION": "acme-runner",
        "LIB_TEST_LAUNCHER_ENGINE_MODULE": "acme_runner",
        "LIB_TEST_LAUNCHER_DEPENDENCY_DIRS": os.pathsep.join(["vendor/*", "", "env/site"]),
        "LIB_TEST_LAUNCHER_LOG_LEVEL": "debug",
        "UNRELATED": "ignored",
    }
    settings = load_settings(environ)
    assert settings.manifest_name == "package.json"
    assert settings.engine_distribution == "acme-runner"
    assert settings.engine_module == "acme_runner"
    assert settings.dependency_dirs == ("vendor/*", "env/site")
    assert settings.log_level == "debug"


def test_blank_overrides_are_ignored() -> None:
    settings = load_settings({"LIB_TEST_LAUNCHER_MANIFEST": "  ", "LIB_TEST_LAUNCHER_DEPENDENCY_DIRS": ""})
    assert settings.manifest_name == "pyproject.toml"
    assert settings.dependency_dirs == DEFAULT_DEPENDENCY_DIRS


def test_prepare_environment_sets_missing_mode() -> None:
    environ: dict[str, str] = {}
    assert prepare_environment(LauncherSettings(), environ) == "test"
    assert environ == {"PYTHON_ENV": "test"}


def test_prepare_environment_keeps_caller_value() -> None:
    environ = {"PYTHON_ENV": "production"}
    assert prepare_environment(LauncherSettings(), environ) == "production"
    assert environ["PYTHON_ENV"] == "production"


def test_prepare_environment_keeps_empty_caller_value() -> None:
    environ = {"PYTHON_ENV": ""}
    prepare_environment(LauncherSettings(), environ)
    assert environ["PYTHON_ENV"] == ""


def test_active_environment_flag() -> None:
    assert load_settings({}).active_environment is True
    assert load_settings({"LIB_TEST_LAUNCHER_ACTIVE_ENVIRONMENT": "off"}).active_environment is False
    assert load_settings({"LIB_TEST_LAUNCHER_ACTIVE_ENVIRONMENT": "Yes"}).active_environment is True
    assert load_settings({"LIB_TEST_LAUNCHER_ACTIVE_ENVIRONMENT": "unsure"}).active_environment is True
