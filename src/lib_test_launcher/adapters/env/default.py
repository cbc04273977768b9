"""Environment variable adapter.

Purpose
-------
Read :class:`~lib_test_launcher.domain.settings.LauncherSettings` overrides
from the process environment and apply the startup environment contract.

Key behaviours
--------------
* Enforces a prefix (``default_env_prefix``) so only relevant keys are read.
* ``DEPENDENCY_DIRS`` is split on :data:`os.pathsep`; ``ACTIVE_ENVIRONMENT``
  accepts the usual true/false spellings.
* :func:`prepare_environment` defaults the execution-mode variable exactly once
  and never overrides a value chosen by the caller.
"""

from __future__ import annotations

import os
from dataclasses import replace
from typing import Mapping, MutableMapping

from ...domain.settings import LauncherSettings
from ...observability import log_debug

#: Slug used to build the environment prefix for launcher settings.
SETTINGS_SLUG = "lib-test-launcher"


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-test-launcher')
    'LIB_TEST_LAUNCHER'
    """

    return slug.replace("-", "_").upper()


def load_settings(environ: Mapping[str, str] | None = None, *, base: LauncherSettings | None = None) -> LauncherSettings:
    """Return settings with ``LIB_TEST_LAUNCHER_*`` overrides applied.

    Parameters
    ----------
    environ:
        Mapping to read from; defaults to :data:`os.environ`.
    base:
        Settings to start from; defaults to :class:`LauncherSettings()`.

    Examples
    --------
    >>> settings = load_settings({"LIB_TEST_LAUNCHER_MANIFEST": "setup.cfg"})
    >>> settings.manifest_name
    'setup.cfg'
    >>> load_settings({}).dependency_dirs[0]
    '__pypackages__/*/lib'
    """

    env = os.environ if environ is None else environ
    prefix = f"{default_env_prefix(SETTINGS_SLUG)}_"
    settings = base or LauncherSettings()
    overrides: dict[str, object] = {}
    for suffix, field_name in (
        ("MANIFEST", "manifest_name"),
        ("ENGINE_DISTRIBUTION", "engine_distribution"),
        ("ENGINE_MODULE", "engine_module"),
        ("EXECUTION_MODE", "execution_mode"),
        ("LOG_LEVEL", "log_level"),
    ):
        value = env.get(prefix + suffix, "").strip()
        if value:
            overrides[field_name] = value
    dependency_dirs = env.get(prefix + "DEPENDENCY_DIRS", "")
    if dependency_dirs.strip():
        overrides["dependency_dirs"] = tuple(part for part in dependency_dirs.split(os.pathsep) if part.strip())
    active_environment = _coerce_flag(env.get(prefix + "ACTIVE_ENVIRONMENT", ""))
    if active_environment is not None:
        overrides["active_environment"] = active_environment
    if overrides:
        log_debug("settings_overridden", stage="startup", path=None, keys=sorted(overrides))
    return replace(settings, **overrides)


def prepare_environment(settings: LauncherSettings, environ: MutableMapping[str, str] | None = None) -> str:
    """Default the execution-mode variable and return its effective value.

    Examples
    --------
    >>> env = {}
    >>> prepare_environment(LauncherSettings(), env)
    'test'
    >>> prepare_environment(LauncherSettings(), {"PYTHON_ENV": "ci"})
    'ci'
    """

    env = os.environ if environ is None else environ
    current = env.get(settings.execution_mode_variable)
    if current is None:
        env[settings.execution_mode_variable] = settings.execution_mode
        log_debug(
            "execution_mode_defaulted",
            stage="startup",
            path=None,
            variable=settings.execution_mode_variable,
            value=settings.execution_mode,
        )
        return settings.execution_mode
    return current


def _coerce_flag(value: str) -> bool | None:
    """Interpret a boolean-ish environment value; blank or unknown is ``None``.

    Examples
    --------
    >>> [_coerce_flag(raw) for raw in ("true", "OFF", "0", "", "maybe")]
    [True, False, False, None, None]
    """

    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return None
