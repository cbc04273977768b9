"""Invocation options value object and the rules that validate it.

Purpose
-------
Turn the raw values collected by the CLI into an immutable
:class:`InvocationOptions` and reject contradictory combinations before any
filesystem probing or delegation happens.

Contents
--------
* :class:`InvocationOptions` – frozen record handed to the engine.
* :func:`validate_options` – ordered rule evaluation producing the record.
* :func:`normalize_extensions` – parses ``--watch-extensions`` values.

System Role
-----------
Pure domain logic: no I/O and no logging. Downstream components rely on the
guarantee that a constructed :class:`InvocationOptions` is self-consistent.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from .errors import ConflictingOptions, DependentOptionMissing, MalformedOption


@dataclass(frozen=True)
class InvocationOptions:
    """Validated options for a single launcher invocation.

    Field names follow Python conventions; the CLI also accepts the historical
    camelCase spellings (``--runInBand``) and maps them onto these fields.
    Instances are hashable; the decoded ``test_env_data`` and the read-only
    ``extras`` mapping take part in equality but not in the hash.
    """

    patterns: tuple[str, ...] = ()
    config: str | None = None
    coverage: bool = False
    max_workers: int | None = None
    only_changed: bool = False
    run_in_band: bool = False
    test_env_data: Any = field(default=None, hash=False)
    test_path_pattern: str | None = None
    watch: bool = False
    watch_extensions: tuple[str, ...] = ()
    bail: bool = False
    json: bool = False
    test_runner: str | None = None
    verbose: bool = False
    no_highlight: bool = False
    no_stack_trace: bool = False
    use_stderr: bool = False
    cache: bool = True
    log_heap_usage: bool = False
    watchman: bool = True
    extras: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.extras, MappingProxyType):
            object.__setattr__(self, "extras", MappingProxyType(dict(self.extras)))

    def to_dict(self) -> dict[str, Any]:
        """Return a plain ``dict`` copy suitable for logging or JSON dumps.

        Examples
        --------
        >>> InvocationOptions(patterns=("api",), bail=True).to_dict()["patterns"]
        ['api']
        """

        payload = {item.name: getattr(self, item.name) for item in fields(self)}
        payload["patterns"] = list(self.patterns)
        payload["extras"] = dict(self.extras)
        payload["watch_extensions"] = list(self.watch_extensions)
        return payload

    def selection_patterns(self) -> tuple[str, ...]:
        """Return every regex used to select test files (pattern option first)."""

        if self.test_path_pattern:
            return (self.test_path_pattern, *self.patterns)
        return self.patterns


_KNOWN_FIELDS = frozenset(InvocationOptions.__dataclass_fields__) - {"patterns", "extras"}


def validate_options(raw: Mapping[str, Any], patterns: Sequence[str] = ()) -> InvocationOptions:
    """Validate *raw* option values and return an :class:`InvocationOptions`.

    Rules are evaluated in order and the first violation aborts validation:

    1. ``run_in_band`` and an explicit ``max_workers`` are mutually exclusive.
    2. ``only_changed`` and positional *patterns* are mutually exclusive.
    3. ``watch_extensions`` requires ``watch``.
    4. A string ``test_env_data`` must be valid JSON; it is replaced by the
       decoded value. An empty string counts as "not given".
    5. ``test_path_pattern`` and every positional pattern must compile as
       regular expressions.
    6. ``max_workers``, when given, must be a positive integer.

    Parameters
    ----------
    raw:
        Option name to value mapping. ``None`` values count as "not given".
        Unknown keys are preserved in :attr:`InvocationOptions.extras`.
    patterns:
        Positional path-pattern fragments.

    Raises
    ------
    ConflictingOptions, DependentOptionMissing, MalformedOption
        When a rule is violated.

    Examples
    --------
    >>> validate_options({"test_env_data": '{"a": 1}'}).test_env_data
    {'a': 1}
    >>> validate_options({"run_in_band": True, "max_workers": 2})
    Traceback (most recent call last):
    ...
    lib_test_launcher.domain.errors.ConflictingOptions: Both --runInBand and --maxWorkers were specified, but these two options do not make sense together. Which is it?
    """

    values = {key: value for key, value in raw.items() if value is not None}
    if values.get("test_env_data") == "":
        del values["test_env_data"]
    pattern_list = tuple(patterns)

    if values.get("run_in_band") and "max_workers" in values:
        raise ConflictingOptions(
            "Both --runInBand and --maxWorkers were specified, but these two "
            "options do not make sense together. Which is it?"
        )

    if values.get("only_changed") and pattern_list:
        raise ConflictingOptions(
            "Both --onlyChanged and a path pattern were specified, but these two "
            "options do not make sense together. Which is it? Do you want to run "
            "tests for changed files? Or for a specific set of files?"
        )

    if values.get("watch_extensions") and not values.get("watch"):
        raise DependentOptionMissing("--watchExtensions can only be specified together with --watch.")

    if isinstance(values.get("test_env_data"), str):
        values["test_env_data"] = _decode_env_data(values["test_env_data"])

    for pattern in ([values["test_path_pattern"]] if "test_path_pattern" in values else []) + list(pattern_list):
        _ensure_regex(pattern)

    if "max_workers" in values:
        values["max_workers"] = _positive_int(values["max_workers"])

    if "watch_extensions" in values:
        values["watch_extensions"] = normalize_extensions(values["watch_extensions"])

    known = {key: value for key, value in values.items() if key in _KNOWN_FIELDS}
    extras = {key: value for key, value in values.items() if key not in _KNOWN_FIELDS and key != "patterns"}
    return InvocationOptions(patterns=pattern_list, extras=MappingProxyType(extras), **known)


def normalize_extensions(value: str | Sequence[str]) -> tuple[str, ...]:
    """Split a comma separated extension list into lower-case suffixes.

    Examples
    --------
    >>> normalize_extensions("py, .PYI,,toml")
    ('py', 'pyi', 'toml')
    """

    items = value.split(",") if isinstance(value, str) else list(value)
    return tuple(item.strip().lstrip(".").lower() for item in items if item.strip().lstrip("."))


def _decode_env_data(payload: str) -> Any:
    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:
        raise MalformedOption(f"--testEnvData must be valid JSON: {exc}") from exc


def _ensure_regex(pattern: str) -> None:
    try:
        re.compile(pattern)
    except re.error as exc:
        raise MalformedOption(f"Invalid test path pattern {pattern!r}: {exc}") from exc


def _positive_int(value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedOption(f"--maxWorkers expects a positive integer, got {value!r}") from exc
    if isinstance(value, bool) or number < 1 or (isinstance(value, float) and not value.is_integer()):
        raise MalformedOption(f"--maxWorkers expects a positive integer, got {value!r}")
    return number
