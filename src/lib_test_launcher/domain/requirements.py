"""Helpers for comparing distribution names in dependency declarations."""

from __future__ import annotations

import re

_NAME_SEPARATORS = re.compile(r"[-_.]+")
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)")


def canonical_name(name: str) -> str:
    """Return the PEP 503 normalised form of *name*.

    Examples
    --------
    >>> canonical_name("Lib_Test.Launcher")
    'lib-test-launcher'
    """

    return _NAME_SEPARATORS.sub("-", name).lower()


def requirement_name(requirement: str) -> str | None:
    """Extract the distribution name from a PEP 508 requirement string.

    Examples
    --------
    >>> requirement_name("lib-test-launcher[yaml]>=1.2; python_version >= '3.11'")
    'lib-test-launcher'
    >>> requirement_name("  # comment") is None
    True
    """

    match = _REQUIREMENT_NAME.match(requirement)
    return match.group(1) if match else None
