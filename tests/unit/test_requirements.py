from __future__ import annotations

import pytest

from lib_test_launcher.domain.requirements import canonical_name, requirement_name


@pytest.mark.parametrize("name", ["lib-test-launcher", "Lib_Test_Launcher", "lib.test--launcher"])
def test_canonical_name_collapses_separators(name: str) -> None:
    assert canonical_name(name) == "lib-test-launcher"


@pytest.mark.parametrize(
    ("requirement", "expected"),
    [
        ("lib-test-launcher", "lib-test-launcher"),
        ("lib_test_launcher==0.1.5", "lib_test_launcher"),
        ("lib-test-launcher[yaml] ~= 1.0 ; python_version >= '3.11'", "lib-test-launcher"),
        ("pytest>=8", "pytest"),
        ("", None),
        ("--editable .", None),
    ],
)
def test_requirement_name(requirement: str, expected: str | None) -> None:
    assert requirement_name(requirement) == expected
