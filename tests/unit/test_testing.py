from __future__ import annotations

import json

import pytest

from lib_test_launcher.testing import ENV_DATA_VARIABLE, get_env_data


def test_get_env_data_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_DATA_VARIABLE, json.dumps({"region": "eu", "shards": [1, 2]}))
    assert get_env_data() == {"region": "eu", "shards": [1, 2]}


def test_get_env_data_without_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_DATA_VARIABLE, raising=False)
    assert get_env_data() is None


def test_get_env_data_reexported() -> None:
    from lib_test_launcher import get_env_data as exported

    assert exported is get_env_data
