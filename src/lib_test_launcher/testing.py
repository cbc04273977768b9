"""Helpers available to test suites started by the bundled engine.

Purpose
    Give test code access to the ``--testEnvData`` payload the launcher was
    invoked with.

Contents
    - ``ENV_DATA_VARIABLE``: environment variable carrying the JSON payload.
    - ``get_env_data``: returns the decoded payload or ``None``.
"""

from __future__ import annotations

import json
import os
from typing import Any, Final, Mapping

ENV_DATA_VARIABLE: Final[str] = "LIB_TEST_LAUNCHER_ENV_DATA"
"""Environment variable exported by the bundled engine while tests run."""


def get_env_data(environ: Mapping[str, str] | None = None) -> Any:
    """Return the decoded ``--testEnvData`` payload for the current run.

    Examples
    --------
    >>> get_env_data({ENV_DATA_VARIABLE: '{"region": "eu"}'})
    {'region': 'eu'}
    >>> get_env_data({}) is None
    True
    """

    env = os.environ if environ is None else environ
    payload = env.get(ENV_DATA_VARIABLE)
    if payload is None:
        return None
    return json.loads(payload)
