"""Each layer must be importable on its own, whatever is imported first."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[3]


@pytest.mark.parametrize(
    "module",
    [
        "authserver.repositories",
        "authserver.repositories.token",
        "authserver.uow",
        "authserver.uow.base",
        "authserver.services",
        "authserver.services._shared.errors",
        "authserver.infra.redis.redis_token_repository",
        "authserver.core.errors",
        "authserver",
    ],
)
def test_module_imports_in_fresh_interpreter(module: str) -> None:
    pythonpath = os.pathsep.join(filter(None, [str(BACKEND_DIR), os.environ.get("PYTHONPATH")]))
    env = {**os.environ, "PYTHONPATH": pythonpath}
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        capture_output=True,
        text=True,
        env=env,
        check=False,
    )
    assert result.returncode == 0, result.stderr
