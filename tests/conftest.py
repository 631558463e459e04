from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest

# Ensure repo root is on sys.path so `import user_console` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from user_console.core.error_log import ErrorLog  # noqa: E402
from user_console.models.user import User  # noqa: E402
from user_console.services.user_manager import UserManager  # noqa: E402

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45)


class ScriptedRandom:
    """Stand-in for random.Random that returns queued values from random()."""

    def __init__(self, *values: float) -> None:
        self._values = list(values)

    def random(self) -> float:
        if not self._values:
            return 0.99
        return self._values.pop(0)


def valid_user(**overrides: object) -> User:
    fields: dict[str, object] = {
        "name": "Иван Иванов",
        "email": "ivan@example.com",
        "password": "Password123",
        "age": 25,
    }
    fields.update(overrides)
    return User(**fields)  # type: ignore[arg-type]


@pytest.fixture
def error_log_path(tmp_path: Path) -> Path:
    return tmp_path / "user_errors.log"


@pytest.fixture
def error_log(error_log_path: Path) -> ErrorLog:
    return ErrorLog(error_log_path, clock=lambda: FIXED_NOW)


@pytest.fixture
def manager(error_log: ErrorLog) -> UserManager:
    """Manager whose simulated save never fails."""
    return UserManager(error_log=error_log, save_failure_rate=0.0)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("LOG_LEVEL", "LOG_JSON", "ERROR_LOG_PATH", "SAVE_FAILURE_RATE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """setup_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def read_log_lines(path: Path) -> list[str]:
    if not path.exists():
        return []
    return path.read_text(encoding="utf-8").splitlines()
