"""Tests for JSON diagnostic output.

If a collector expects JSON and receives plain text, nothing errors;
the records just stop being searchable.  These tests catch that.
"""

from __future__ import annotations

import json
import logging
import sys

import pytest

from tests.conftest import ScriptedRandom, valid_user
from user_console.core.error_log import ErrorLog
from user_console.core.logging import _ConsoleFormatter, _JsonFormatter
from user_console.models.user import User
from user_console.repos.user_repo import InMemoryUserRepo
from user_console.services.user_manager import UserManager


def _record(msg: str, *args: object, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="user_console.services.user_manager",
        level=level,
        pathname="user_manager.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=None,
    )


def test_json_formatter_produces_valid_json() -> None:
    output = _JsonFormatter().format(_record("Stored user id=%d", 7))
    parsed = json.loads(output)
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "user_console.services.user_manager"
    assert parsed["message"] == "Stored user id=7"
    assert "timestamp" in parsed


def test_json_formatter_includes_extra_fields() -> None:
    record = _record("Rejected duplicate email=%s", "ivan@example.com")
    # Same keys the UserManager passes through extra=
    record.email = "ivan@example.com"  # type: ignore[attr-defined]
    record.user_id = 3  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["email"] == "ivan@example.com"
    assert parsed["user_id"] == 3
    assert "error_kind" not in parsed


def test_json_formatter_keeps_non_ascii_readable() -> None:
    output = _JsonFormatter().format(_record("Stored %s", "Иван Иванов"))
    assert "Иван Иванов" in output


def test_json_formatter_includes_exception_info() -> None:
    try:
        raise RuntimeError("storage exploded")
    except RuntimeError:
        record = _record("Something failed", level=logging.ERROR)
        record.exc_info = sys.exc_info()
        output = _JsonFormatter().format(record)

    parsed = json.loads(output)
    assert "RuntimeError: storage exploded" in parsed["exception"]


def test_console_formatter_is_not_json() -> None:
    output = _ConsoleFormatter().format(_record("started"))
    assert "INFO" in output
    assert "user_console.services.user_manager" in output
    assert "started" in output
    try:
        json.loads(output)
        raise AssertionError("Console format should not be valid JSON")
    except json.JSONDecodeError:
        pass


def test_json_timestamp_is_iso_8601() -> None:
    record = _record("started")
    record.created = 1714566645.0  # 2024-05-01T12:30:45Z
    record.msecs = 0.0
    stamp = json.loads(_JsonFormatter().format(record))["timestamp"]
    # 2024-05-01T12:30:45+0000 in the local offset
    assert stamp[4] == "-" and stamp[10] == "T" and stamp[13] == ":"
    assert stamp[-5] in "+-" and stamp[-4:].isdigit()
    assert "," not in stamp


# ---- error_kind from the UserManager ----


@pytest.mark.parametrize(
    ("overrides", "expected_kinds"),
    [
        ({"age": 10}, ["ValidationError", "ValidationError"]),
        ({}, ["PersistenceError", "DuplicateEmailError"]),
    ],
)
def test_manager_failures_carry_error_kind(
    error_log: ErrorLog,
    caplog: pytest.LogCaptureFixture,
    overrides: dict[str, object],
    expected_kinds: list[str],
) -> None:
    manager = UserManager(
        error_log=error_log,
        save_failure_rate=0.5,
        rng=ScriptedRandom(0.1),
        out=lambda _line: None,
    )

    with caplog.at_level(logging.WARNING):
        manager.add_user(valid_user(**overrides))
        manager.add_user(valid_user(**overrides))

    kinds = [json.loads(_JsonFormatter().format(r)).get("error_kind") for r in caplog.records]
    assert kinds == expected_kinds


def test_unexpected_failure_carries_error_kind(
    error_log: ErrorLog, caplog: pytest.LogCaptureFixture
) -> None:
    class _BrokenRepo(InMemoryUserRepo):
        def add(self, user: User) -> None:
            raise RuntimeError("boom")

    manager = UserManager(
        error_log=error_log, repo=_BrokenRepo(), save_failure_rate=0.0, out=lambda _line: None
    )

    with caplog.at_level(logging.ERROR), pytest.raises(RuntimeError):
        manager.add_user(valid_user())

    parsed = json.loads(_JsonFormatter().format(caplog.records[-1]))
    assert parsed["error_kind"] == "UnexpectedError"
