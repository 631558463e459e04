"""Diagnostic logging for the user console.

Two output channels exist in this program and they must not be confused:

  1. The console (stdout): prompts and status lines meant for the person
     at the keyboard.  Written with print() by user_console.main and the
     UserManager.

  2. Diagnostics (stderr): this module.  Timestamped records for whoever
     is debugging the program.  Sending them to stderr keeps them from
     interleaving with the console transcript when stdout is redirected.

The flat error file (user_errors.log) is a third, user-facing artifact
owned by user_console.core.error_log.  It is NOT a logging handler.

WHY TWO FORMATTERS
--------------------
  _ConsoleFormatter: human-readable, single-line.
    You read these with your eyes in a terminal.

  _JsonFormatter: machine-parseable, one JSON object per line.
    Set LOG_JSON=true when the output is collected by a tool.
"""

from __future__ import annotations

import json
import logging
import sys


class _ConsoleFormatter(logging.Formatter):
    """Single-line formatter for stderr.

    - Always: ISO-8601 timestamp, level, logger name, message
    - WARNING+: appends [filename:lineno] so you can locate the failing branch
    - ERROR/CRITICAL: stack trace included when exc_info is present
    """

    _BASE_FMT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
    _LOC_SUFFIX = "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt or self.datefmt)
        ms = int(record.msecs)
        # Insert .NNN before the timezone offset (last 5 chars: +0000)
        return f"{base[:-5]}.{ms:03d}{base[-5:]}"

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            self._style._fmt = self._BASE_FMT + self._LOC_SUFFIX
        else:
            self._style._fmt = self._BASE_FMT
        return super().format(record)


class _JsonFormatter(logging.Formatter):
    """JSON formatter for machine-parseable log output.

    Extra context fields (user_id, email, error_kind) passed through
    ``extra=`` by the UserManager appear as top-level keys.
    """

    _CONTEXT_FIELDS = (
        "user_id",
        "email",
        "error_kind",
    )

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in self._CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Configure the root logger.

    Args:
        level_name: Log level string (debug/info/warning/error)
        json_format: If True, emit JSON lines. If False, human-readable.
                     Controlled by LOG_JSON env var in Settings.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter() if json_format else _ConsoleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)
