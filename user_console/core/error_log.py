"""Append-only error file.

One line per failed add attempt:

    2024-05-01 12:00:00 - DuplicateEmailError: User with email a@b.c already exists

The file is opened, appended to and closed on every write; no handle is
kept between calls.  Write failures propagate as OSError and the caller
decides how loudly to report them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class ErrorLog:
    def __init__(
        self,
        path: str | Path,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.path = Path(path)
        self._clock = clock

    def format_entry(self, kind: str, message: str) -> str:
        # Keep one entry per line even when a message carries newlines.
        flat = " ".join(message.splitlines())
        return f"{self._clock().strftime(TIMESTAMP_FORMAT)} - {kind}: {flat}\n"

    def append(self, kind: str, message: str) -> None:
        entry = self.format_entry(kind, message)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(entry)
        logger.debug("Appended %s entry to %s", kind, self.path)
