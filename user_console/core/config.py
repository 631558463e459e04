from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

LogLevel = Literal["debug", "info", "warning", "error"]

DEFAULT_ERROR_LOG_PATH = "user_errors.log"
DEFAULT_SAVE_FAILURE_RATE = 0.3


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    log_level: LogLevel
    log_json: bool
    error_log_path: str
    save_failure_rate: float


def load_settings() -> Settings:
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    error_log_path = _getenv("ERROR_LOG_PATH", DEFAULT_ERROR_LOG_PATH)
    rate_raw = _getenv("SAVE_FAILURE_RATE", str(DEFAULT_SAVE_FAILURE_RATE))

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if not error_log_path:
        raise ValueError("ERROR_LOG_PATH must be non-empty")

    try:
        save_failure_rate = float(rate_raw)
    except ValueError:
        raise ValueError(
            f"SAVE_FAILURE_RATE must be a number (got {rate_raw!r})"
        ) from None

    if not 0.0 <= save_failure_rate <= 1.0:
        raise ValueError(
            f"SAVE_FAILURE_RATE must be between 0 and 1 (got {save_failure_rate!r})"
        )

    return Settings(  # type: ignore[arg-type]
        log_level=log_level_raw,
        log_json=log_json_raw in ("1", "true", "yes"),
        error_log_path=error_log_path,
        save_failure_rate=save_failure_rate,
    )
