from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache


_DEFAULT_STEP_ENV = "SERIES_DEFAULT_STEP_MS"
_DEFAULT_NAME_ENV = "SERIES_DEFAULT_NAME"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    default_step_ms: int
    default_series: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_step(default: int) -> int:
    value = os.getenv(_DEFAULT_STEP_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def parse_log_level(value: str | None) -> str | None:
    """Return the upper-cased level name, or ``None`` if logging does not know it."""
    if value is None:
        return None
    candidate = value.strip().upper()
    if not candidate:
        return None
    if not isinstance(logging.getLevelName(candidate), int):
        return None
    return candidate


def _read_log_level(default: str) -> str:
    return parse_log_level(os.getenv(_LOG_LEVEL_ENV)) or default


@lru_cache
def get_settings() -> Settings:
    return Settings(
        default_step_ms=_read_step(60_000),
        default_series=_read_str_env(_DEFAULT_NAME_ENV, "default"),
        log_level=_read_log_level("INFO"),
    )
