from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_REGISTRY_PATH_ENV = "SENSOR_REGISTRY_PATH"
_TREND_WINDOW_ENV = "TREND_WINDOW"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    registry_path: Optional[str]
    trend_window: int
    log_level: str


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_trend_window(default: int) -> int:
    value = os.getenv(_TREND_WINDOW_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed >= 2 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        registry_path=_read_optional_env(_REGISTRY_PATH_ENV, None),
        trend_window=_read_trend_window(7),
        log_level=_read_log_level("INFO"),
    )
