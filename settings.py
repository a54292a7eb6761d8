from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_BASE_URL_ENV = "TELEMETRY_BASE_URL"
_CHANNEL_ID_ENV = "TELEMETRY_CHANNEL_ID"
_READ_KEY_ENV = "TELEMETRY_READ_KEY"
_DEFAULT_RESULTS_ENV = "TELEMETRY_DEFAULT_RESULTS"
_DETAIL_RANGE_ENV = "TELEMETRY_DETAIL_RANGE_MINUTES"
_TIMEOUT_ENV = "TELEMETRY_TIMEOUT_SECONDS"
_HOURLY_LIMIT_ENV = "HOURLY_BUCKET_LIMIT"
_DAILY_LIMIT_ENV = "DAILY_BUCKET_LIMIT"
_MONTHLY_LIMIT_ENV = "MONTHLY_BUCKET_LIMIT"
_CLAMP_NEGATIVE_ENV = "COUNTER_CLAMP_NEGATIVE"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    telemetry_base_url: str
    channel_id: Optional[str]
    read_key: Optional[str]
    default_results: int
    detail_range_minutes: int
    request_timeout: float
    hourly_bucket_limit: int
    daily_bucket_limit: int
    monthly_bucket_limit: int
    clamp_negative: bool
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
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


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


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
        telemetry_base_url=_read_str_env(_BASE_URL_ENV, "https://api.thingspeak.com").rstrip("/"),
        channel_id=_read_optional_env(_CHANNEL_ID_ENV, None),
        read_key=_read_optional_env(_READ_KEY_ENV, None),
        default_results=_read_positive_int(_DEFAULT_RESULTS_ENV, 50),
        detail_range_minutes=_read_positive_int(_DETAIL_RANGE_ENV, 60 * 24 * 90),
        request_timeout=_read_positive_float(_TIMEOUT_ENV, 10.0),
        hourly_bucket_limit=_read_positive_int(_HOURLY_LIMIT_ENV, 12),
        daily_bucket_limit=_read_positive_int(_DAILY_LIMIT_ENV, 10),
        monthly_bucket_limit=_read_positive_int(_MONTHLY_LIMIT_ENV, 6),
        clamp_negative=_read_bool(_CLAMP_NEGATIVE_ENV, True),
        log_level=_read_log_level("INFO"),
    )
