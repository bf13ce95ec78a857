from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_BASE_URL_ENV = "RAINFALL_API_BASE_URL"
_TIMEOUT_ENV = "RAINFALL_API_TIMEOUT"
_DEFAULT_PAGE_SIZE_ENV = "DASHBOARD_DEFAULT_PAGE_SIZE"
_MAX_PAGE_SIZE_ENV = "DASHBOARD_MAX_PAGE_SIZE"
_SORT_BY_ENV = "DASHBOARD_DEFAULT_SORT_BY"
_SORT_DIR_ENV = "DASHBOARD_DEFAULT_SORT_DIR"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_SORT_FIELDS = ("date", "precipitationMm", "agriculturalYear")
_SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    request_timeout: float
    default_page_size: int
    max_page_size: int
    default_sort_by: str
    default_sort_dir: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


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


def _read_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    candidate = _read_str_env(name, default)
    return candidate if candidate in choices else default


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
    max_page_size = _read_positive_int(_MAX_PAGE_SIZE_ENV, 1000)
    default_page_size = min(_read_positive_int(_DEFAULT_PAGE_SIZE_ENV, 365), max_page_size)
    return Settings(
        api_base_url=_read_str_env(_BASE_URL_ENV, "http://localhost:8080").rstrip("/"),
        request_timeout=_read_positive_float(_TIMEOUT_ENV, 10.0),
        default_page_size=default_page_size,
        max_page_size=max_page_size,
        default_sort_by=_read_choice(_SORT_BY_ENV, _SORT_FIELDS, "date"),
        default_sort_dir=_read_choice(_SORT_DIR_ENV, _SORT_DIRECTIONS, "asc"),
        log_level=_read_log_level("INFO"),
    )
