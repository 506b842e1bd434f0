"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class FinancialImportSettings:
    """
    Runtime settings for the CSV import pipeline.
    """

    max_error_samples: int = 50
    log_row_errors: bool = True
    default_channel: str = "Unspecified"


@dataclass(frozen=True)
class CsvSourceSettings:
    """
    HTTP behavior when fetching a remote CSV export.
    """

    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0


@dataclass(frozen=True)
class DailyImportScheduleSettings:
    """
    Cron slot of the scheduled URL import (UTC).
    """

    enabled: bool = True
    hour: int = 6
    minute: int = 0


@lru_cache(maxsize=1)
def get_financial_import_settings() -> FinancialImportSettings:
    """
    Return cached import pipeline settings from environment variables.
    """

    return FinancialImportSettings(
        max_error_samples=max(0, _get_int_env("FIN_IMPORT_MAX_ERROR_SAMPLES", 50)),
        log_row_errors=_get_bool_env("FIN_IMPORT_LOG_ROW_ERRORS", True),
        default_channel=_get_str_env("FIN_IMPORT_DEFAULT_CHANNEL", "Unspecified"),
    )


@lru_cache(maxsize=1)
def get_csv_source_settings() -> CsvSourceSettings:
    """
    Return remote CSV fetch settings from environment variables.
    """

    return CsvSourceSettings(
        timeout_seconds=max(1.0, _get_float_env("CSV_SOURCE_TIMEOUT_SECONDS", 30.0)),
        max_retries=max(0, _get_int_env("CSV_SOURCE_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.1, _get_float_env("CSV_SOURCE_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("CSV_SOURCE_BACKOFF_MULTIPLIER", 2.0)),
    )


@lru_cache(maxsize=1)
def get_daily_import_schedule_settings() -> DailyImportScheduleSettings:
    """
    Return the scheduled import cron slot, clamped to valid clock values.
    """

    return DailyImportScheduleSettings(
        enabled=_get_bool_env("DAILY_IMPORT_SCHEDULE_ENABLED", True),
        hour=min(23, max(0, _get_int_env("DAILY_IMPORT_HOUR", 6))),
        minute=min(59, max(0, _get_int_env("DAILY_IMPORT_MINUTE", 0))),
    )
