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
class MedicineImportSettings:
    """
    Runtime settings for medicine CSV imports.
    """

    max_workers: int = 4
    batch_size: int = 100
    error_preview_size: int = 5
    log_row_errors: bool = True


@dataclass(frozen=True)
class MedicineQuerySettings:
    """
    Runtime settings for medicine list and lookup queries.
    """

    default_page_size: int = 50
    max_page_size: int = 100
    statement_timeout_ms: int = 0


@lru_cache(maxsize=1)
def get_log_level() -> str:
    """
    Return the configured root log level name.
    """

    return _get_str_env("LOG_LEVEL", "INFO").upper()


@lru_cache(maxsize=1)
def get_medicine_import_settings() -> MedicineImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return MedicineImportSettings(
        max_workers=max(1, _get_int_env("MEDICINES_IMPORT_MAX_WORKERS", 4)),
        batch_size=max(1, _get_int_env("MEDICINES_IMPORT_BATCH_SIZE", 100)),
        error_preview_size=max(0, _get_int_env("MEDICINES_IMPORT_ERROR_PREVIEW", 5)),
        log_row_errors=_get_bool_env("MEDICINES_IMPORT_LOG_ROW_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_medicine_query_settings() -> MedicineQuerySettings:
    """
    Return cached query settings from environment variables.
    """

    max_page_size = max(1, _get_int_env("MEDICINES_MAX_PAGE_SIZE", 100))
    return MedicineQuerySettings(
        default_page_size=min(max_page_size, max(1, _get_int_env("MEDICINES_DEFAULT_PAGE_SIZE", 50))),
        max_page_size=max_page_size,
        statement_timeout_ms=max(0, _get_int_env("MEDICINES_STATEMENT_TIMEOUT_MS", 0)),
    )
