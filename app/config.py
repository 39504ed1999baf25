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


@dataclass(frozen=True)
class DashboardSettings:
    """
    Runtime settings for dashboard reads.

    ``renewal_list_limit`` of ``None`` returns every renewal in the horizon.
    """

    renewal_horizon_days: int = 90
    renewal_list_limit: int | None = None


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for client imports.
    """

    max_failure_details: int = 500
    log_failures: bool = True
    require_all_fields: bool = False


@lru_cache(maxsize=1)
def get_dashboard_settings() -> DashboardSettings:
    """
    Return cached dashboard settings from environment variables.
    """

    limit = _get_int_env("DASHBOARD_RENEWAL_LIST_LIMIT", 0)
    return DashboardSettings(
        renewal_horizon_days=max(0, _get_int_env("DASHBOARD_RENEWAL_HORIZON_DAYS", 90)),
        renewal_list_limit=limit if limit > 0 else None,
    )


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        max_failure_details=max(1, _get_int_env("IMPORT_MAX_FAILURE_DETAILS", 500)),
        log_failures=_get_bool_env("IMPORT_LOG_FAILURES", True),
        require_all_fields=_get_bool_env("IMPORT_REQUIRE_ALL_FIELDS", False),
    )
