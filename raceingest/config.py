"""
raceingest/config.py

Runtime settings for scrape-job orchestration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_USER_AGENT = "RaceIngest/1.0 (Race Results Ingestion)"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


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
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ScrapeJobSettings:
    """
    Settings shared by the coordinator, the probe and the capabilities.
    """

    probe_timeout_seconds: float = 5.0
    http_timeout_seconds: float = 60.0
    user_agent: str = DEFAULT_USER_AGENT
    results_batch_size: int = 500
    max_workers: int = 4
    error_message_max_length: int = 2000


@lru_cache(maxsize=1)
def get_scrape_job_settings() -> ScrapeJobSettings:
    """
    Return cached scrape-job settings from environment variables.
    """

    return ScrapeJobSettings(
        probe_timeout_seconds=max(0.5, _get_float_env("SCRAPE_PROBE_TIMEOUT_SECONDS", 5.0)),
        http_timeout_seconds=max(1.0, _get_float_env("SCRAPE_HTTP_TIMEOUT_SECONDS", 60.0)),
        user_agent=_get_str_env("SCRAPE_USER_AGENT", DEFAULT_USER_AGENT),
        results_batch_size=max(1, _get_int_env("SCRAPE_RESULTS_BATCH_SIZE", 500)),
        max_workers=max(1, _get_int_env("SCRAPE_MAX_WORKERS", 4)),
        error_message_max_length=max(
            80, _get_int_env("SCRAPE_ERROR_MESSAGE_MAX_LENGTH", 2000)
        ),
    )
