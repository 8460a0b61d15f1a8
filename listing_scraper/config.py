"""Agent construction config and its environment loader."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .fetchers import DEFAULT_FIRECRAWL_URL

ENV_PREFIX = "LISTING_SCRAPER_"


@dataclass(frozen=True)
class AgentConfig:
    fetch_service_api_key: str = ""
    default_timeout: int = 30000
    max_retries: int = 3
    respect_rate_limit: bool = True
    fetch_service_url: str = DEFAULT_FIRECRAWL_URL
    batch_concurrency: int = 3
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 10.0
    rate_limit_burst: int = 5
    max_rate_limit_wait_seconds: Optional[float] = 300.0

    def __post_init__(self) -> None:
        if self.default_timeout <= 0:
            raise ValueError("default_timeout must be positive (milliseconds)")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.batch_concurrency < 1:
            raise ValueError("batch_concurrency must be >= 1")
        if self.rate_limit_burst < 1:
            raise ValueError("rate_limit_burst must be >= 1")


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _get_int_env(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _get_float_env(name: str, default: float, minimum: float) -> float:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_config_from_env(dotenv_path: Optional[str] = None) -> AgentConfig:
    """Build an AgentConfig from ``LISTING_SCRAPER_*`` variables.

    A ``.env`` file is loaded first without overriding variables already
    set. Invalid numeric values fall back to the defaults.
    """
    load_dotenv(dotenv_path=dotenv_path, override=False)
    defaults = AgentConfig()
    api_key = _get_str_env("API_KEY", os.getenv("FIRECRAWL_API_KEY", "").strip())
    return AgentConfig(
        fetch_service_api_key=api_key,
        default_timeout=_get_int_env("TIMEOUT_MS", defaults.default_timeout, minimum=1),
        max_retries=_get_int_env("MAX_RETRIES", defaults.max_retries, minimum=0),
        respect_rate_limit=_get_bool_env("RESPECT_RATE_LIMIT", defaults.respect_rate_limit),
        fetch_service_url=_get_str_env("FETCH_SERVICE_URL", defaults.fetch_service_url),
        batch_concurrency=_get_int_env("BATCH_CONCURRENCY", defaults.batch_concurrency, minimum=1),
        backoff_base_seconds=_get_float_env("BACKOFF_BASE_SECONDS", defaults.backoff_base_seconds, minimum=0.0),
        backoff_max_seconds=_get_float_env("BACKOFF_MAX_SECONDS", defaults.backoff_max_seconds, minimum=0.0),
        rate_limit_burst=_get_int_env("RATE_LIMIT_BURST", defaults.rate_limit_burst, minimum=1),
        max_rate_limit_wait_seconds=_get_float_env(
            "MAX_RATE_LIMIT_WAIT_SECONDS", defaults.max_rate_limit_wait_seconds, minimum=0.0
        ),
    )
