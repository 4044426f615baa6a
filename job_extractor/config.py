"""Environment-driven settings for the job posting extractor."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .text import ExtractionThresholds

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)
DEFAULT_REFERER = "https://www.google.com"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class Settings:
    user_agent: str = DEFAULT_USER_AGENT
    referer: str = DEFAULT_REFERER
    direct_timeout: float = 15.0
    relay_timeout: float = 15.0
    slow_relay_timeout: float = 20.0
    max_redirects: int = 5
    enable_relays: bool = True
    enable_cors_anywhere: bool = True
    thresholds: ExtractionThresholds = field(default_factory=ExtractionThresholds)
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build :class:`Settings` from ``JOB_EXTRACTOR_*`` environment variables."""

    defaults = ExtractionThresholds()
    thresholds = ExtractionThresholds(
        min_length=_env_int("JOB_EXTRACTOR_MIN_LENGTH", defaults.min_length),
        max_length=_env_int("JOB_EXTRACTOR_MAX_LENGTH", defaults.max_length),
        min_tokens=_env_int("JOB_EXTRACTOR_MIN_TOKENS", defaults.min_tokens),
        block_min_length=_env_int("JOB_EXTRACTOR_BLOCK_MIN", defaults.block_min_length),
        block_max_length=_env_int("JOB_EXTRACTOR_BLOCK_MAX", defaults.block_max_length),
        last_resort_min_length=_env_int(
            "JOB_EXTRACTOR_LAST_RESORT_MIN", defaults.last_resort_min_length
        ),
        degraded_min_length=_env_int("JOB_EXTRACTOR_DEGRADED_MIN", defaults.degraded_min_length),
    )
    return Settings(
        user_agent=os.getenv("JOB_EXTRACTOR_USER_AGENT", DEFAULT_USER_AGENT),
        referer=os.getenv("JOB_EXTRACTOR_REFERER", DEFAULT_REFERER),
        direct_timeout=_env_float("JOB_EXTRACTOR_DIRECT_TIMEOUT", 15.0),
        relay_timeout=_env_float("JOB_EXTRACTOR_RELAY_TIMEOUT", 15.0),
        slow_relay_timeout=_env_float("JOB_EXTRACTOR_SLOW_RELAY_TIMEOUT", 20.0),
        max_redirects=_env_int("JOB_EXTRACTOR_MAX_REDIRECTS", 5),
        enable_relays=_env_bool("JOB_EXTRACTOR_ENABLE_RELAYS", True),
        enable_cors_anywhere=_env_bool("JOB_EXTRACTOR_ENABLE_CORS_ANYWHERE", True),
        thresholds=thresholds,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
