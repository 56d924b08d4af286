"""Environment-driven settings and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

DEFAULT_REFRESH_INTERVAL = 5 * 60.0  # seconds
DEFAULT_REQUEST_TIMEOUT = 10.0

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    source_url: str = ""
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    refetch_on_filter_change: bool = True
    log_level: str = "INFO"


def _positive_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_settings() -> Settings:
    """Read settings from the environment."""
    return Settings(
        source_url=os.getenv("FEED_SOURCE_URL", "").strip(),
        refresh_interval=_positive_float("FEED_REFRESH_INTERVAL", DEFAULT_REFRESH_INTERVAL),
        request_timeout=_positive_float("FEED_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        refetch_on_filter_change=_flag("FEED_REFETCH_ON_FILTER_CHANGE", True),
        log_level=os.getenv("FEED_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
