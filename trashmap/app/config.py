"""
Configuration helpers for the desktop client.

Values come from the environment (optionally populated from a ``.env`` file by
the entry point) and fall back to the defaults in ``constants``.
"""

import logging
import math
import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

from trashmap.app.constants import (
    DEFAULT_API_TIMEOUT_S,
    DEFAULT_API_URL,
    DEFAULT_LOG_BACKUPS,
    DEFAULT_LOG_DIR,
    DEFAULT_LOG_MAX_MB,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SEARCH_RADIUS_KM,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRUTHY = {"1", "true", "yes", "on"}


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _not_negative(value: int) -> bool:
    return value >= 0


def _read(
    env: Mapping[str, str],
    key: str,
    default: T,
    parse: Callable[[str], T],
    accept: Optional[Callable[[T], bool]] = None,
) -> T:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = parse(raw.strip())
    except ValueError:
        logger.warning(f"Invalid value for {key}: {raw!r}, using {default!r}")
        return default
    if accept is not None and not accept(value):
        logger.warning(f"Out of range value for {key}: {raw!r}, using {default!r}")
        return default
    return value


@dataclass
class AppConfig:
    """
    Runtime settings.

    Attributes:
        api_url: Backend API root.
        api_timeout: Request timeout in seconds.
        search_radius_km: Nearby search radius.
        search_limit: Maximum results per search.
        debug: Enables DEBUG logging.
        log_dir: Directory for the rotating log file.
        log_max_mb: Size at which the log file rotates.
        log_backups: Number of rotated files kept.
    """

    api_url: str = DEFAULT_API_URL
    api_timeout: float = DEFAULT_API_TIMEOUT_S
    search_radius_km: float = DEFAULT_SEARCH_RADIUS_KM
    search_limit: int = DEFAULT_SEARCH_LIMIT
    debug: bool = False
    log_dir: str = DEFAULT_LOG_DIR
    log_max_mb: int = DEFAULT_LOG_MAX_MB
    log_backups: int = DEFAULT_LOG_BACKUPS

    @property
    def log_max_bytes(self) -> int:
        return self.log_max_mb * 1024 * 1024

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """
        Builds a config from environment variables.

        Numbers that do not parse, and timeouts, radii, limits or log sizes
        that are not positive, are replaced by their defaults with a warning.

        Args:
            env: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            AppConfig: Populated configuration.
        """
        env = os.environ if env is None else env
        return cls(
            api_url=env.get("TRASHMAP_API_URL", "").strip() or DEFAULT_API_URL,
            api_timeout=_read(
                env, "TRASHMAP_API_TIMEOUT", DEFAULT_API_TIMEOUT_S, float, _positive
            ),
            search_radius_km=_read(
                env,
                "TRASHMAP_SEARCH_RADIUS_KM",
                DEFAULT_SEARCH_RADIUS_KM,
                float,
                _positive,
            ),
            search_limit=_read(
                env, "TRASHMAP_SEARCH_LIMIT", DEFAULT_SEARCH_LIMIT, int, _positive
            ),
            debug=env.get("TRASHMAP_DEBUG", "").strip().lower() in TRUTHY,
            log_dir=env.get("TRASHMAP_LOG_DIR", "").strip() or DEFAULT_LOG_DIR,
            log_max_mb=_read(
                env, "TRASHMAP_LOG_MAX_MB", DEFAULT_LOG_MAX_MB, int, _positive
            ),
            log_backups=_read(
                env, "TRASHMAP_LOG_BACKUPS", DEFAULT_LOG_BACKUPS, int, _not_negative
            ),
        )
