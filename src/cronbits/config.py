"""Process-wide settings for cronbits.

Settings are read at query time and never stored in parsed expressions, so
a parsed expression stays immutable and shareable whatever the settings.

Environment variables:
    - CRONBITS_MAX_YEAR: Last year examined by searches (default 2100)
    - CRONBITS_LOCAL_TIMEZONE: IANA zone used for "local" datetimes
    - CRONBITS_INCLUDE_SECONDS: Default for the CLI ``--seconds`` option
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from datetime import datetime

DEFAULT_MAX_YEAR = 2100

_MIN_YEAR = 1
_MAX_YEAR = 9999


@dataclass(frozen=True)
class CronConfig:
    """Settings for occurrence searches.

    Example:
        >>> set_config(CronConfig(local_timezone="Europe/Berlin"))
    """

    max_year: int = DEFAULT_MAX_YEAR
    local_timezone: str | None = None
    include_seconds: bool = False

    def __post_init__(self) -> None:
        clamped = min(max(self.max_year, _MIN_YEAR), _MAX_YEAR)
        object.__setattr__(self, "max_year", clamped)

    @property
    def search_ceiling(self) -> datetime:
        """Upper bound of unbounded searches."""
        return datetime(self.max_year, 1, 1)

    @classmethod
    def from_env(cls) -> "CronConfig":
        """Create configuration from environment variables.

        Returns:
            CronConfig from environment.
        """
        try:
            max_year = int(os.environ.get("CRONBITS_MAX_YEAR", DEFAULT_MAX_YEAR))
        except ValueError:
            max_year = DEFAULT_MAX_YEAR

        include_seconds = os.environ.get("CRONBITS_INCLUDE_SECONDS", "").lower() in (
            "1",
            "true",
            "yes",
            "on",
        )

        return cls(
            max_year=max_year,
            local_timezone=os.environ.get("CRONBITS_LOCAL_TIMEZONE") or None,
            include_seconds=include_seconds,
        )


_config: CronConfig | None = None
_lock = threading.Lock()


def get_config() -> CronConfig:
    """Get the global configuration, creating it from the environment."""
    global _config
    if _config is None:
        with _lock:
            if _config is None:
                _config = CronConfig.from_env()
    return _config


def set_config(config: CronConfig) -> None:
    """Replace the global configuration."""
    global _config
    with _lock:
        _config = config


def reset_config() -> None:
    """Drop the global configuration so the next access re-reads the environment."""
    global _config
    with _lock:
        _config = None
