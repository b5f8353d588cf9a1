"""Global configuration for gremlink.

This module provides centralized configuration management with support for
environment variables and sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class GremlinkConfig(BaseSettings):
    """gremlink configuration settings.

    Values can be overridden via environment variables with GREMLINK_ prefix.
    Example: GREMLINK_RETRY_MAX_ATTEMPTS=3 overrides retry_max_attempts.
    """

    # Query retries
    retry_max_attempts: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Total attempts per query, including the first",
    )
    retry_interval_ms: int = Field(
        default=1000,
        ge=0,
        le=60000,
        description="Fixed wait between attempts in milliseconds",
    )

    # Element writes
    label_separator: str = Field(
        default="::",
        min_length=1,
        description="Separator used to join multiple vertex labels",
    )

    log_level: str = Field(
        default="WARNING",
        description="Log level used by the CLI",
    )

    model_config = {
        "env_prefix": "GREMLINK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_config() -> GremlinkConfig:
    """Get cached configuration instance.

    Returns:
        GremlinkConfig singleton instance.
    """
    return GremlinkConfig()


def reload_config() -> GremlinkConfig:
    """Reload configuration (clears cache).

    Returns:
        Fresh GremlinkConfig instance.
    """
    get_config.cache_clear()
    return get_config()
