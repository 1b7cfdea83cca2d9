"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides a cached factory for dependency wiring.

Dependencies: All config modules
System role: Central configuration aggregator for the tracker
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator

from audiotracker.configs.api_client import ApiClientSettings
from audiotracker.configs.base import BaseSettings
from audiotracker.configs.handles import HandleSettings
from audiotracker.configs.polling import PollingSettings


class Settings(BaseSettings):
    """Unified settings aggregating all config modules."""

    log_level: str = Field(
        default="INFO",
        description="Level applied to the audiotracker loggers (DEBUG, INFO, WARNING, ...)",
    )
    log_to_stdout: bool = Field(
        default=False,
        description="Install the stdout root handler when a session starts",
    )

    # Aggregated settings
    api: ApiClientSettings = Field(default_factory=ApiClientSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)
    handles: HandleSettings = Field(default_factory=HandleSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize to an upper-case level name known to logging."""
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are loaded once, on first call.

    Returns:
        Settings: Application settings instance

    Usage:
        from audiotracker.configs import get_settings
        settings = get_settings()
    """
    return Settings()
