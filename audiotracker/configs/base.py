"""
Shared settings base.

Every audio tracker config class reads the same .env file with the same
matching rules; subclasses only add their own env_prefix.

Dependencies: pydantic_settings
System role: Common source rules for all configuration classes
"""

from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Settings read from the environment and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
