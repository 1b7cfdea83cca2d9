"""
Polling configuration settings.

Tick interval and safety timeout for audio job status polling.

Dependencies: pydantic, pydantic_settings
System role: Timing configuration for PollingController
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from audiotracker.configs.base import BaseSettings


class PollingSettings(BaseSettings):
    """Status polling cadence and safety timeout."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUDIO_POLL_",
        case_sensitive=False,
        extra="ignore",
    )

    interval_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Delay between two status checks of the same job",
    )
    timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Stop polling a job that has not finished after this long",
    )
