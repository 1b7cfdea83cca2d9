"""
Audio API client configuration settings.

Connection parameters for the editorial backend REST API.

Dependencies: pydantic, pydantic_settings
System role: HTTP client configuration for HttpJobStatusClient
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from audiotracker.configs.base import BaseSettings


class ApiClientSettings(BaseSettings):
    """Editorial backend connection settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUDIO_API_",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:8080/api/v1",
        description="Base URL of the editorial REST API",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds",
    )
    access_token: str | None = Field(
        default=None,
        description="Bearer token sent with every request",
    )
    missing_config_codes: list[int] = Field(
        default_factory=lambda: [4004],
        description="Envelope codes meaning no default TTS configuration exists",
    )
