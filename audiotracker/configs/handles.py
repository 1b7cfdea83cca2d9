"""
Audio handle configuration settings.

Where streamed audio is materialized locally and how it is typed.

Dependencies: pydantic, pydantic_settings
System role: Storage configuration for ResourceHandleCache
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from audiotracker.configs.base import BaseSettings


class HandleSettings(BaseSettings):
    """Local audio handle settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUDIO_HANDLE_",
        case_sensitive=False,
        extra="ignore",
    )

    directory: Path | None = Field(
        default=None,
        description="Directory for materialized audio (system temp dir if unset)",
    )
    default_media_type: str = Field(
        default="audio/wav",
        description="Media type assumed when the stream response has none",
    )
    file_prefix: str = Field(
        default="audio-",
        description="Filename prefix for materialized audio files",
    )
