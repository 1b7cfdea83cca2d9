"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from audiotracker.configs.api_client import ApiClientSettings
from audiotracker.configs.handles import HandleSettings
from audiotracker.configs.polling import PollingSettings
from audiotracker.configs.settings import Settings, get_settings

__all__ = [
    "ApiClientSettings",
    "HandleSettings",
    "PollingSettings",
    "Settings",
    "get_settings",
]
