"""
Core tracking logic module.

Contains the exception hierarchy and the job lifecycle components:
ResourceHandleCache, PollingController and JobTracker. Components are
imported from their modules; only the exceptions are re-exported here so
the models layer can depend on them without import cycles.
"""

from audiotracker.core.exceptions import (
    AudioTrackerException,
    ConfigError,
    JobNotFoundError,
    NotReadyError,
    PermissionDeniedError,
    PollingTimeoutError,
    ResolutionError,
    TrackerClosedError,
    TransportError,
    ValidationError,
)

__all__ = [
    "AudioTrackerException",
    "ConfigError",
    "JobNotFoundError",
    "NotReadyError",
    "PermissionDeniedError",
    "PollingTimeoutError",
    "ResolutionError",
    "TrackerClosedError",
    "TransportError",
    "ValidationError",
]
