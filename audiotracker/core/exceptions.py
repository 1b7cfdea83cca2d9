"""
Exception hierarchy for the audio job tracker.

Provides layered exception structure for audio-generation errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the tracker
"""

from typing import Any


class AudioTrackerException(Exception):
    """Base exception for all audio tracker errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(AudioTrackerException):
    """Raised when generation options or payloads fail validation."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class PermissionDeniedError(AudioTrackerException):
    """Raised when the caller lacks rights on the article or job."""

    pass


class ConfigError(AudioTrackerException):
    """Raised when no default TTS configuration exists and none was supplied."""

    pass


class JobNotFoundError(AudioTrackerException):
    """Raised when an audio job cannot be found."""

    def __init__(self, job_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize job not found error.

        Args:
            job_id: ID of the missing job
            details: Additional context
        """
        details = details or {}
        details["job_id"] = job_id
        self.job_id = job_id
        super().__init__(f"Audio job not found: {job_id}", details)


class NotReadyError(AudioTrackerException):
    """Raised when audio content is requested before the job completed."""

    def __init__(self, job_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["job_id"] = job_id
        self.job_id = job_id
        super().__init__(f"Audio job {job_id} is not completed yet", details)


class ResolutionError(AudioTrackerException):
    """Raised when a completed job cannot be turned into a playable handle."""

    def __init__(
        self,
        job_id: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize resolution error.

        Args:
            job_id: ID of the completed job
            message: Optional message (defaults to a generic one)
            details: Additional context
        """
        details = details or {}
        details["job_id"] = job_id
        self.job_id = job_id
        super().__init__(message or f"Failed to load audio stream for job {job_id}", details)


class PollingTimeoutError(AudioTrackerException):
    """Raised when a job does not reach a terminal state within the safety timeout."""

    def __init__(
        self,
        job_id: str,
        timeout_seconds: float,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize polling timeout error.

        Args:
            job_id: ID of the job that timed out
            timeout_seconds: Safety timeout that elapsed
            details: Additional context
        """
        details = details or {}
        details["job_id"] = job_id
        details["timeout_seconds"] = timeout_seconds
        self.job_id = job_id
        self.timeout_seconds = timeout_seconds
        super().__init__(
            "Status check timeout. Please check the audio status manually.",
            details,
        )


class TransportError(AudioTrackerException):
    """Raised when the backend cannot be reached or answers with a server error."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, details)


class TrackerClosedError(AudioTrackerException):
    """Raised when a disposed JobTracker is used again."""

    pass
