"""
Audio job domain models and schemas.

Client-side view of server audio-generation jobs, status snapshots
returned by polling, and raw audio payloads.

Dependencies: pydantic
System role: Audio job status contracts
"""

import enum
from dataclasses import dataclass
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from audiotracker.core.exceptions import ValidationError


class JobStatus(str, enum.Enum):
    """
    Audio job states as seen by the client.

    PENDING: Submitted, first status check not confirmed yet (client only)
    GENERATING: Backend is preparing content or synthesizing audio
    COMPLETED: Audio is ready to stream or download
    FAILED: Generation failed; see error_message
    """

    PENDING = "PENDING"
    GENERATING = "GENERATING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    @classmethod
    def from_server(cls, value: "str | JobStatus") -> "JobStatus":
        """
        Map a backend processing status onto a client status.

        Every non-terminal backend stage collapses to GENERATING.

        Args:
            value: Backend status string

        Returns:
            JobStatus: Client status

        Raises:
            ValidationError: If the value is not a known backend status
        """
        if isinstance(value, JobStatus):
            return value
        normalized = str(value).strip().upper()
        if normalized == "COMPLETED":
            return cls.COMPLETED
        if normalized == "FAILED":
            return cls.FAILED
        if normalized in _SERVER_IN_PROGRESS:
            return cls.GENERATING
        raise ValidationError(f"Unknown audio job status: {value!r}", field="status")


_SERVER_IN_PROGRESS = frozenset(
    {"PENDING", "FETCHING_NEWS", "PROCESSING_CONTENT", "GENERATING_AUDIO", "GENERATING"}
)


class StatusSnapshot(BaseModel):
    """One status check result for a job."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: JobStatus
    progress: float | None = Field(
        default=None,
        validation_alias=AliasChoices("progressPercentage", "progress"),
        description="Progress percentage (0-100), None when unknown",
    )
    error_message: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _map_status(cls, value):
        return JobStatus.from_server(value)

    @field_validator("progress")
    @classmethod
    def _clamp_progress(cls, value: float | None) -> float | None:
        if value is None:
            return None
        return max(0.0, min(100.0, float(value)))


class SubmittedJob(BaseModel):
    """Job reference returned by the generation endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    file_name: str | None = None
    created_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        return str(value)


class AudioJob(BaseModel):
    """
    Tracked audio-generation job for one article.

    Attributes:
        id: Opaque backend identifier
        article_id: Owning article
        status: Current client status
        progress: Latest progress percentage, None when unknown
        error_message: Failure reason, only set when FAILED
        created_at: Creation timestamp, immutable once set
        file_name: Audio file name, immutable once set

    The playable handle of a completed job lives in ResourceHandleCache,
    never on this model.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    id: str
    article_id: str
    status: JobStatus = JobStatus.PENDING
    progress: float | None = Field(
        default=None,
        validation_alias=AliasChoices("progressPercentage", "progress"),
    )
    error_message: str | None = None
    created_at: datetime | None = None
    file_name: str | None = None

    @field_validator("id", "article_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value):
        return str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _map_status(cls, value):
        return JobStatus.from_server(value)

    def apply_snapshot(self, snapshot: StatusSnapshot) -> bool:
        """
        Apply a status check result in place.

        A terminal job never changes state again.

        Args:
            snapshot: Latest status check result

        Returns:
            bool: True if the snapshot was applied, False if ignored
        """
        if self.status.is_terminal:
            return False
        if snapshot.status is not JobStatus.PENDING:
            self.status = snapshot.status
        if snapshot.progress is not None:
            self.progress = snapshot.progress
        if snapshot.status is JobStatus.COMPLETED:
            self.progress = 100.0
            self.error_message = None
        elif snapshot.status is JobStatus.FAILED:
            self.error_message = snapshot.error_message or "Audio generation failed"
        return True

    def reconcile(self, remote: "AudioJob") -> bool:
        """
        Merge a freshly listed copy of this job.

        Descriptive metadata is only filled in when missing.

        Args:
            remote: Same job as returned by the list endpoint

        Returns:
            bool: True if the status information was applied
        """
        if self.created_at is None and remote.created_at is not None:
            self.created_at = remote.created_at
        if self.file_name is None and remote.file_name is not None:
            self.file_name = remote.file_name
        return self.apply_snapshot(
            StatusSnapshot(
                status=remote.status,
                progress=remote.progress,
                error_message=remote.error_message,
            )
        )

    @property
    def status_message(self) -> str:
        """Human-readable progress line for the article view."""
        if self.status is JobStatus.PENDING:
            return "Audio generation queued..."
        if self.status is JobStatus.GENERATING:
            if self.progress is None:
                return "Generating audio..."
            return f"Generating audio... {self.progress:.1f}%"
        if self.status is JobStatus.COMPLETED:
            return "Audio generation completed successfully!"
        return f"Audio generation failed: {self.error_message or 'unknown error'}"


@dataclass(frozen=True)
class AudioContent:
    """Raw audio payload fetched from the stream or download endpoint."""

    data: bytes
    media_type: str

    def __len__(self) -> int:
        return len(self.data)
