"""
Job status client interface.

Structural contract the tracker needs from the editorial backend.
Implemented over HTTP by HttpJobStatusClient; tests provide fakes.

Dependencies: audiotracker.models
System role: Port between the tracker core and the REST API
"""

from typing import Any, Protocol, runtime_checkable

from audiotracker.models import (
    AudioContent,
    AudioJob,
    GenerationOptions,
    StatusSnapshot,
    SubmittedJob,
)


@runtime_checkable
class JobStatusClient(Protocol):
    """Backend operations consumed by JobTracker and PollingController."""

    async def submit(
        self,
        article_id: str,
        options: GenerationOptions | dict[str, Any] | None = None,
    ) -> SubmittedJob:
        """
        Request audio generation for an article.

        Raises:
            ValidationError: Malformed voice parameters
            PermissionDeniedError: Caller lacks rights on the article
            ConfigError: No default TTS configuration and none supplied
        """
        ...

    async def get_status(self, job_id: str) -> StatusSnapshot:
        """
        Fetch current status of a job.

        Raises:
            JobNotFoundError: The job no longer exists
            TransportError: Backend unreachable
        """
        ...

    async def get_stream_handle(self, job_id: str) -> AudioContent:
        """
        Fetch streamable audio of a completed job.

        Raises:
            NotReadyError: The job is not COMPLETED
        """
        ...

    async def list_jobs(self, article_id: str) -> list[AudioJob]:
        """List all jobs belonging to an article."""
        ...

    async def delete(self, job_id: str) -> None:
        """Delete a job and its audio."""
        ...

    async def download(self, job_id: str) -> AudioContent:
        """Fetch the complete audio file of a completed job."""
        ...
