"""
Audio job lifecycle tracking for one article view.

Owns the known jobs of an article and the selected job; coordinates
submission, polling, handle resolution, supersession and teardown.

Dependencies: audiotracker.core, audiotracker.models, audiotracker.observability
System role: Public state machine consumed by the article UI layer
"""

import asyncio
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from audiotracker.core.exceptions import (
    AudioTrackerException,
    JobNotFoundError,
    PollingTimeoutError,
    ResolutionError,
    TrackerClosedError,
)
from audiotracker.core.job_status_client import JobStatusClient
from audiotracker.core.polling_controller import PollingController
from audiotracker.core.resource_cache import AudioHandle, ResourceHandleCache, suffix_for_media_type
from audiotracker.models import AudioContent, AudioJob, GenerationOptions, JobStatus, StatusSnapshot
from audiotracker.observability import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


class TrackerEventKind(str, enum.Enum):
    """Changes of the selected job the UI may want to render."""

    UPDATED = "updated"
    READY = "ready"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    RESOLUTION_FAILED = "resolution_failed"


@dataclass(frozen=True)
class TrackerEvent:
    """Notification about the selected job."""

    kind: TrackerEventKind
    job: AudioJob
    handle: AudioHandle | None = None
    error: AudioTrackerException | None = None


TrackerListener = Callable[[TrackerEvent], None]


def _release_orphan(write: asyncio.Future) -> None:
    if write.cancelled() or write.exception() is not None:
        return
    handle = write.result()
    try:
        handle.release()
    except OSError as exc:
        log_exception_with_context(
            logger,
            "Failed to release orphaned audio file",
            exc,
            level=logging.WARNING,
            job_id=handle.job_id,
        )


class JobTracker:
    """
    Audio job tracker for a single article.

    One instance per article view. Exactly one job is selected at a time;
    the selected job's handle is the only one kept alive. dispose() (or
    leaving ``async with``) cancels every poll and releases every handle.
    """

    def __init__(
        self,
        client: JobStatusClient,
        article_id: str,
        controller: PollingController | None = None,
        cache: ResourceHandleCache | None = None,
        listener: TrackerListener | None = None,
    ) -> None:
        """
        Initialize job tracker.

        Args:
            client: Backend client
            article_id: Article whose jobs are tracked
            controller: Optional PollingController (created with defaults if None)
            cache: Optional ResourceHandleCache (created with defaults if None)
            listener: Optional callback for selected-job events
        """
        self.article_id = str(article_id)
        self._client = client
        self._controller = controller if controller is not None else PollingController(client)
        self._cache = cache if cache is not None else ResourceHandleCache()
        self._listener = listener
        self._jobs: dict[str, AudioJob] = {}
        self._errors: dict[str, AudioTrackerException] = {}
        self._resolutions: dict[str, asyncio.Task] = {}
        self._deleted: set[str] = set()
        self._selected_id: str | None = None
        self._disposed = False

    async def __aenter__(self) -> "JobTracker":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    # Read side

    @property
    def jobs(self) -> list[AudioJob]:
        return list(self._jobs.values())

    def get(self, job_id: str) -> AudioJob | None:
        return self._jobs.get(str(job_id))

    @property
    def selected_job_id(self) -> str | None:
        return self._selected_id

    @property
    def selected_job(self) -> AudioJob | None:
        if self._selected_id is None:
            return None
        return self._jobs.get(self._selected_id)

    def handle_for(self, job_id: str) -> AudioHandle | None:
        return self._cache.get(str(job_id))

    @property
    def selected_handle(self) -> AudioHandle | None:
        if self._selected_id is None:
            return None
        return self._cache.get(self._selected_id)

    def error_for(self, job_id: str) -> AudioTrackerException | None:
        """Last timeout or resolution error recorded for a job."""
        return self._errors.get(str(job_id))

    @property
    def disposed(self) -> bool:
        return self._disposed

    # Commands

    async def submit(self, options: GenerationOptions | dict[str, Any] | None = None) -> str:
        """
        Submit a generation request and start tracking it.

        Args:
            options: Generation options (voice settings, summarization flags)

        Returns:
            str: New job id, now selected

        Raises:
            ValidationError: Malformed voice parameters
            PermissionDeniedError: Caller lacks rights on the article
            ConfigError: No default TTS configuration and none supplied
        """
        self._ensure_open()
        submitted = await self._client.submit(self.article_id, options)
        self._ensure_open()

        job = AudioJob(
            id=submitted.id,
            article_id=self.article_id,
            status=JobStatus.PENDING,
            created_at=submitted.created_at,
            file_name=submitted.file_name,
        )
        self._deselect(job.id)
        self._jobs[job.id] = job
        self._selected_id = job.id
        self._start_polling(job.id)

        log_with_context(
            logger,
            logging.INFO,
            "Submitted audio generation",
            article_id=self.article_id,
            job_id=job.id,
        )
        return job.id

    async def select(self, job_id: str) -> AudioHandle | None:
        """
        Make a job the selected one.

        The previously selected job stops polling and loses its handle.
        A running job resumes polling; a completed job gets its handle
        resolved if none is cached.

        Args:
            job_id: Job to select

        Returns:
            AudioHandle | None: Playable handle when the job is COMPLETED

        Raises:
            JobNotFoundError: Job is not tracked
            ResolutionError: Completed job's audio could not be loaded
        """
        self._ensure_open()
        job = self._require(job_id)

        self._deselect(job.id)
        self._selected_id = job.id

        if not job.status.is_terminal:
            self._start_polling(job.id)
            return None
        if job.status is JobStatus.FAILED:
            return None

        handle = self._cache.get(job.id)
        if handle is not None:
            return handle
        self._cancel_resolution(job.id)
        return await self._resolve(job.id)

    async def refresh_list(self) -> list[AudioJob]:
        """
        Repopulate tracked jobs from the backend list.

        Known jobs are reconciled in place and keep their handles. Newly
        seen running jobs, and running jobs whose poll timed out, are polled.
        A known job the list reports as finished is settled as if its poll
        had seen it. Jobs the backend no longer lists are dropped.

        The list reflects the backend at request time: jobs submitted while
        it was in flight stay tracked, and jobs deleted through this tracker
        are never brought back.

        Returns:
            list[AudioJob]: Tracked jobs in backend order, then jobs the
                backend did not list yet
        """
        self._ensure_open()
        known_before = set(self._jobs)
        remote_jobs = await self._client.list_jobs(self.article_id)
        self._ensure_open()

        refreshed: dict[str, AudioJob] = {}
        to_poll: list[str] = []
        settled: list[str] = []
        for remote in remote_jobs:
            if remote.id in self._deleted:
                continue
            local = self._jobs.get(remote.id)
            if local is None:
                if remote.id in known_before:
                    # Removed locally while the list was loading
                    continue
                refreshed[remote.id] = remote
                if not remote.status.is_terminal:
                    to_poll.append(remote.id)
                continue

            was_terminal = local.status.is_terminal
            local.reconcile(remote)
            refreshed[local.id] = local
            if local.status.is_terminal:
                if not was_terminal:
                    self._controller.cancel(local.id)
                    settled.append(local.id)
                elif (
                    local.id == self._selected_id
                    and local.status is JobStatus.COMPLETED
                    and self._cache.get(local.id) is None
                    and local.id not in self._resolutions
                ):
                    settled.append(local.id)
                continue
            timed_out = isinstance(self._errors.get(local.id), PollingTimeoutError)
            if timed_out:
                self._errors.pop(local.id, None)
                to_poll.append(local.id)

        listed = {remote.id for remote in remote_jobs}
        for job_id in known_before - listed:
            if job_id in self._jobs:
                self._drop(job_id)

        for job_id, job in self._jobs.items():
            refreshed.setdefault(job_id, job)
        self._jobs = refreshed

        for job_id in to_poll:
            self._start_polling(job_id)
        for job_id in settled:
            self._settle(job_id)

        log_with_context(
            logger,
            logging.DEBUG,
            "Refreshed audio job list",
            article_id=self.article_id,
            count=len(refreshed),
            polling=to_poll,
        )
        return self.jobs

    async def delete(self, job_id: str) -> None:
        """
        Delete a job locally and on the backend.

        Args:
            job_id: Job to delete

        Raises:
            JobNotFoundError: Job is not tracked
        """
        self._ensure_open()
        job = self._require(job_id)

        self._controller.forget(job.id)
        self._cancel_resolution(job.id)
        self._cache.release(job.id)

        self._deleted.add(job.id)
        try:
            await self._client.delete(job.id)
        except Exception:
            self._deleted.discard(job.id)
            raise

        self._jobs.pop(job.id, None)
        self._errors.pop(job.id, None)
        if self._selected_id == job.id:
            self._selected_id = None
        logger.info("Deleted audio job %s", job.id)

    async def recheck(self, job_id: str) -> AudioJob:
        """
        Check a job's status once, on demand.

        Meant for the manual re-check offered after a polling timeout.
        Polling restarts if the job is still running.

        Args:
            job_id: Job to check

        Returns:
            AudioJob: The updated job
        """
        self._ensure_open()
        job = self._require(job_id)
        snapshot = await self._client.get_status(job.id)
        self._ensure_open()

        self._errors.pop(job.id, None)
        if snapshot.status.is_terminal:
            self._controller.cancel(job.id)
            self._on_terminal(job.id, snapshot)
        else:
            job.apply_snapshot(snapshot)
            self._start_polling(job.id)
        return job

    async def download(self, job_id: str, destination: Path | str) -> Path:
        """
        Save the complete audio file of a completed job.

        Args:
            job_id: Completed job
            destination: Target file, or directory for audio-<id>.<ext>

        Returns:
            Path: Written file
        """
        self._ensure_open()
        job = self._require(job_id)
        content = await self._client.download(job.id)

        target = Path(destination)
        if target.is_dir():
            target = target / f"audio-{job.id}{suffix_for_media_type(content.media_type)}"
        await asyncio.to_thread(target.write_bytes, content.data)
        logger.info("Downloaded audio job %s to %s", job.id, target)
        return target

    async def dispose(self) -> None:
        """
        Tear down every poll, pending resolution and handle.

        Idempotent and never raises.
        """
        if self._disposed:
            return
        self._disposed = True
        self._selected_id = None

        self._controller.cancel_all()
        resolutions = list(self._resolutions.values())
        for task in resolutions:
            task.cancel()
        self._resolutions.clear()

        failed = self._cache.release_all()

        await self._controller.aclose()
        if resolutions:
            await asyncio.gather(*resolutions, return_exceptions=True)

        log_with_context(
            logger,
            logging.DEBUG,
            "Disposed audio job tracker",
            article_id=self.article_id,
            failed_releases=failed,
        )

    # Polling callbacks

    def _on_update(self, job_id: str, snapshot: StatusSnapshot) -> None:
        job = self._jobs.get(job_id)
        if job is None or not job.apply_snapshot(snapshot):
            return
        if job_id == self._selected_id:
            self._notify(TrackerEventKind.UPDATED, job)

    def _on_terminal(self, job_id: str, snapshot: StatusSnapshot) -> None:
        job = self._jobs.get(job_id)
        if job is None:
            return
        job.apply_snapshot(snapshot)
        self._settle(job_id)

    def _on_timeout(self, job_id: str, error: PollingTimeoutError) -> None:
        job = self._jobs.get(job_id)
        if job is None:
            return
        self._errors[job_id] = error
        if job_id == self._selected_id:
            self._notify(TrackerEventKind.TIMED_OUT, job, error=error)

    # Internals

    def _settle(self, job_id: str) -> None:
        """Report a failure or start handle resolution for a finished job."""
        job = self._jobs.get(job_id)
        if job is None or not job.status.is_terminal:
            return
        self._errors.pop(job_id, None)

        if job.status is JobStatus.FAILED:
            log_with_context(
                logger,
                logging.INFO,
                "Audio generation failed",
                job=job,
                error_message=job.error_message,
            )
            if job_id == self._selected_id:
                self._notify(TrackerEventKind.FAILED, job)
            return

        if job_id == self._selected_id and self._cache.get(job_id) is None:
            self._schedule_resolution(job_id)

    def _start_polling(self, job_id: str) -> None:
        self._controller.start(
            job_id,
            on_update=self._on_update,
            on_terminal=self._on_terminal,
            on_timeout=self._on_timeout,
        )

    def _deselect(self, next_id: str) -> None:
        previous = self._selected_id
        if previous is None or previous == next_id:
            return
        self._controller.cancel(previous)
        self._cancel_resolution(previous)
        self._cache.release(previous)
        self._selected_id = None

    def _drop(self, job_id: str) -> None:
        self._jobs.pop(job_id, None)
        self._controller.forget(job_id)
        self._cancel_resolution(job_id)
        self._cache.release(job_id)
        self._errors.pop(job_id, None)
        if self._selected_id == job_id:
            self._selected_id = None

    def _schedule_resolution(self, job_id: str) -> None:
        self._cancel_resolution(job_id)
        task = asyncio.get_running_loop().create_task(
            self._resolve_in_background(job_id),
            name=f"audio-resolve-{job_id}",
        )
        self._resolutions[job_id] = task
        task.add_done_callback(lambda t: self._forget_resolution(job_id, t))

    async def _resolve_in_background(self, job_id: str) -> None:
        try:
            await self._resolve(job_id)
        except ResolutionError:
            # Recorded and reported by _resolve; select() retries
            pass

    async def _resolve(self, job_id: str) -> AudioHandle | None:
        """
        Fetch and materialize the audio of a completed, selected job.

        Returns None when the selection moved on while fetching or writing.
        """
        try:
            content = await self._client.get_stream_handle(job_id)
            if self._disposed or self._selected_id != job_id:
                return None
            handle = await self._write_handle(job_id, content)
            if self._disposed or self._selected_id != job_id:
                handle.release()
                return None
            self._cache.set(job_id, handle)
        except (AudioTrackerException, OSError) as exc:
            error = ResolutionError(job_id, details={"cause": str(exc)})
            self._errors[job_id] = error
            log_exception_with_context(
                logger,
                "Failed to resolve audio handle",
                exc,
                level=logging.WARNING,
                job_id=job_id,
            )
            job = self._jobs.get(job_id)
            if job is not None and job_id == self._selected_id:
                self._notify(TrackerEventKind.RESOLUTION_FAILED, job, error=error)
            raise error from exc

        self._errors.pop(job_id, None)
        job = self._jobs.get(job_id)
        if job is not None:
            self._notify(TrackerEventKind.READY, job, handle=handle)
        return handle

    async def _write_handle(self, job_id: str, content: AudioContent) -> AudioHandle:
        write = asyncio.ensure_future(asyncio.to_thread(self._cache.write, job_id, content))
        try:
            return await asyncio.shield(write)
        except asyncio.CancelledError:
            # The thread keeps running; whatever it writes belongs to nobody
            write.add_done_callback(_release_orphan)
            raise

    def _cancel_resolution(self, job_id: str) -> None:
        task = self._resolutions.pop(job_id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    def _forget_resolution(self, job_id: str, task: asyncio.Task) -> None:
        if self._resolutions.get(job_id) is task:
            del self._resolutions[job_id]

    def _notify(
        self,
        kind: TrackerEventKind,
        job: AudioJob,
        handle: AudioHandle | None = None,
        error: AudioTrackerException | None = None,
    ) -> None:
        if self._listener is None:
            return
        self._listener(TrackerEvent(kind=kind, job=job, handle=handle, error=error))

    def _require(self, job_id: str) -> AudioJob:
        job = self._jobs.get(str(job_id))
        if job is None:
            raise JobNotFoundError(str(job_id), details={"article_id": self.article_id})
        return job

    def _ensure_open(self) -> None:
        if self._disposed:
            raise TrackerClosedError(
                "Audio job tracker has been disposed",
                details={"article_id": self.article_id},
            )
