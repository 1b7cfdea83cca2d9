"""
Audio job status polling.

Runs one cancellable polling loop per job: periodic status checks,
terminal-state detection, safety timeout, and supersession of older loops.

Dependencies: asyncio, audiotracker.core.exceptions, audiotracker.models
System role: Status polling engine behind JobTracker
"""

import asyncio
import enum
import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass

from audiotracker.core.exceptions import (
    AudioTrackerException,
    JobNotFoundError,
    PollingTimeoutError,
    TransportError,
)
from audiotracker.core.job_status_client import JobStatusClient
from audiotracker.models import JobStatus, StatusSnapshot
from audiotracker.observability import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

JOB_GONE_MESSAGE = "Audio job no longer exists"

UpdateCallback = Callable[[str, StatusSnapshot], None]
TerminalCallback = Callable[[str, StatusSnapshot], None]
TimeoutCallback = Callable[[str, PollingTimeoutError], None]


class PollState(str, enum.Enum):
    """Lifecycle of the polling loop of one job."""

    IDLE = "idle"
    POLLING = "polling"
    STOPPED = "stopped"


class StopReason(str, enum.Enum):
    """
    Why a polling loop stopped.

    TERMINAL: Job reached COMPLETED or FAILED (or vanished server-side)
    CANCELLED: Superseded, deselected, deleted or disposed
    TIMED_OUT: Safety timeout elapsed without a terminal state
    ERRORED: A callback raised and the loop died
    """

    TERMINAL = "terminal"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"


@dataclass(eq=False)
class _Poll:
    """One polling loop; results are applied only while active is True."""

    job_id: str
    on_update: UpdateCallback
    on_terminal: TerminalCallback
    on_timeout: TimeoutCallback | None = None
    active: bool = True
    ticks: int = 0
    task: asyncio.Task | None = None
    timeout_handle: asyncio.TimerHandle | None = None


class PollingController:
    """
    Polls job status until a terminal state, cancellation or timeout.

    At most one loop is active per job: starting a poll for a job that is
    already polled cancels the older loop first. Cancellation is
    synchronous; a response that arrives for a cancelled loop is dropped.
    """

    def __init__(
        self,
        client: JobStatusClient,
        interval_seconds: float = 3.0,
        timeout_seconds: float = 300.0,
    ) -> None:
        """
        Initialize polling controller.

        Args:
            client: Backend client used for status checks
            interval_seconds: Delay between two ticks of one job
            timeout_seconds: Safety timeout per polling loop
        """
        self._client = client
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self._polls: dict[str, _Poll] = {}
        self._stopped: dict[str, StopReason] = {}
        self._tasks: set[asyncio.Task] = set()

    def start(
        self,
        job_id: str,
        on_update: UpdateCallback,
        on_terminal: TerminalCallback,
        on_timeout: TimeoutCallback | None = None,
    ) -> None:
        """
        Begin polling a job, superseding any loop already running for it.

        Must be called from a running event loop.

        Args:
            job_id: Job to poll
            on_update: Called with each non-terminal snapshot
            on_terminal: Called once with the terminal snapshot
            on_timeout: Called once if the safety timeout elapses
        """
        self.cancel(job_id)

        loop = asyncio.get_running_loop()
        poll = _Poll(
            job_id=job_id,
            on_update=on_update,
            on_terminal=on_terminal,
            on_timeout=on_timeout,
        )
        self._polls[job_id] = poll
        self._stopped.pop(job_id, None)

        poll.timeout_handle = loop.call_later(self.timeout_seconds, self._expire, poll)
        poll.task = loop.create_task(self._run(poll), name=f"audio-poll-{job_id}")
        self._tasks.add(poll.task)
        poll.task.add_done_callback(functools.partial(self._on_task_done, poll))

        log_with_context(
            logger,
            logging.DEBUG,
            "Started polling audio job",
            job_id=job_id,
            interval_seconds=self.interval_seconds,
        )

    def cancel(self, job_id: str) -> bool:
        """
        Stop polling a job immediately.

        Safe on stopped or unknown jobs.

        Args:
            job_id: Job to stop polling

        Returns:
            bool: True if an active loop was cancelled
        """
        poll = self._polls.get(job_id)
        if poll is None:
            return False
        self._stop(poll, StopReason.CANCELLED)
        return True

    def cancel_all(self) -> int:
        """
        Cancel every active loop.

        Returns:
            int: Number of loops cancelled
        """
        polls = list(self._polls.values())
        for poll in polls:
            self._stop(poll, StopReason.CANCELLED)
        return len(polls)

    async def aclose(self) -> None:
        """Cancel every loop and wait until all poll tasks have unwound."""
        self.cancel_all()
        current = asyncio.current_task()
        pending = [task for task in self._tasks if task is not current]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def is_polling(self, job_id: str) -> bool:
        return job_id in self._polls

    @property
    def active_jobs(self) -> list[str]:
        return list(self._polls)

    def state(self, job_id: str) -> PollState:
        if job_id in self._polls:
            return PollState.POLLING
        if job_id in self._stopped:
            return PollState.STOPPED
        return PollState.IDLE

    def stop_reason(self, job_id: str) -> StopReason | None:
        return self._stopped.get(job_id)

    def forget(self, job_id: str) -> None:
        """Cancel and drop all bookkeeping for a job (e.g. after deletion)."""
        self.cancel(job_id)
        self._stopped.pop(job_id, None)

    def _stop(self, poll: _Poll, reason: StopReason) -> None:
        # Clear the flag first so an in-flight tick of this loop is dropped
        poll.active = False
        if self._polls.get(poll.job_id) is poll:
            del self._polls[poll.job_id]
            self._stopped[poll.job_id] = reason
        if poll.timeout_handle is not None:
            poll.timeout_handle.cancel()
        task = poll.task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _expire(self, poll: _Poll) -> None:
        if not poll.active:
            return
        self._stop(poll, StopReason.TIMED_OUT)
        error = PollingTimeoutError(poll.job_id, self.timeout_seconds)
        log_with_context(
            logger,
            logging.WARNING,
            "Audio job polling timed out",
            job_id=poll.job_id,
            ticks=poll.ticks,
            timeout_seconds=self.timeout_seconds,
        )
        if poll.on_timeout is not None:
            poll.on_timeout(poll.job_id, error)

    async def _run(self, poll: _Poll) -> None:
        while poll.active:
            await asyncio.sleep(self.interval_seconds)
            if not poll.active:
                return

            try:
                snapshot = await self._client.get_status(poll.job_id)
            except JobNotFoundError:
                if not poll.active:
                    return
                self._stop(poll, StopReason.TERMINAL)
                logger.info("Audio job %s disappeared while polling", poll.job_id)
                poll.on_terminal(
                    poll.job_id,
                    StatusSnapshot(status=JobStatus.FAILED, error_message=JOB_GONE_MESSAGE),
                )
                return
            except TransportError as exc:
                # Transient: generation keeps running server-side, try next tick
                logger.debug("Status check for audio job %s failed: %s", poll.job_id, exc)
                continue
            except AudioTrackerException as exc:
                log_exception_with_context(
                    logger,
                    "Unexpected status check error, retrying",
                    exc,
                    level=logging.WARNING,
                    job_id=poll.job_id,
                )
                continue

            if not poll.active:
                return
            poll.ticks += 1

            if snapshot.status.is_terminal:
                self._stop(poll, StopReason.TERMINAL)
                log_with_context(
                    logger,
                    logging.INFO,
                    "Audio job reached terminal state",
                    job_id=poll.job_id,
                    snapshot=snapshot,
                    ticks=poll.ticks,
                )
                poll.on_terminal(poll.job_id, snapshot)
                return

            poll.on_update(poll.job_id, snapshot)

    def _on_task_done(self, poll: _Poll, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        if poll.active:
            self._stop(poll, StopReason.ERRORED)
        log_exception_with_context(
            logger,
            "Polling loop for audio job crashed",
            exc,
            job_id=poll.job_id,
        )
