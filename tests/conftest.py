"""
Shared test fixtures and configuration for entire test suite.

Provides: scripted fake JobStatusClient, fast polling controller, handle
cache in a temp directory, async wait helper
Dependencies: pytest, pytest-asyncio
System role: Test infrastructure and fixture management
"""

import asyncio
from collections import deque
from pathlib import Path

import pytest
import pytest_asyncio

from audiotracker.core.exceptions import JobNotFoundError
from audiotracker.core.polling_controller import PollingController
from audiotracker.core.resource_cache import ResourceHandleCache
from audiotracker.models import AudioContent, AudioJob, JobStatus, StatusSnapshot, SubmittedJob

FAST_INTERVAL = 0.01
FAST_TIMEOUT = 2.0


class FakeJobStatusClient:
    """
    In-memory JobStatusClient with scripted status responses.

    Each job's script is consumed one item per status call; the last item
    repeats. Items are StatusSnapshot instances or exceptions to raise.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.scripts: dict[str, deque] = {}
        self.streams: dict[str, AudioContent | Exception] = {}
        self.listed: list[AudioJob] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.list_gate: asyncio.Event | None = None
        self.deleted: set[str] = set()
        self.submit_error: Exception | None = None
        self._next_id = 1

    def script(self, job_id: str, *responses) -> None:
        self.scripts[job_id] = deque(responses)

    def status_calls(self, job_id: str) -> int:
        return sum(1 for name, arg in self.calls if name == "get_status" and arg == job_id)

    def count(self, name: str) -> int:
        return sum(1 for call_name, _ in self.calls if call_name == name)

    async def submit(self, article_id, options=None) -> SubmittedJob:
        self.calls.append(("submit", article_id))
        if self.submit_error is not None:
            raise self.submit_error
        job_id = f"job-{self._next_id}"
        self._next_id += 1
        return SubmittedJob(id=job_id, file_name=f"{job_id}.wav")

    async def get_status(self, job_id) -> StatusSnapshot:
        self.calls.append(("get_status", job_id))
        gate = self.gates.get(job_id)
        if gate is not None:
            await gate.wait()
        if job_id in self.deleted:
            raise JobNotFoundError(job_id)
        script = self.scripts.get(job_id)
        if not script:
            return StatusSnapshot(status=JobStatus.GENERATING)
        item = script[0] if len(script) == 1 else script.popleft()
        if isinstance(item, Exception):
            raise item
        return item

    async def get_stream_handle(self, job_id) -> AudioContent:
        self.calls.append(("get_stream_handle", job_id))
        item = self.streams.get(job_id, AudioContent(data=b"RIFF-audio", media_type="audio/wav"))
        if isinstance(item, Exception):
            raise item
        return item

    async def download(self, job_id) -> AudioContent:
        self.calls.append(("download", job_id))
        return AudioContent(data=b"ID3-full-audio", media_type="audio/mpeg")

    async def list_jobs(self, article_id) -> list[AudioJob]:
        self.calls.append(("list_jobs", article_id))
        if self.list_gate is not None:
            await self.list_gate.wait()
        return [job.model_copy() for job in self.listed]

    async def delete(self, job_id) -> None:
        self.calls.append(("delete", job_id))
        self.deleted.add(job_id)


async def _wait_until(predicate, timeout: float = 2.0, step: float = 0.005) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(step)


@pytest.fixture
def fake_client() -> FakeJobStatusClient:
    """Provide scripted fake backend client."""
    return FakeJobStatusClient()


@pytest_asyncio.fixture
async def controller(fake_client: FakeJobStatusClient):
    """Provide PollingController ticking every 10 ms, closed after the test."""
    controller = PollingController(
        fake_client,
        interval_seconds=FAST_INTERVAL,
        timeout_seconds=FAST_TIMEOUT,
    )
    yield controller
    await controller.aclose()


@pytest.fixture
def handle_dir(tmp_path: Path) -> Path:
    """Provide directory for materialized audio handles."""
    return tmp_path / "handles"


@pytest.fixture
def cache(handle_dir: Path) -> ResourceHandleCache:
    """Provide ResourceHandleCache writing into a temp directory."""
    return ResourceHandleCache(directory=handle_dir)


@pytest.fixture
def wait_until():
    """Provide async helper polling a predicate until true or timeout."""
    return _wait_until


@pytest.fixture
def article_id() -> str:
    """Provide a test article ID."""
    return "article-42"
