"""
Test suite for logging helpers.

System role: Verification of structured logging utilities
"""

import logging
from pathlib import Path

import pytest

from audiotracker.core.exceptions import JobNotFoundError
from audiotracker.models import AudioContent, AudioJob, JobStatus, StatusSnapshot
from audiotracker.observability import (
    configure_logging,
    get_logger,
    log_exception_with_context,
    log_with_context,
    safe_log_value,
    set_package_level,
)


class TestSafeLogValue:
    """Test suite for safe_log_value."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "None"),
            ("job-1", "job-1"),
            (b"\x00" * 2048, "bytes(2048 bytes)"),
            (["job-1", "job-2"], "job-1,job-2"),
            ([1, 2], "list(2 items)"),
            ({"k": 1}, "dict(1 keys)"),
            (3.5, "3.5"),
            (JobStatus.GENERATING, "GENERATING"),
            (Path("/tmp/audio-1.wav"), "/tmp/audio-1.wav"),
        ],
    )
    def test_values_should_be_summarized(self, value, expected: str) -> None:
        """Test payloads are summarized instead of dumped."""
        assert safe_log_value(value) == expected

    def test_audio_content_should_log_size_not_bytes(self) -> None:
        """Test audio payloads never reach the log verbatim."""
        content = AudioContent(data=b"RIFF" * 1000, media_type="audio/wav")

        assert safe_log_value(content) == "audio/wav (4000 bytes)"

    def test_job_and_snapshot_should_log_status_and_progress(self) -> None:
        """Test jobs read as id plus status line."""
        job = AudioJob(id="job-1", article_id="a", status="GENERATING", progress=42.5)

        assert safe_log_value(job) == "job-1 (GENERATING 42.5%)"
        assert safe_log_value(StatusSnapshot(status="COMPLETED")) == "COMPLETED"

    def test_long_strings_should_be_truncated(self) -> None:
        """Test oversized values are cut with a marker."""
        result = safe_log_value("x" * 20, max_length=5)

        assert result.startswith("xxxxx... (truncated")


class TestLogWithContext:
    """Test suite for context logging helpers."""

    def test_context_should_be_attached_to_record(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test context keys land on the log record as strings."""
        logger = get_logger("audiotracker.test")

        with caplog.at_level(logging.INFO, logger="audiotracker.test"):
            log_with_context(logger, logging.INFO, "Polling", job_id="job-1", ticks=3)

        record = caplog.records[0]
        assert record.getMessage() == "Polling"
        assert record.job_id == "job-1"
        assert record.ticks == "3"

    def test_disabled_level_should_emit_nothing(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test records below the logger level are skipped."""
        logger = get_logger("audiotracker.test")

        with caplog.at_level(logging.WARNING, logger="audiotracker.test"):
            log_with_context(logger, logging.DEBUG, "Tick", job_id="job-1")

        assert caplog.records == []

    def test_exception_context_should_include_error_type(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test exception helper records type, message and traceback."""
        logger = get_logger("audiotracker.test")

        with caplog.at_level(logging.WARNING, logger="audiotracker.test"):
            log_exception_with_context(
                logger,
                "Release failed",
                OSError("busy"),
                level=logging.WARNING,
                job_id="job-1",
            )

        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert record.error_type == "OSError"
        assert record.error_msg == "busy"
        assert record.exc_info is not None

    def test_domain_error_details_should_become_attributes(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test AudioTrackerException details are attached with an error_ prefix."""
        logger = get_logger("audiotracker.test")
        error = JobNotFoundError("job-9", details={"article_id": "a-1"})

        with caplog.at_level(logging.ERROR, logger="audiotracker.test"):
            log_exception_with_context(logger, "Lookup failed", error, job_id="job-9")

        record = caplog.records[0]
        assert record.error_type == "JobNotFoundError"
        assert record.error_article_id == "a-1"
        assert record.error_msg == error.message
        assert record.job_id == "job-9"


@pytest.fixture
def restore_logging():
    """Restore root and package logger state."""
    root = logging.getLogger()
    package = logging.getLogger("audiotracker")
    handlers, root_level, package_level = root.handlers[:], root.level, package.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(root_level)
    package.setLevel(package_level)


class TestConfigureLogging:
    """Test suite for configure_logging and set_package_level."""

    def test_configure_should_set_root_level_and_quiet_httpx(self, restore_logging) -> None:
        """Test root level and transport logger levels."""
        configure_logging("debug")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_package_level_should_leave_root_alone(self, restore_logging) -> None:
        """Test only the audiotracker logger tree changes level."""
        root_level = logging.getLogger().level

        set_package_level("error")

        assert logging.getLogger("audiotracker").level == logging.ERROR
        assert logging.getLogger().level == root_level
