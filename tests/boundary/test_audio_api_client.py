"""
Test suite for HttpJobStatusClient.

Runs the client against an in-process FastAPI stand-in of the audio API
(via httpx.ASGITransport) to verify routes, envelope unwrapping and the
mapping of HTTP failures onto tracker exceptions.

System role: Verification of the REST adapter
"""

from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from audiotracker.boundary.http import HttpJobStatusClient
from audiotracker.configs import ApiClientSettings
from audiotracker.core.exceptions import (
    AudioTrackerException,
    ConfigError,
    JobNotFoundError,
    NotReadyError,
    PermissionDeniedError,
    TransportError,
    ValidationError,
)
from audiotracker.models import GenerationOptions, JobStatus

BASE_URL = "http://audio.test/api/v1"


def _ok(data: Any) -> JSONResponse:
    return JSONResponse({"status": "success", "code": 200, "message": "OK", "data": data})


def _error(status_code: int, code: int, message: str) -> JSONResponse:
    return JSONResponse(
        {"status": "error", "code": code, "message": message, "data": None},
        status_code=status_code,
    )


def build_fake_audio_api(received: list[dict]) -> FastAPI:
    """Build FastAPI app mimicking the editorial audio endpoints."""
    app = FastAPI()

    @app.post("/api/v1/articles/{article_id}/audio")
    async def generate(article_id: str, request: Request):
        body = await request.json()
        received.append(
            {
                "path": request.url.path,
                "body": body,
                "authorization": request.headers.get("authorization"),
            }
        )
        if article_id == "locked":
            return _error(403, 403, "You do not have access to this article")
        if article_id == "no-config":
            return _error(404, 4004, "No default TTS configuration found")
        if article_id == "bad-voice":
            return _error(400, 4004, "Voice not supported")
        return _ok({"id": 11, "fileName": f"article-{article_id}.wav", "status": "PENDING"})

    @app.get("/api/v1/articles/{article_id}/audio")
    async def list_jobs(article_id: str):
        jobs = [
            {"id": 11, "status": "COMPLETED", "progressPercentage": 100, "fileName": "a.wav"},
            {"id": 12, "status": "FETCHING_NEWS"},
        ]
        if article_id == "paged":
            return _ok({"content": jobs, "totalElements": 2})
        return _ok(jobs)

    @app.get("/api/v1/audio/{job_id}/status")
    async def status(job_id: str):
        if job_id == "missing":
            return _error(404, 404, "Audio generation job not found")
        if job_id == "crash":
            return _error(500, 500, "Internal error")
        return _ok({"jobId": job_id, "status": "GENERATING_AUDIO", "progressPercentage": 50.0})

    @app.get("/api/v1/audio/{job_id}/stream")
    async def stream(job_id: str):
        if job_id == "running":
            return _error(409, 409, "Audio not ready")
        if job_id == "raw":
            return Response(content=b"\x00\x01", media_type="application/octet-stream")
        return Response(content=b"RIFFWAVE", media_type="audio/wav")

    @app.get("/api/v1/audio/{job_id}/download")
    async def download(job_id: str):
        return Response(content=b"ID3full", media_type="audio/mpeg")

    @app.delete("/api/v1/audio/{job_id}")
    async def delete(job_id: str):
        if job_id == "missing":
            return _error(404, 404, "Audio generation job not found")
        return _ok(None)

    return app


@pytest.fixture
def received() -> list[dict]:
    """Provide list recording generation requests seen by the fake API."""
    return []


@pytest_asyncio.fixture
async def api_client(received: list[dict]):
    """Provide HttpJobStatusClient bound to the fake API."""
    transport = httpx.ASGITransport(app=build_fake_audio_api(received))
    async with httpx.AsyncClient(transport=transport) as http_client:
        yield HttpJobStatusClient(BASE_URL, access_token="token-123", http_client=http_client)


@pytest.fixture
def voice_settings() -> dict:
    """Provide valid custom voice settings."""
    return {
        "languageCode": "de-DE",
        "voiceName": "de-DE-Wavenet-B",
        "speakingRate": 1.0,
        "pitch": 0.0,
        "volumeGain": 0.0,
    }


class TestSubmit:
    """Test suite for audio generation submission."""

    @pytest.mark.asyncio
    async def test_submit_should_return_job_reference(
        self, api_client: HttpJobStatusClient, received: list[dict]
    ) -> None:
        """Test a successful submission returns the new job id as string."""
        # Act
        submitted = await api_client.submit("article-1")

        # Assert
        assert submitted.id == "11"
        assert submitted.file_name == "article-article-1.wav"
        assert received[0]["path"] == "/api/v1/articles/article-1/audio"
        assert received[0]["body"] == {"enableSummarization": True, "enableTranslation": False}
        assert received[0]["authorization"] == "Bearer token-123"

    @pytest.mark.asyncio
    async def test_submit_should_send_custom_voice_settings(
        self, api_client: HttpJobStatusClient, received: list[dict], voice_settings: dict
    ) -> None:
        """Test voice overrides are sent in camelCase with defaults applied."""
        # Act
        await api_client.submit(
            "article-1",
            GenerationOptions.model_validate({"customVoiceSettings": voice_settings}),
        )

        # Assert
        sent = received[0]["body"]["customVoiceSettings"]
        assert sent["voiceName"] == "de-DE-Wavenet-B"
        assert sent["audioEncoding"] == "MP3"
        assert sent["sampleRateHertz"] == 24000

    @pytest.mark.asyncio
    async def test_invalid_options_should_fail_before_sending(
        self, api_client: HttpJobStatusClient, received: list[dict], voice_settings: dict
    ) -> None:
        """Test malformed voice parameters never reach the backend."""
        # Arrange
        voice_settings["speakingRate"] = 9.0

        # Act
        with pytest.raises(ValidationError) as exc_info:
            await api_client.submit("article-1", {"customVoiceSettings": voice_settings})

        # Assert
        assert received == []
        assert "speakingRate" in exc_info.value.details["field"]

    @pytest.mark.asyncio
    async def test_missing_default_config_should_raise_config_error(
        self, api_client: HttpJobStatusClient
    ) -> None:
        """Test the no-default-config code maps to ConfigError."""
        with pytest.raises(ConfigError) as exc_info:
            await api_client.submit("no-config")

        assert exc_info.value.details["code"] == 4004

    @pytest.mark.asyncio
    async def test_config_code_with_custom_voice_should_raise_validation_error(
        self, api_client: HttpJobStatusClient, voice_settings: dict
    ) -> None:
        """Test a rejection is not a config problem when a voice was supplied."""
        with pytest.raises(ValidationError):
            await api_client.submit("bad-voice", {"customVoiceSettings": voice_settings})

    @pytest.mark.asyncio
    async def test_forbidden_article_should_raise_permission_denied(
        self, api_client: HttpJobStatusClient
    ) -> None:
        """Test 403 maps to PermissionDeniedError with the backend message."""
        with pytest.raises(PermissionDeniedError) as exc_info:
            await api_client.submit("locked")

        assert exc_info.value.message == "You do not have access to this article"


class TestStatus:
    """Test suite for status checks."""

    @pytest.mark.asyncio
    async def test_get_status_should_unwrap_envelope(
        self, api_client: HttpJobStatusClient
    ) -> None:
        """Test backend DTO becomes a StatusSnapshot."""
        snapshot = await api_client.get_status("11")

        assert snapshot.status is JobStatus.GENERATING
        assert snapshot.progress == 50.0

    @pytest.mark.asyncio
    async def test_missing_job_should_raise_not_found(
        self, api_client: HttpJobStatusClient
    ) -> None:
        """Test 404 on a job route maps to JobNotFoundError."""
        with pytest.raises(JobNotFoundError) as exc_info:
            await api_client.get_status("missing")

        assert exc_info.value.job_id == "missing"

    @pytest.mark.asyncio
    async def test_server_error_should_raise_transport_error(
        self, api_client: HttpJobStatusClient
    ) -> None:
        """Test 5xx responses are treated as transient."""
        with pytest.raises(TransportError) as exc_info:
            await api_client.get_status("crash")

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_connection_failure_should_raise_transport_error(self) -> None:
        """Test network errors are wrapped in TransportError."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        # Arrange
        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http_client:
            client = HttpJobStatusClient(BASE_URL, http_client=http_client)

            # Act / Assert
            with pytest.raises(TransportError) as exc_info:
                await client.get_status("11")

        assert exc_info.value.details["error_type"] == "ConnectError"


class TestAudioContent:
    """Test suite for stream and download."""

    @pytest.mark.asyncio
    async def test_stream_should_return_bytes_and_media_type(
        self, api_client: HttpJobStatusClient
    ) -> None:
        """Test stream endpoint payload is returned verbatim."""
        content = await api_client.get_stream_handle("11")

        assert content.data == b"RIFFWAVE"
        assert content.media_type == "audio/wav"

    @pytest.mark.asyncio
    async def test_octet_stream_should_fall_back_to_default_media_type(
        self, received: list[dict]
    ) -> None:
        """Test untyped audio gets the configured default media type."""
        transport = httpx.ASGITransport(app=build_fake_audio_api(received))
        async with httpx.AsyncClient(transport=transport) as http_client:
            client = HttpJobStatusClient(
                BASE_URL,
                default_media_type="audio/mpeg",
                http_client=http_client,
            )

            content = await client.get_stream_handle("raw")

        assert content.media_type == "audio/mpeg"

    @pytest.mark.asyncio
    async def test_stream_of_running_job_should_raise_not_ready(
        self, api_client: HttpJobStatusClient
    ) -> None:
        """Test 409 on the stream route maps to NotReadyError."""
        with pytest.raises(NotReadyError):
            await api_client.get_stream_handle("running")

    @pytest.mark.asyncio
    async def test_download_should_return_full_file(
        self, api_client: HttpJobStatusClient
    ) -> None:
        """Test download endpoint payload."""
        content = await api_client.download("11")

        assert content.data == b"ID3full"
        assert content.media_type == "audio/mpeg"


class TestListAndDelete:
    """Test suite for listing and deleting jobs."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("article_id", ["plain", "paged"])
    async def test_list_jobs_should_accept_list_and_page_payloads(
        self, api_client: HttpJobStatusClient, article_id: str
    ) -> None:
        """Test both payload shapes yield AudioJob models bound to the article."""
        # Act
        jobs = await api_client.list_jobs(article_id)

        # Assert
        assert [job.id for job in jobs] == ["11", "12"]
        assert all(job.article_id == article_id for job in jobs)
        assert jobs[0].status is JobStatus.COMPLETED
        assert jobs[0].file_name == "a.wav"
        assert jobs[1].status is JobStatus.GENERATING

    @pytest.mark.asyncio
    async def test_delete_should_succeed_for_known_job(
        self, api_client: HttpJobStatusClient
    ) -> None:
        """Test deletion of an existing job returns without error."""
        assert await api_client.delete("11") is None

    @pytest.mark.asyncio
    async def test_delete_unknown_job_should_raise_not_found(
        self, api_client: HttpJobStatusClient
    ) -> None:
        """Test deleting a missing job maps to JobNotFoundError."""
        with pytest.raises(JobNotFoundError):
            await api_client.delete("missing")


class TestLifecycle:
    """Test suite for construction and closing."""

    @pytest.mark.asyncio
    async def test_owned_http_client_should_close(self) -> None:
        """Test a client that created its AsyncClient closes it."""
        client = HttpJobStatusClient(BASE_URL)

        async with client:
            pass

        assert client._http.is_closed

    @pytest.mark.asyncio
    async def test_injected_http_client_should_stay_open(self) -> None:
        """Test an injected AsyncClient is left for its owner to close."""
        async with httpx.AsyncClient() as http_client:
            client = HttpJobStatusClient(BASE_URL, http_client=http_client)
            await client.aclose()

            assert not http_client.is_closed

    def test_from_settings_should_apply_api_settings(self) -> None:
        """Test settings populate URL, token and config codes."""
        settings = ApiClientSettings(
            base_url="http://backend:9000/api/v1/",
            access_token="abc",
            missing_config_codes=[4004, 4005],
        )

        client = HttpJobStatusClient.from_settings(settings)

        assert client._base_url == "http://backend:9000/api/v1"
        assert client._headers["Authorization"] == "Bearer abc"
        assert client._missing_config_codes == frozenset({4004, 4005})

    def test_all_client_errors_should_share_base_exception(self) -> None:
        """Test callers can catch every adapter error through one base class."""
        for error_type in (ConfigError, JobNotFoundError, NotReadyError, TransportError):
            assert issubclass(error_type, AudioTrackerException)
