"""
HTTP client for the editorial audio API.

Implements JobStatusClient over the backend REST surface: submission,
status checks, audio streaming and download, listing and deletion.
Unwraps the {status, code, message, data} response envelope and maps
HTTP failures onto the tracker exception hierarchy.

Dependencies: httpx, pydantic, audiotracker.configs, audiotracker.core.exceptions
System role: REST adapter behind the tracker core
"""

import logging
from collections.abc import Iterable
from typing import Any

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

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
from audiotracker.models import (
    AudioContent,
    AudioJob,
    GenerationOptions,
    StatusSnapshot,
    SubmittedJob,
)
from audiotracker.observability import log_with_context

logger = logging.getLogger(__name__)

ARTICLE_AUDIO_PATH = "/articles/{article_id}/audio"
AUDIO_STATUS_PATH = "/audio/{job_id}/status"
AUDIO_STREAM_PATH = "/audio/{job_id}/stream"
AUDIO_DOWNLOAD_PATH = "/audio/{job_id}/download"
AUDIO_PATH = "/audio/{job_id}"

_NOT_READY_STATUSES = frozenset({400, 409, 425})


class HttpJobStatusClient:
    """
    httpx-based JobStatusClient.

    Owns its AsyncClient unless one is injected; use ``async with`` or
    call aclose() when done.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        timeout_seconds: float = 30.0,
        missing_config_codes: Iterable[int] = (4004,),
        default_media_type: str = "audio/wav",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize HTTP client.

        Args:
            base_url: API base URL, e.g. http://localhost:8080/api/v1
            access_token: Optional bearer token
            timeout_seconds: Per-request timeout
            missing_config_codes: Envelope codes meaning no default TTS config
            default_media_type: Media type when a stream response has none
            http_client: Optional preconfigured AsyncClient (not closed by us)
        """
        self._base_url = base_url.rstrip("/")
        self._headers = {"Accept": "application/json"}
        if access_token:
            self._headers["Authorization"] = f"Bearer {access_token}"
        self._missing_config_codes = frozenset(missing_config_codes)
        self._default_media_type = default_media_type
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))

    @classmethod
    def from_settings(
        cls,
        settings: ApiClientSettings,
        default_media_type: str = "audio/wav",
        http_client: httpx.AsyncClient | None = None,
    ) -> "HttpJobStatusClient":
        return cls(
            base_url=settings.base_url,
            access_token=settings.access_token,
            timeout_seconds=settings.timeout_seconds,
            missing_config_codes=settings.missing_config_codes,
            default_media_type=default_media_type,
            http_client=http_client,
        )

    async def __aenter__(self) -> "HttpJobStatusClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def submit(
        self,
        article_id: str,
        options: GenerationOptions | dict[str, Any] | None = None,
    ) -> SubmittedJob:
        """
        Request audio generation for an article.

        Options are validated locally first; nothing is sent when they are
        malformed.

        Args:
            article_id: Article to voice
            options: Generation options or their camelCase/snake_case dict

        Returns:
            SubmittedJob: Reference with the new job id

        Raises:
            ValidationError: Malformed options or rejected request
            PermissionDeniedError: Caller lacks rights on the article
            ConfigError: No default TTS configuration and none supplied
            TransportError: Backend unreachable or failing
        """
        parsed = _parse_options(options)
        path = ARTICLE_AUDIO_PATH.format(article_id=article_id)
        response = await self._request("POST", path, json=parsed.to_payload())

        if response.status_code in (400, 404, 422):
            code, message, _ = _envelope(response)
            if code in self._missing_config_codes and parsed.custom_voice_settings is None:
                raise ConfigError(
                    message or "No default TTS configuration found",
                    details={"article_id": article_id, "code": code},
                )
            if response.status_code != 404:
                raise ValidationError(
                    message or "Audio generation request was rejected",
                    details={"article_id": article_id, "code": code},
                )
        self._raise_for_status(response, path)

        submitted = _validate(SubmittedJob, self._data(response))
        log_with_context(
            logger,
            logging.DEBUG,
            "Audio generation accepted",
            article_id=article_id,
            job_id=submitted.id,
        )
        return submitted

    async def get_status(self, job_id: str) -> StatusSnapshot:
        """
        Fetch the current status of a job.

        Raises:
            JobNotFoundError: Job no longer exists
            TransportError: Backend unreachable or failing
        """
        path = AUDIO_STATUS_PATH.format(job_id=job_id)
        response = await self._request("GET", path)
        self._raise_for_status(response, path, job_id=job_id)
        return _validate(StatusSnapshot, self._data(response))

    async def get_stream_handle(self, job_id: str) -> AudioContent:
        """
        Fetch streamable audio of a completed job.

        Raises:
            NotReadyError: Job is not completed
            JobNotFoundError: Job no longer exists
        """
        return await self._fetch_audio(AUDIO_STREAM_PATH.format(job_id=job_id), job_id)

    async def download(self, job_id: str) -> AudioContent:
        """Fetch the complete audio file of a completed job."""
        return await self._fetch_audio(AUDIO_DOWNLOAD_PATH.format(job_id=job_id), job_id)

    async def list_jobs(self, article_id: str) -> list[AudioJob]:
        """
        List all audio jobs of an article.

        Accepts a bare list or a page object with a ``content`` list.
        """
        path = ARTICLE_AUDIO_PATH.format(article_id=article_id)
        response = await self._request("GET", path)
        self._raise_for_status(response, path)

        data = self._data(response)
        if isinstance(data, dict):
            data = data.get("content", [])
        if not isinstance(data, list):
            raise ValidationError("Unexpected audio job list payload", field="data")

        jobs = []
        for item in data:
            if isinstance(item, dict):
                item = {"articleId": article_id, **item}
            jobs.append(_validate(AudioJob, item))
        return jobs

    async def delete(self, job_id: str) -> None:
        """
        Delete a job and its audio.

        Raises:
            JobNotFoundError: Job does not exist
        """
        path = AUDIO_PATH.format(job_id=job_id)
        response = await self._request("DELETE", path)
        self._raise_for_status(response, path, job_id=job_id)

    async def _fetch_audio(self, path: str, job_id: str) -> AudioContent:
        response = await self._request("GET", path, accept="audio/*")
        if response.status_code in _NOT_READY_STATUSES:
            raise NotReadyError(job_id, details={"status_code": response.status_code})
        self._raise_for_status(response, path, job_id=job_id)

        media_type = response.headers.get("content-type") or self._default_media_type
        if media_type.startswith("application/octet-stream"):
            media_type = self._default_media_type
        return AudioContent(data=response.content, media_type=media_type)

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        accept: str | None = None,
    ) -> httpx.Response:
        headers = dict(self._headers)
        if accept:
            headers["Accept"] = accept
        try:
            response = await self._http.request(
                method,
                f"{self._base_url}{path}",
                json=json,
                headers=headers,
            )
        except httpx.TransportError as exc:
            raise TransportError(
                f"{method} {path} failed: {exc}",
                details={"error_type": type(exc).__name__},
            ) from exc

        if response.status_code >= 500:
            _, message, _ = _envelope(response)
            raise TransportError(
                message or f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        return response

    def _raise_for_status(
        self,
        response: httpx.Response,
        path: str,
        job_id: str | None = None,
    ) -> None:
        status = response.status_code
        if status < 400:
            return
        code, message, _ = _envelope(response)
        details = {"path": path, "status_code": status, "code": code}
        if status in (401, 403):
            raise PermissionDeniedError(message or "Permission denied", details=details)
        if status == 404 and job_id is not None:
            raise JobNotFoundError(job_id, details=details)
        if status in (400, 422):
            raise ValidationError(message or "Request was rejected", details=details)
        raise AudioTrackerException(message or f"Unexpected response {status}", details=details)

    @staticmethod
    def _data(response: httpx.Response) -> Any:
        _, _, data = _envelope(response)
        return data


def _envelope(response: httpx.Response) -> tuple[int | None, str | None, Any]:
    """Split an API response into (code, message, data)."""
    try:
        body = response.json()
    except ValueError:
        return None, response.text or None, None
    if isinstance(body, dict) and ("data" in body or "code" in body):
        return body.get("code"), body.get("message"), body.get("data")
    return None, None, body


def _parse_options(options: GenerationOptions | dict[str, Any] | None) -> GenerationOptions:
    if options is None:
        return GenerationOptions()
    if isinstance(options, GenerationOptions):
        return options
    return _validate(GenerationOptions, options)


def _validate(model: type[BaseModel], payload: Any):
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(
            first.get("msg", f"Invalid {model.__name__}"),
            field=field,
            details={"model": model.__name__, "error_count": exc.error_count()},
        ) from exc
