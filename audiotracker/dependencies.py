"""
Dependency wiring.

Factory functions that build tracker components from settings, and the
article-scoped session that guarantees tracker teardown.

Dependencies: audiotracker.configs, audiotracker.core, audiotracker.boundary
System role: Composition root for the article audio view
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from audiotracker.boundary.http import HttpJobStatusClient
from audiotracker.configs import Settings, get_settings
from audiotracker.core.job_status_client import JobStatusClient
from audiotracker.core.job_tracker import JobTracker, TrackerListener
from audiotracker.core.polling_controller import PollingController
from audiotracker.core.resource_cache import ResourceHandleCache
from audiotracker.observability import configure_logging, set_package_level


def setup_logging(settings: Settings | None = None) -> None:
    """
    Apply logging settings.

    The audiotracker loggers always get settings.log_level. The stdout
    root handler is installed only when settings.log_to_stdout is set.
    """
    settings = settings or get_settings()
    if settings.log_to_stdout:
        configure_logging(settings.log_level)
    set_package_level(settings.log_level)


def get_job_status_client(settings: Settings | None = None) -> HttpJobStatusClient:
    """
    Build the HTTP job status client.

    Args:
        settings: Optional settings (cached settings if None)

    Returns:
        HttpJobStatusClient: Client owning its own httpx.AsyncClient
    """
    settings = settings or get_settings()
    return HttpJobStatusClient.from_settings(
        settings.api,
        default_media_type=settings.handles.default_media_type,
    )


def get_polling_controller(
    client: JobStatusClient,
    settings: Settings | None = None,
) -> PollingController:
    settings = settings or get_settings()
    return PollingController(
        client,
        interval_seconds=settings.polling.interval_seconds,
        timeout_seconds=settings.polling.timeout_seconds,
    )


def get_resource_cache(settings: Settings | None = None) -> ResourceHandleCache:
    settings = settings or get_settings()
    return ResourceHandleCache(
        directory=settings.handles.directory,
        file_prefix=settings.handles.file_prefix,
        default_media_type=settings.handles.default_media_type,
    )


def create_job_tracker(
    article_id: str,
    client: JobStatusClient,
    settings: Settings | None = None,
    listener: TrackerListener | None = None,
) -> JobTracker:
    """
    Build a tracker with its own controller and handle cache.

    Args:
        article_id: Article whose jobs are tracked
        client: Backend client (shared across trackers is fine)
        settings: Optional settings (cached settings if None)
        listener: Optional selected-job event callback

    Returns:
        JobTracker: Tracker that must be disposed by the caller
    """
    settings = settings or get_settings()
    return JobTracker(
        client,
        article_id,
        controller=get_polling_controller(client, settings),
        cache=get_resource_cache(settings),
        listener=listener,
    )


@asynccontextmanager
async def article_audio_session(
    article_id: str,
    client: JobStatusClient | None = None,
    settings: Settings | None = None,
    listener: TrackerListener | None = None,
) -> AsyncIterator[JobTracker]:
    """
    Scope a tracker to one article view.

    The tracker is disposed on every exit path. A client created here is
    closed too; an injected client is left open.

    Usage:
        async with article_audio_session("42") as tracker:
            await tracker.refresh_list()
    """
    settings = settings or get_settings()
    setup_logging(settings)
    owned_client = None
    if client is None:
        owned_client = get_job_status_client(settings)
        client = owned_client

    tracker = create_job_tracker(article_id, client, settings=settings, listener=listener)
    try:
        yield tracker
    finally:
        await tracker.dispose()
        if owned_client is not None:
            await owned_client.aclose()
