"""
Local audio handle ownership.

Materializes streamed audio of completed jobs into local files and
guarantees each file is released exactly once.

Dependencies: audiotracker.models, audiotracker.observability
System role: Sole owner of locally created playable resources
"""

import logging
import mimetypes
import os
import re
import tempfile
from pathlib import Path

from audiotracker.models import AudioContent, AudioEncoding
from audiotracker.observability import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

_SUFFIX_BY_MEDIA_TYPE: dict[str, str] = {}
for _encoding in AudioEncoding:
    _SUFFIX_BY_MEDIA_TYPE.setdefault(_encoding.mime_type, f".{_encoding.file_extension}")

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def suffix_for_media_type(media_type: str) -> str:
    """
    Pick a file suffix for an audio media type.

    Args:
        media_type: MIME type, parameters allowed (audio/wav; codec=...)

    Returns:
        str: Suffix including the dot, ".bin" when unknown
    """
    base_type = media_type.split(";", 1)[0].strip().lower()
    if base_type in _SUFFIX_BY_MEDIA_TYPE:
        return _SUFFIX_BY_MEDIA_TYPE[base_type]
    return mimetypes.guess_extension(base_type) or ".bin"


class AudioHandle:
    """
    Revocable local reference to playable audio.

    Wraps a file on disk; releasing deletes the file. The released flag is
    set before deletion so a failing delete is never retried.
    """

    def __init__(self, job_id: str, path: Path, media_type: str) -> None:
        self.job_id = job_id
        self.path = path
        self.media_type = media_type
        self._released = False

    @property
    def uri(self) -> str:
        """file:// URI usable as a player source."""
        return self.path.resolve().as_uri()

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> bool:
        """
        Delete the backing file.

        Returns:
            bool: True on the first call, False if already released

        Raises:
            OSError: If the file exists but cannot be deleted
        """
        if self._released:
            return False
        self._released = True
        self.path.unlink(missing_ok=True)
        return True

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"AudioHandle(job_id={self.job_id!r}, path={str(self.path)!r}, {state})"


class ResourceHandleCache:
    """
    Maps job id to its local AudioHandle with single-release semantics.

    Replacing the handle of a job releases the old one; handles of other
    jobs are never released implicitly.
    """

    def __init__(
        self,
        directory: Path | None = None,
        file_prefix: str = "audio-",
        default_media_type: str = "audio/wav",
    ) -> None:
        """
        Initialize handle cache.

        Args:
            directory: Where audio files are written (system temp dir if None)
            file_prefix: Filename prefix for materialized audio
            default_media_type: Media type used when content has none
        """
        self._directory = directory
        self._file_prefix = file_prefix
        self._default_media_type = default_media_type
        self._handles: dict[str, AudioHandle] = {}

    def materialize(self, job_id: str, content: AudioContent) -> AudioHandle:
        """
        Write audio content to a local file and cache its handle.

        Args:
            job_id: Owning job
            content: Audio payload from the stream endpoint

        Returns:
            AudioHandle: Live handle, now owned by this cache

        Raises:
            OSError: If the file cannot be written
        """
        handle = self.write(job_id, content)
        self.set(job_id, handle)
        return handle

    def write(self, job_id: str, content: AudioContent) -> AudioHandle:
        """
        Write audio content to a local file without caching it.

        Touches only the filesystem, so it may run in a worker thread.
        The caller owns the returned handle until it is passed to set().

        Raises:
            OSError: If the file cannot be written
        """
        media_type = content.media_type or self._default_media_type
        if self._directory is not None:
            self._directory.mkdir(parents=True, exist_ok=True)

        safe_id = _UNSAFE_NAME_CHARS.sub("_", job_id)
        fd, name = tempfile.mkstemp(
            prefix=f"{self._file_prefix}{safe_id}-",
            suffix=suffix_for_media_type(media_type),
            dir=self._directory,
        )
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(content.data)
        except OSError:
            path.unlink(missing_ok=True)
            raise

        handle = AudioHandle(job_id, path, media_type)
        log_with_context(
            logger,
            logging.DEBUG,
            "Materialized audio handle",
            job_id=job_id,
            path=path,
            size=len(content.data),
        )
        return handle

    def set(self, job_id: str, handle: AudioHandle) -> None:
        """
        Store a handle for a job.

        Args:
            job_id: Owning job
            handle: Handle to store; a different handle already cached
                for the same job is released
        """
        previous = self._handles.get(job_id)
        self._handles[job_id] = handle
        if previous is not None and previous is not handle:
            previous.release()

    def get(self, job_id: str) -> AudioHandle | None:
        return self._handles.get(job_id)

    def release(self, job_id: str) -> bool:
        """
        Release the handle of a job.

        Unknown or already released ids are a no-op.

        Args:
            job_id: Owning job

        Returns:
            bool: True if a live handle was released

        Raises:
            OSError: If the backing file cannot be deleted (the handle is
                still dropped from the cache)
        """
        handle = self._handles.pop(job_id, None)
        if handle is None:
            return False
        return handle.release()

    def release_all(self) -> list[str]:
        """
        Release every outstanding handle, tolerating individual failures.

        Returns:
            list[str]: Job ids whose release raised
        """
        failed: list[str] = []
        while self._handles:
            job_id, handle = self._handles.popitem()
            try:
                handle.release()
            except Exception as exc:
                failed.append(job_id)
                log_exception_with_context(
                    logger,
                    "Failed to release audio handle",
                    exc,
                    level=logging.WARNING,
                    job_id=job_id,
                )
        return failed

    @property
    def job_ids(self) -> list[str]:
        return list(self._handles)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)
