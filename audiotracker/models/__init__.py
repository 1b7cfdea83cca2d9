"""
Domain models.

Pydantic schemas for audio jobs, status snapshots and generation options.
"""

from audiotracker.models.audio_job import (
    AudioContent,
    AudioJob,
    JobStatus,
    StatusSnapshot,
    SubmittedJob,
)
from audiotracker.models.voice_settings import (
    AudioEncoding,
    GenerationOptions,
    SampleRate,
    VoiceSettings,
)

__all__ = [
    "AudioContent",
    "AudioEncoding",
    "AudioJob",
    "GenerationOptions",
    "JobStatus",
    "SampleRate",
    "StatusSnapshot",
    "SubmittedJob",
    "VoiceSettings",
]
