"""
Article audio job tracker.

Client-side lifecycle tracking for text-to-speech generation jobs:
submission, status polling, playable handle resolution and teardown.
"""

from audiotracker.core.job_tracker import JobTracker, TrackerEvent, TrackerEventKind
from audiotracker.core.polling_controller import PollingController, PollState, StopReason
from audiotracker.core.resource_cache import AudioHandle, ResourceHandleCache
from audiotracker.dependencies import article_audio_session, create_job_tracker

__all__ = [
    "AudioHandle",
    "JobTracker",
    "PollState",
    "PollingController",
    "ResourceHandleCache",
    "StopReason",
    "TrackerEvent",
    "TrackerEventKind",
    "article_audio_session",
    "create_job_tracker",
]
