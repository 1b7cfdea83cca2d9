"""
Structured logging helpers for audio job events.

Log records carry job context as extra attributes. Values are reduced to
short strings first: audio payloads become their size, jobs become their
id and status, and domain errors contribute their details.

Dependencies: logging (stdlib), audiotracker.models, audiotracker.core.exceptions
System role: Logging helper functions
"""

import enum
import logging
import os
from typing import Any

from audiotracker.core.exceptions import AudioTrackerException
from audiotracker.models import AudioContent, AudioJob, StatusSnapshot


def _describe(value: Any) -> str:
    if isinstance(value, AudioJob):
        progress = "" if value.progress is None else f" {value.progress:g}%"
        return f"{value.id} ({value.status.value}{progress})"
    if isinstance(value, StatusSnapshot):
        progress = "" if value.progress is None else f" {value.progress:g}%"
        return f"{value.status.value}{progress}"
    if isinstance(value, AudioContent):
        return f"{value.media_type or 'unknown'} ({len(value)} bytes)"
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    if isinstance(value, (bytes, bytearray)):
        return f"{type(value).__name__}({len(value)} bytes)"
    if isinstance(value, (list, tuple, set, frozenset)):
        if all(isinstance(item, str) for item in value) and len(value) <= 10:
            return ",".join(sorted(value) if isinstance(value, (set, frozenset)) else value)
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"
    return str(value)


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Convert a value to a short string for a log record.

    Args:
        value: Value to convert
        max_length: Maximum length before truncating

    Returns:
        str: Safe string representation
    """
    if value is None:
        return "None"
    try:
        text = value if isinstance(value, str) else _describe(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"

    if len(text) > max_length:
        return text[:max_length] + f"... (truncated, {len(text)} total)"
    return text


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context,
) -> None:
    """
    Log a message with job context attached to the record.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: job_id, article_id and any other key-value pairs
    """
    if not logger.isEnabledFor(level):
        return
    safe_context = {key: safe_log_value(val) for key, val in context.items()}
    logger.log(level, message, extra=safe_context)


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    level: int = logging.ERROR,
    **context,
) -> None:
    """
    Log an exception with job context and its traceback.

    Details of an AudioTrackerException are added as ``error_<key>``
    attributes unless the caller passed the same key.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        level: Log level, ERROR by default
        **context: Additional context pairs
    """
    if not logger.isEnabledFor(level):
        return
    safe_context = {key: safe_log_value(val) for key, val in context.items()}
    if isinstance(exc, AudioTrackerException):
        for key, val in exc.details.items():
            safe_context.setdefault(f"error_{key}", safe_log_value(val))
        error_msg = exc.message
    else:
        error_msg = str(exc)
    safe_context["error_type"] = type(exc).__name__
    safe_context["error_msg"] = error_msg
    logger.log(level, message, exc_info=exc, extra=safe_context)
