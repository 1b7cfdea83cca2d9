"""
Observability module.

Provides logging configuration and structured logging helpers.
"""

from audiotracker.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from audiotracker.observability.logger import (
    PACKAGE_LOGGER,
    configure_logging,
    get_logger,
    set_package_level,
)

__all__ = [
    "PACKAGE_LOGGER",
    "configure_logging",
    "get_logger",
    "log_exception_with_context",
    "log_with_context",
    "safe_log_value",
    "set_package_level",
]
