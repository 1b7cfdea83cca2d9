"""
Logger configuration.

Provides configured root logger with a structured, timestamped format.

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys

PACKAGE_LOGGER = "audiotracker"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure Python logging with ISO timestamp and structured format.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ...)
    """
    # Remove any existing handlers to avoid duplicates
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root_logger.setLevel(level.upper())
    root_logger.addHandler(handler)

    # Every poll tick is an HTTP request; keep transport chatter out of INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def set_package_level(level: str) -> None:
    """
    Set the level of the audiotracker logger tree only.

    Leaves the host application's root logger and handlers untouched.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
    """
    logging.getLogger(PACKAGE_LOGGER).setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    """
    Get configured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)
