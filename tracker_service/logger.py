"""
Centralized logging configuration for the tracker service.

Provides request-scoped loggers that tag messages with the acting user
for easy debugging. Passwords and tokens must never be passed to these
loggers.
"""

import logging
import sys
from typing import Optional


class RequestLogger:
    """
    Structured logger for request handlers.

    Adds contextual information like the acting username to all log messages.
    """

    def __init__(self, name: str, username: Optional[str] = None):
        """
        Initialize request logger.

        Args:
            name: Logger name (usually __name__)
            username: Optional acting user for correlation
        """
        self.logger = logging.getLogger(name)
        self.username = username

    def _format_message(self, message: str) -> str:
        """Add contextual prefix to message."""
        if self.username:
            return f"[user:{self.username}] {message}"
        return message

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message), **kwargs)


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Configure global logging settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log format ("simple" or "json")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Remove existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if format == "json":
        # JSON format for production (parseable by log aggregators)
        formatter = logging.Formatter(
            '{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def get_logger(name: str, username: Optional[str] = None) -> RequestLogger:
    """
    Get a request logger instance.

    Args:
        name: Logger name (usually __name__)
        username: Optional acting user

    Returns:
        RequestLogger instance
    """
    return RequestLogger(name, username)
