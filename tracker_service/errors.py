"""
Error taxonomy for the tracker service.

Services raise these exceptions; the application-level handlers in app.py
convert them into HTTP responses with a JSON body of the form
{"error": "<message>"}.
"""

import logging
from functools import wraps
from typing import Callable, TypeVar

T = TypeVar("T")


class TrackerError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """Convert to the JSON error body."""
        return {"error": self.message}


class ValidationError(TrackerError):
    """Missing or malformed request fields."""

    status_code = 400


class UnauthorizedError(TrackerError):
    """Missing credential, or credential that does not resolve to a user."""

    status_code = 401


class ForbiddenError(TrackerError):
    """Invalid or expired token."""

    status_code = 403


class NotFoundError(TrackerError):
    status_code = 404


class ConflictError(TrackerError):
    """Duplicate username on registration."""

    status_code = 409


class InternalError(TrackerError):
    """Backend failure or unexpected exception."""

    status_code = 500


def api_operation(operation_name: str):
    """
    Decorator for route handlers with consistent error handling.

    TrackerError subclasses pass through untouched. Any other exception is
    logged with its traceback and re-raised as InternalError whose message
    names the failed operation, e.g. "Failed to fetch jobs: <reason>".

    Usage:
        @router.get("/api/jobs")
        @api_operation("fetch jobs")
        def list_jobs(...):
            ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except TrackerError:
                raise
            except Exception as e:
                logger = logging.getLogger(func.__module__)
                logger.exception(f"[{operation_name}] Failed: {e}")
                raise InternalError(f"Failed to {operation_name}: {e}") from e

        return wrapper

    return decorator
