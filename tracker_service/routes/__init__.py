"""
Tracker service route modules.

Each module handles a specific area of functionality.
"""

from .auth import router as auth_router
from .jobs import router as jobs_router

__all__ = [
    "auth_router",
    "jobs_router",
]
