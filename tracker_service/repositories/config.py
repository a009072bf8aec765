"""
Repository Factory

Returns the repository implementation that matches the configured backend.
The application factory owns the returned instance and closes it on shutdown.
"""

import logging

from ..config import TrackerSettings
from .base import UserRepositoryInterface

logger = logging.getLogger(__name__)


def get_user_repository(settings: TrackerSettings) -> UserRepositoryInterface:
    """
    Build the user repository for the given settings.

    - MONGODB_URI set: MongoUserRepository
    - MONGODB_URI unset: MemoryUserRepository (nothing survives a restart)

    Returns:
        UserRepositoryInterface implementation
    """
    if settings.uses_memory_store:
        from .memory_repository import MemoryUserRepository
        logger.warning("MONGODB_URI not set. Using in-memory stand-in store.")
        return MemoryUserRepository()

    from .mongo_repository import MongoUserRepository
    logger.info("Initialized MongoDB user repository")
    return MongoUserRepository(
        mongodb_uri=settings.mongodb_uri,
        database=settings.mongo_db_name,
    )
