"""
Repository Pattern for user and embedded job storage.

Public API:
- get_user_repository(settings): Factory for the configured backend
- UserRepositoryInterface: Abstract interface for the users collection
- MongoUserRepository / MemoryUserRepository: the two backends
- WriteResult: Result dataclass for write operations

Usage:
    from tracker_service.repositories import get_user_repository

    repo = get_user_repository(settings)
    user = repo.find_one({"username": "alice"})
"""

from .base import UserRepositoryInterface, WriteResult
from .config import get_user_repository
from .memory_repository import MemoryUserRepository
from .mongo_repository import MongoUserRepository

__all__ = [
    "get_user_repository",
    "UserRepositoryInterface",
    "MemoryUserRepository",
    "MongoUserRepository",
    "WriteResult",
]
