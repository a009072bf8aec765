"""
FastAPI dependencies that hand the app-owned repository and services to
route handlers.
"""

from typing import Any, Dict

from fastapi import Depends, Request

from .auth import get_current_user
from .job_service import JobService
from .models import UserIdentity
from .repositories.base import UserRepositoryInterface
from .user_service import UserService


def get_repository(request: Request) -> UserRepositoryInterface:
    return request.app.state.repository


def get_user_service(request: Request) -> UserService:
    return UserService(request.app.state.repository, request.app.state.settings)


def get_job_service(repository: UserRepositoryInterface = Depends(get_repository)) -> JobService:
    return JobService(repository)


def get_current_user_doc(
    identity: UserIdentity = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Authenticate the request and load the acting user's document."""
    return user_service.resolve_user(identity)
