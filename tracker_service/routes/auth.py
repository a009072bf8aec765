"""
Account API Routes.

Provides endpoints for registration and token-based sessions:
- POST /api/register - Create an account, returns a token
- POST /api/login - Exchange credentials for a token
- POST /api/logout - Acknowledge logout (tokens are stateless)
- GET /api/me - Identity carried by the presented token
"""

from fastapi import APIRouter, Depends

from ..auth import get_current_user
from ..dependencies import get_user_service
from ..errors import api_operation
from ..logger import get_logger
from ..models import (
    CredentialsRequest,
    MeResponse,
    MessageResponse,
    TokenResponse,
    UserIdentity,
)
from ..user_service import UserService

router = APIRouter(prefix="/api", tags=["auth"])


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=201,
    summary="Create an account",
)
@api_operation("register")
def register(
    body: CredentialsRequest,
    user_service: UserService = Depends(get_user_service),
) -> TokenResponse:
    """
    Create a user with an empty job list.

    Returns 409 if the username is already taken.
    """
    token = user_service.register(body.username, body.password)
    return TokenResponse(message="created", token=token)


@router.post("/login", response_model=TokenResponse, summary="Log in")
@api_operation("log in")
def login(
    body: CredentialsRequest,
    user_service: UserService = Depends(get_user_service),
) -> TokenResponse:
    """Returns 401 "Invalid credentials" for an unknown user or wrong password."""
    token = user_service.login(body.username, body.password)
    return TokenResponse(message="Login successful", token=token)


@router.post("/logout", response_model=MessageResponse, summary="Log out")
def logout(identity: UserIdentity = Depends(get_current_user)) -> MessageResponse:
    """
    Tokens are not stored server-side, so logging out only requires the
    client to discard its token.
    """
    get_logger(__name__, username=identity.username).info("Logged out")
    return MessageResponse(message="logged out")


@router.get("/me", response_model=MeResponse, summary="Current identity")
def me(identity: UserIdentity = Depends(get_current_user)) -> MeResponse:
    return MeResponse(user=identity)
