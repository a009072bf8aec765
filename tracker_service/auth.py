"""
Authentication Module

Handles password hashing (bcrypt) and stateless access tokens (JWT).
Tokens carry {id, username} and expire after the configured lifetime.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import TrackerSettings
from .errors import ForbiddenError, UnauthorizedError
from .models import UserIdentity

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10

# auto_error=False so a missing header maps to our 401 instead of FastAPI's default
security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password with a per-password salt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """
    Check a password against a stored bcrypt hash.

    Returns False for a missing or malformed hash instead of raising.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def create_access_token(user_id: str, username: str, settings: TrackerSettings) -> str:
    """
    Sign an access token for a user.

    Args:
        user_id: The user's _id as a string
        username: The user's name
        settings: Provides the signing secret and lifetime

    Returns:
        Encoded JWT
    """
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=settings.jwt_expiry_seconds)
    payload = {"id": user_id, "username": username, "exp": expires_at}
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, settings: TrackerSettings) -> UserIdentity:
    """
    Verify a token's signature and expiry.

    Raises:
        ForbiddenError: If the token is invalid, expired or lacks the identity claims
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Token verification failed: token expired")
        raise ForbiddenError("Forbidden")
    except jwt.InvalidTokenError as e:
        logger.info(f"Token verification failed: {e}")
        raise ForbiddenError("Forbidden")

    user_id = payload.get("id")
    username = payload.get("username")
    if not user_id or not username:
        logger.info("Token verification failed: missing identity claims")
        raise ForbiddenError("Forbidden")

    return UserIdentity(id=str(user_id), username=str(username))


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> UserIdentity:
    """
    FastAPI dependency that authenticates the request.

    Raises:
        UnauthorizedError: 401 if no bearer token was sent
        ForbiddenError: 403 if the token is invalid or expired

    Returns:
        The decoded identity
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Unauthorized")

    settings: TrackerSettings = request.app.state.settings
    return decode_access_token(credentials.credentials, settings)
