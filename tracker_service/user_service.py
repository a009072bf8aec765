"""
User account operations: registration, login, identity resolution and
startup provisioning of the operator-configured account.
"""

import logging
from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

from .auth import create_access_token, hash_password, verify_password
from .config import TrackerSettings
from .errors import ConflictError, UnauthorizedError
from .models import UserIdentity
from .repositories.base import UserRepositoryInterface

logger = logging.getLogger(__name__)


class UserService:
    """Account operations over the users collection."""

    def __init__(self, repository: UserRepositoryInterface, settings: TrackerSettings):
        self.repository = repository
        self.settings = settings

    def _issue_token(self, user_id: Any, username: str) -> str:
        return create_access_token(str(user_id), username, self.settings)

    def _create_user(self, username: str, password: str) -> Any:
        result = self.repository.insert_one({
            "username": username,
            "passwordHash": hash_password(password),
            "jobs": [],
        })
        return result.upserted_id

    def register(self, username: str, password: str) -> str:
        """
        Create an account and return an access token for it.

        Raises:
            ConflictError: If the username is already taken
        """
        if self.repository.find_one({"username": username}) is not None:
            raise ConflictError("User already exists")

        try:
            user_id = self._create_user(username, password)
        except DuplicateKeyError:
            # Lost a race with a concurrent registration
            raise ConflictError("User already exists")

        logger.info(f"Registered user {username}")
        return self._issue_token(user_id, username)

    def login(self, username: str, password: str) -> str:
        """
        Verify credentials and return an access token.

        Raises:
            UnauthorizedError: Unknown user or wrong password
        """
        user = self.repository.find_one({"username": username})
        if user is None:
            logger.info(f"Login failed: unknown user {username}")
            raise UnauthorizedError("Invalid credentials")

        if not verify_password(password, user.get("passwordHash")):
            logger.info(f"Login failed: wrong password for {username}")
            raise UnauthorizedError("Invalid credentials")

        logger.info(f"Login successful for {username}")
        return self._issue_token(user["_id"], username)

    def resolve_user(self, identity: UserIdentity) -> Dict[str, Any]:
        """
        Load the user document behind a token identity.

        Looks up by id first, then by username.

        Raises:
            UnauthorizedError: If the user no longer exists
        """
        user: Optional[Dict[str, Any]] = self.repository.find_one(
            {"_id": self.repository.coerce_id(identity.id)}
        )
        if user is None:
            user = self.repository.find_one({"username": identity.username})
        if user is None:
            raise UnauthorizedError("Unauthorized")
        return user

    def ensure_default_user(self) -> bool:
        """
        Create the AUTH_USER/AUTH_PASS account if configured and absent.

        Returns:
            True if the account was created
        """
        if not self.settings.default_user_configured:
            return False

        username = self.settings.auth_user
        if self.repository.find_one({"username": username}) is not None:
            return False

        try:
            self._create_user(username, self.settings.auth_pass)
        except DuplicateKeyError:
            return False

        logger.info(f"Created default user {username} from environment")
        return True
