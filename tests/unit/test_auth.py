"""
Unit tests for tracker_service/auth.py
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from tracker_service.auth import (
    JWT_ALGORITHM,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from tracker_service.config import TrackerSettings
from tracker_service.errors import ForbiddenError


class TestPasswords:
    def test_hash_is_salted_and_verifiable(self):
        first = hash_password("pw123")
        second = hash_password("pw123")

        assert first != second
        assert "pw123" not in first
        assert verify_password("pw123", first)
        assert verify_password("pw123", second)

    def test_wrong_password(self):
        assert not verify_password("nope", hash_password("pw123"))

    @pytest.mark.parametrize("stored", [None, "", "plaintext-not-a-hash"])
    def test_missing_or_malformed_hash(self, stored):
        assert verify_password("pw123", stored) is False


class TestTokens:
    def test_round_trip(self, settings):
        token = create_access_token("user-1", "alice", settings)
        identity = decode_access_token(token, settings)

        assert identity.id == "user-1"
        assert identity.username == "alice"

    def test_expiry_is_one_day_by_default(self, settings):
        token = create_access_token("user-1", "alice", settings)
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])

        lifetime = payload["exp"] - datetime.now(timezone.utc).timestamp()
        assert 86400 - 60 < lifetime <= 86400

    def test_other_secret_is_forbidden(self, settings):
        other = TrackerSettings(jwt_secret="another-secret-9876")
        token = create_access_token("user-1", "alice", other)

        with pytest.raises(ForbiddenError):
            decode_access_token(token, settings)

    def test_expired_token_is_forbidden(self, settings):
        expired = jwt.encode(
            {"id": "user-1", "username": "alice", "exp": datetime.now(timezone.utc) - timedelta(seconds=5)},
            settings.jwt_secret,
            algorithm=JWT_ALGORITHM,
        )
        with pytest.raises(ForbiddenError):
            decode_access_token(expired, settings)

    def test_garbage_is_forbidden(self, settings):
        with pytest.raises(ForbiddenError):
            decode_access_token("not.a.token", settings)

    def test_missing_claims_are_forbidden(self, settings):
        token = jwt.encode({"id": "user-1"}, settings.jwt_secret, algorithm=JWT_ALGORITHM)
        with pytest.raises(ForbiddenError):
            decode_access_token(token, settings)
