"""
Unit tests for tracker_service/user_service.py

Runs against both storage backends via the parametrized repository fixture.
"""

import pytest
from pymongo.errors import DuplicateKeyError

from tracker_service.auth import decode_access_token
from tracker_service.config import TrackerSettings
from tracker_service.errors import ConflictError, UnauthorizedError
from tracker_service.models import UserIdentity
from tracker_service.user_service import UserService


@pytest.fixture
def service(repository, settings):
    return UserService(repository, settings)


def test_register_then_login(service, settings):
    register_token = service.register("alice", "pw123")
    login_token = service.login("alice", "pw123")

    registered = decode_access_token(register_token, settings)
    logged_in = decode_access_token(login_token, settings)
    assert registered.username == logged_in.username == "alice"
    assert registered.id == logged_in.id


def test_register_stores_hash_and_empty_jobs(service, repository):
    service.register("alice", "pw123")
    user = repository.find_one({"username": "alice"})

    assert user["jobs"] == []
    assert user["passwordHash"] != "pw123"
    assert "password" not in user


def test_duplicate_registration_conflicts(service):
    service.register("alice", "pw123")
    with pytest.raises(ConflictError, match="User already exists"):
        service.register("alice", "other")


def test_registration_race_maps_to_conflict(service, mocker):
    mocker.patch.object(service.repository, "find_one", return_value=None)
    mocker.patch.object(service.repository, "insert_one", side_effect=DuplicateKeyError("dup"))

    with pytest.raises(ConflictError):
        service.register("alice", "pw123")


@pytest.mark.parametrize("username, password", [("alice", "wrong"), ("nobody", "pw123")])
def test_invalid_credentials(service, username, password):
    service.register("alice", "pw123")
    with pytest.raises(UnauthorizedError, match="Invalid credentials"):
        service.login(username, password)


def test_resolve_user_by_id(service, settings):
    identity = decode_access_token(service.register("alice", "pw123"), settings)
    assert service.resolve_user(identity)["username"] == "alice"


def test_resolve_user_falls_back_to_username(service):
    service.register("alice", "pw123")
    user = service.resolve_user(UserIdentity(id="stale-id", username="alice"))
    assert user["username"] == "alice"


def test_resolve_missing_user(service):
    with pytest.raises(UnauthorizedError):
        service.resolve_user(UserIdentity(id="stale-id", username="ghost"))


class TestDefaultUser:
    def test_not_configured(self, repository, settings):
        assert UserService(repository, settings).ensure_default_user() is False

    def test_created_once_and_can_log_in(self, repository):
        settings = TrackerSettings(jwt_secret="test-secret-key-1234", auth_user="admin", auth_pass="s3cret")
        service = UserService(repository, settings)

        assert service.ensure_default_user() is True
        assert service.ensure_default_user() is False
        assert service.login("admin", "s3cret")
