"""
Unit tests for tracker_service/config.py and the repository factory.
"""

import pytest
from pydantic import ValidationError

from tracker_service.config import (
    DEFAULT_JWT_SECRET,
    TrackerSettings,
    get_settings,
    validate_config_on_startup,
)
from tracker_service.repositories import (
    MemoryUserRepository,
    MongoUserRepository,
    get_user_repository,
)


class TestDefaults:
    def test_development_defaults(self):
        settings = TrackerSettings()

        assert settings.port == 3000
        assert settings.mongo_db_name == "jobs"
        assert settings.jwt_secret == DEFAULT_JWT_SECRET
        assert settings.jwt_expiry_seconds == 86400
        assert settings.uses_memory_store
        assert not settings.default_user_configured

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("JWT_SECRET", "from-the-environment")
        monkeypatch.setenv("AUTH_USER", "admin")
        monkeypatch.setenv("AUTH_PASS", "s3cret")

        settings = TrackerSettings()

        assert settings.port == 8080
        assert settings.jwt_secret == "from-the-environment"
        assert settings.default_user_configured


class TestMongoUri:
    @pytest.mark.parametrize("name", ["MONGODB_URI", "MONGO_URI"])
    def test_either_variable_is_accepted(self, monkeypatch, name):
        monkeypatch.setenv(name, "mongodb://db.example:27017")

        settings = TrackerSettings()

        assert settings.mongodb_uri == "mongodb://db.example:27017"
        assert not settings.uses_memory_store

    def test_empty_uri_means_memory(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "")
        assert TrackerSettings().uses_memory_store

    def test_bad_scheme_rejected(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "postgres://db.example")
        with pytest.raises(ValidationError):
            TrackerSettings()


@pytest.mark.parametrize(
    "field, value",
    [
        ("environment", "qa"),
        ("log_format", "xml"),
        ("jwt_secret", "short"),
        ("jwt_expiry_seconds", 5),
        ("auth_pass", "x" * 80),
    ],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        TrackerSettings(**{field: value})


def test_cors_origins_list():
    settings = TrackerSettings(cors_origins="https://a.example, https://b.example,")
    assert settings.cors_origins_list == ["https://a.example", "https://b.example"]


class TestProductionValidation:
    def test_default_secret_is_critical(self):
        settings = TrackerSettings(environment="production")
        with pytest.raises(ValueError, match="JWT_SECRET"):
            validate_config_on_startup(settings)

    def test_missing_uri_only_warns(self):
        settings = TrackerSettings(environment="production", jwt_secret="a-real-production-secret")

        issues = settings.validate_production_config()

        assert any("MONGODB_URI" in issue for issue in issues)
        assert not any(issue.startswith("CRITICAL") for issue in issues)
        validate_config_on_startup(settings)

    def test_development_has_no_issues(self):
        assert TrackerSettings().validate_production_config() == []


def test_get_settings_is_cached():
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


class TestRepositoryFactory:
    def test_memory_without_uri(self, settings):
        assert isinstance(get_user_repository(settings), MemoryUserRepository)

    def test_mongo_with_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://db.example:27017")
        monkeypatch.setenv("MONGO_DB_NAME", "tracker")

        repository = get_user_repository(TrackerSettings())

        assert isinstance(repository, MongoUserRepository)
        assert repository._database_name == "tracker"
