"""
Shared fixtures for tracker service tests.

Provides settings isolated from the developer's environment, both storage
backends (the in-memory stand-in and a mongomock-backed MongoUserRepository)
and a seeded user document for query tests.
"""

import copy
from datetime import datetime

import mongomock
import pytest
from bson import ObjectId

from tracker_service.config import TrackerSettings
from tracker_service.repositories import MemoryUserRepository, MongoUserRepository

TEST_JWT_SECRET = "test-secret-key-1234"

ENV_VARS = (
    "MONGODB_URI",
    "MONGO_URI",
    "MONGO_DB_NAME",
    "JWT_SECRET",
    "JWT_EXPIRY_SECONDS",
    "AUTH_USER",
    "AUTH_PASS",
    "ENVIRONMENT",
    "CORS_ORIGINS",
    "PORT",
)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep real credentials and connection strings out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "development")


@pytest.fixture
def settings():
    """Development settings with the in-memory store."""
    return TrackerSettings(jwt_secret=TEST_JWT_SECRET)


@pytest.fixture
def memory_repository():
    return MemoryUserRepository()


@pytest.fixture
def mongo_repository():
    """MongoUserRepository running against mongomock."""
    return MongoUserRepository(client=mongomock.MongoClient(), database="jobs", collection="users")


@pytest.fixture(params=["memory", "mongo"])
def repository(request):
    """Each test using this fixture runs once per storage backend."""
    if request.param == "memory":
        return MemoryUserRepository()
    return MongoUserRepository(client=mongomock.MongoClient(), database="jobs", collection="users")


@pytest.fixture
def seeded_user():
    """A user document with a varied set of embedded jobs."""
    return {
        "_id": ObjectId("65a000000000000000000001"),
        "username": "alice",
        "passwordHash": "not-a-real-hash",
        "jobs": [
            {
                "_id": ObjectId("65a0000000000000000000a1"),
                "company": "Acme",
                "position": "Engineer",
                "date": datetime(2024, 1, 5),
                "stage": "Applied",
            },
            {
                "_id": ObjectId("65a0000000000000000000a2"),
                "company": "Beta",
                "position": "Analyst",
                "date": datetime(2024, 2, 1),
            },
            {
                "_id": ObjectId("65a0000000000000000000a3"),
                "company": "Acme",
                "position": "Manager",
                "date": datetime(2024, 3, 1),
                "stage": "Interview",
            },
            {
                "_id": ObjectId("65a0000000000000000000a4"),
                "company": "Gamma (EU)",
                "position": "Data Engineer",
                "date": datetime(2024, 3, 1),
                "stage": "",
            },
            {
                "_id": ObjectId("65a0000000000000000000a5"),
                "company": "Delta",
                "position": "Engineering Manager",
                "date": datetime(2024, 3, 31, 18, 30),
                "stage": "Offer",
            },
        ],
    }


@pytest.fixture
def other_user():
    """A second user whose jobs must never leak into alice's results."""
    return {
        "_id": ObjectId("65a000000000000000000002"),
        "username": "bob",
        "passwordHash": "not-a-real-hash",
        "jobs": [
            {
                "_id": ObjectId("65a0000000000000000000b1"),
                "company": "Acme",
                "position": "Engineer",
                "date": datetime(2024, 1, 20),
            },
        ],
    }


@pytest.fixture
def seed():
    """Insert deep copies so backends never share state with the fixtures."""
    def _seed(repository, *documents):
        for document in documents:
            repository.insert_one(copy.deepcopy(document))
        return repository
    return _seed
