"""
Fixtures for HTTP-level tests.

The app is built with create_app() around the parametrized repository
fixture, so every API test runs once against the in-memory store and once
against mongomock.
"""

import pytest
from fastapi.testclient import TestClient

from tracker_service.app import create_app


@pytest.fixture
def app(settings, repository):
    return create_app(settings=settings, repository=repository)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def register(client, username, password):
    response = client.post("/api/register", json={"username": username, "password": password})
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def register_user(client):
    def _register_user(username, password):
        return register(client, username, password)
    return _register_user


@pytest.fixture
def auth_headers(client):
    """Bearer headers for a freshly registered user 'alice'."""
    return register(client, "alice", "pw123")


@pytest.fixture
def other_headers(client):
    """Bearer headers for a second user 'bob'."""
    return register(client, "bob", "pw456")


@pytest.fixture
def add_job(client):
    def _add_job(headers, company, position, date, stage=None):
        response = client.post(
            "/api/jobs",
            json={"company": company, "position": position, "date": date},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        job = response.json()["job"]
        if stage is not None:
            client.put(f"/api/jobs/{job['_id']}", json={"stage": stage}, headers=headers)
        return job
    return _add_job
