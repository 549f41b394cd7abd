"""Shared fixtures for API testing.

These fixtures provide a TestClient backed by a fresh Shell for each
test, ensuring test isolation.
"""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_shell
from main import app
from tests.fixtures.core.shells import create_shell


@pytest.fixture
def fresh_shell():
    """Provide a fresh, initialized Shell with in-memory storage."""
    return create_shell()


@pytest.fixture
def client_with_shell(fresh_shell):
    """Provide a TestClient with a fresh Shell injected.

    Uses FastAPI's dependency override system to inject the test shell
    instead of the global one. The lifespan is not entered, so the global
    shell is never created.

    Yields:
        A tuple of (TestClient, Shell) for testing.

    Example:
        def test_something(client_with_shell):
            client, shell = client_with_shell
            response = client.get("/terminal/prompt")
            assert response.status_code == 200
    """
    app.dependency_overrides[get_shell] = lambda: fresh_shell
    client = TestClient(app)

    yield client, fresh_shell

    app.dependency_overrides.clear()


@pytest.fixture
def test_client():
    """Provide a TestClient without any shell override."""
    return TestClient(app)
