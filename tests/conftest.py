"""
tests/conftest.py -- Shared test fixtures for the account service.

This module provides:
  - _make_test_store(): creates an isolated in-memory document store
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - user_store: a fresh UserStore per test
  - client: TestClient over https://testserver backed by user_store
  - registered_user / session_token: the "foo" / "password1234" account

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers and dependencies in a thread
pool. Plain :memory: DBs are per-connection and would present a blank schema
to each worker thread. Each test gets its own DB name so no state leaks.

The client's base URL is https:// because the session cookie is Secure; an
http:// client would receive it but never send it back.
"""

from __future__ import annotations

import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import UserStore
from docstore.store import DocumentStore

MOCK_USERNAME = "foo"
MOCK_PASSWORD = "password1234"
MOCK_EMAIL = "foo@example.com"

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_store() -> UserStore:
    """Create an isolated named shared-memory SQLite store."""
    url = f"sqlite:///file:test_accounts_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    return UserStore(DocumentStore(url))


def _patch_lifespan(user_store):
    """Return an async context manager that replaces the real lifespan.

    Wires the test store into app.state so TestClient routes see an isolated
    database rather than the default SQLite file. Passing None simulates an
    app whose store was never configured.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = _make_test_store()
    yield store
    store.close()


@pytest.fixture
def client(user_store: UserStore) -> Generator[TestClient, None, None]:
    """Yield a TestClient running the real app against user_store."""
    app.router.lifespan_context = _patch_lifespan(user_store)
    with TestClient(app, base_url="https://testserver", raise_server_exceptions=True) as test_client:
        yield test_client


@pytest.fixture
def registered_user(client: TestClient) -> dict:
    """Sign up the mock account and return its public view."""
    resp = client.post(
        "/signup",
        json={"username": MOCK_USERNAME, "email": MOCK_EMAIL, "password": MOCK_PASSWORD},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture
def session_token(client: TestClient, registered_user: dict) -> str:
    """Log the mock account in and return the session token from the cookie."""
    resp = client.post("/login", headers={"Authorization": f"{MOCK_USERNAME}:{MOCK_PASSWORD}"})
    assert resp.status_code == 200, resp.text
    return resp.cookies["auth_token"]

