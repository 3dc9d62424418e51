"""
tests/conftest.py -- Shared test fixtures for authgate.

This module provides:
  - make_store(): isolated named shared-memory SQLite CredentialStore
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - client: TestClient over the real ASGI stack (development cookie settings)
  - hasher / issuer / codec / store: unit-level collaborators

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.

The DEBUG env var must be set before any api/core import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any core/api import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app, init_auth_state
from auth.cookies import SessionCookieCodec
from auth.passwords import PasswordHasher
from auth.store import CredentialStore
from auth.tokens import TokenIssuer
from core.config import get_settings

TEST_SECRET = "test-secret-key-with-at-least-32-characters"


def make_store(name: str | None = None) -> CredentialStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        name: Unique DB name. Defaults to a random one so tests never share rows.
    """
    name = name or uuid.uuid4().hex
    return CredentialStore(f"sqlite:///file:test_auth_{name}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: CredentialStore):
    """Return an async context manager that replaces the real lifespan.

    Uses the real wiring (init_auth_state) with the test store, so routes,
    guard and service are exactly what production builds.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        init_auth_state(app, get_settings(), store=store)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Integration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[CredentialStore, None, None]:
    s = make_store()
    yield s
    s.close()


@pytest.fixture
def client(store: CredentialStore) -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app with a fresh, empty credential store.

    base_url is https so the client also replays cookies that would be
    marked Secure.
    """
    original = app.router.lifespan_context
    app.router.lifespan_context = _patch_lifespan(store)
    try:
        with TestClient(app, base_url="https://testserver", raise_server_exceptions=True) as c:
            yield c
    finally:
        app.router.lifespan_context = original


# ---------------------------------------------------------------------------
# Unit fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    # bcrypt at cost 10 is slow enough that one instance per session matters.
    return PasswordHasher()


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET)


@pytest.fixture
def codec() -> SessionCookieCodec:
    return SessionCookieCodec("access_token", production=False)
