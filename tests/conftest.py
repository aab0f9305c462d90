"""
tests/conftest.py -- Shared test fixtures for the portal test suite.

This module provides:
  - _make_test_engine(): named shared-memory SQLite engine for API tests
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient + a token for the seeded demo student 12345
  - engine / user_store / course_store: per-test in-memory stores for unit tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the API fixture because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

Environment must be set before any auth/core import:
  DEBUG=true              get_settings() auto-generates SECRET_KEY
  BCRYPT_ROUNDS=4         bcrypt's minimum cost keeps the suite fast
  LOGIN_RATE_LIMIT        high enough that repeated logins in tests never hit 429
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set these before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("SEED_DEMO_DATA", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from academics.store import CourseStore
from api.main import app
from api.seed import seed_demo_data
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import create_access_token
from core.database import create_db_engine

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_engine(db_suffix: str) -> Engine:
    """Create an isolated named shared-memory SQLite engine.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return create_db_engine(f"sqlite:///file:test_portal_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(engine: Engine):
    """Return an async context manager that replaces the real lifespan.

    Wires stores built on the test engine into app.state so TestClient routes
    see the isolated test DB rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.engine = engine
        app.state.user_store = UserStore(engine)
        app.state.course_store = CourseStore(engine)
        app.state.auth_service = AuthService(app.state.user_store)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The database is seeded with the three demo students (password
    "password123") and three demo courses before the client starts. The token
    belongs to student 12345 (John Doe).
    """
    engine = _make_test_engine(request.module.__name__.replace(".", "_"))
    user_store = UserStore(engine)
    seed_demo_data(user_store, CourseStore(engine))

    john = user_store.find_by_student_id("12345")
    token = create_access_token(john.id, john.student_id)

    app.router.lifespan_context = _patch_lifespan(engine)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, john.id

    engine.dispose()


# ---------------------------------------------------------------------------
# Function-scoped fixtures -- fresh database per unit test
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    eng = create_db_engine("sqlite:///:memory:")
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def course_store(engine: Engine) -> CourseStore:
    return CourseStore(engine)


@pytest.fixture
def auth_service(user_store: UserStore) -> AuthService:
    return AuthService(user_store)
