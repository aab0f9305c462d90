"""
tests/test_rate_limit.py -- POST /api/auth/login is rate-limited per client.

login_limit() re-reads LOGIN_RATE_LIMIT through get_settings() on every
request, so the fixture tightens the limit by swapping the env var and
clearing the settings cache. The limiter's in-memory counters are reset on
both sides so other modules' logins do not count here.
"""

from __future__ import annotations

import pytest

from api.limiter import limiter
from core.config import get_settings


@pytest.fixture
def tight_login_limit(monkeypatch):
    monkeypatch.setenv("LOGIN_RATE_LIMIT", "2/minute")
    get_settings.cache_clear()
    limiter.reset()
    yield
    get_settings.cache_clear()
    limiter.reset()


def test_third_login_in_a_minute_is_429(api_client, tight_login_limit):
    client, _, _ = api_client
    creds = {"student_id": "12345", "password": "password123"}

    assert client.post("/api/auth/login", json=creds).status_code == 200
    assert client.post("/api/auth/login", json=creds).status_code == 200

    resp = client.post("/api/auth/login", json=creds)
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "rate_limited"
    assert "Retry-After" in resp.headers


def test_failed_logins_count_toward_limit(api_client, tight_login_limit):
    client, _, _ = api_client
    bad = {"student_id": "12345", "password": "wrong"}

    assert client.post("/api/auth/login", json=bad).status_code == 401
    assert client.post("/api/auth/login", json=bad).status_code == 401
    assert client.post("/api/auth/login", json=bad).status_code == 429


def test_other_routes_are_not_limited(api_client, tight_login_limit):
    client, _, _ = api_client
    for _ in range(5):
        assert client.get("/api/health").status_code == 200
