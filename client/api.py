"""
client/api.py -- HTTP client for the portal REST API.

The authoritative counterpart to cache/store.py: every call goes to the
server, and the server decides whether a token is valid. The client only
remembers the last token it was issued and sends it as a Bearer header.

Runs outside the server process, so it does not load core.config (which
demands a SECRET_KEY). PORTAL_API_URL is read once at module load instead.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import requests

logger = logging.getLogger("portal.client")

_DEFAULT_API_URL = os.environ.get("PORTAL_API_URL") or "http://localhost:3000/api"


class PortalClientError(Exception):
    """The API answered with an error, or could not be reached (status_code None)."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class PortalClient:
    """Thin wrapper over requests.Session that keeps the session token.

    Usage:
        client = PortalClient()
        client.login("12345", "password123")
        client.list_courses()
        client.logout()
    """

    def __init__(self, base_url: str = _DEFAULT_API_URL, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token: Optional[str] = None
        self.user: Optional[dict[str, Any]] = None
        self._session = requests.Session()
        self._session.max_redirects = 3

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def login(self, student_id: str, password: str) -> dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"student_id": student_id, "password": password})
        self._remember(data)
        return data

    def register(
        self,
        student_id: str,
        name: str,
        email: str,
        password: str,
        program: Optional[str] = None,
        year: Optional[int] = None,
    ) -> dict[str, Any]:
        """Register and keep the returned token, so the caller is logged in afterwards."""
        body: dict[str, Any] = {"student_id": student_id, "name": name, "email": email, "password": password}
        if program is not None:
            body["program"] = program
        if year is not None:
            body["year"] = year
        data = self._request("POST", "/auth/register", json=body)
        self._remember(data)
        return data

    def logout(self) -> None:
        """Forget the token locally. Tokens are stateless; the server keeps nothing to revoke."""
        self.token = None
        self.user = None

    def is_authenticated(self) -> bool:
        return self.token is not None

    def verify_token(self) -> bool:
        """Ask the server whether the stored token is still valid. Never raises."""
        if self.token is None:
            return False
        try:
            resp = self._session.get(self._url("/auth/verify"), headers=self._auth_headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Token verification request failed: %s", e)
            return False
        return resp.ok

    # ------------------------------------------------------------------
    # Student data
    # ------------------------------------------------------------------

    def get_profile(self) -> dict[str, Any]:
        return self._authed("GET", "/student/profile")

    def list_courses(self) -> list[dict[str, Any]]:
        return self._authed("GET", "/courses")

    def list_enrollments(self) -> list[dict[str, Any]]:
        return self._authed("GET", "/student/enrollments")

    def enroll(self, course_id: int) -> dict[str, Any]:
        return self._authed("POST", "/student/enrollments", json={"course_id": course_id})

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/health")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _remember(self, data: dict[str, Any]) -> None:
        if data.get("token"):
            self.token = data["token"]
            self.user = data.get("user")

    def _authed(self, method: str, path: str, **kwargs) -> Any:
        if self.token is None:
            raise PortalClientError("No authentication token")
        return self._request(method, path, headers=self._auth_headers(), **kwargs)

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send a request and return the decoded JSON body, raising PortalClientError on failure."""
        try:
            resp = self._session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise PortalClientError(f"Could not reach the portal API: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.ok:
            error = data.get("error", {}) if isinstance(data, dict) else {}
            raise PortalClientError(
                error.get("message") or resp.reason or f"HTTP {resp.status_code}",
                status_code=resp.status_code,
                code=error.get("code"),
            )
        return data
