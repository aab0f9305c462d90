"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Protected routes declare `user: User = Depends(get_current_user)`. The
dependency runs before the handler body, so a missing or bad token never
reaches route code:

  no Authorization: Bearer header  -> HTTP 401 (raised here)
  token fails signature/expiry     -> InvalidToken (403, mapped in api/main.py)
  token valid, user deleted        -> NotFound (404, mapped in api/main.py)

Layer rule: auth/dependencies.py may import from fastapi (for Request and
HTTPException) because this module is part of the FastAPI dependency
injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.service import AuthService


def bearer_token(request: Request) -> str | None:
    """Extract the token from an `Authorization: Bearer <token>` header."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(request: Request) -> User:
    """Require a valid session token and return the user it names.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    token = bearer_token(request)
    if token is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Access token required."},
        )
    auth_service: AuthService = request.app.state.auth_service
    return auth_service.verify(token)
