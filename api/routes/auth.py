"""
api/routes/auth.py -- Login, registration, and token verification endpoints.

Routes:
  POST /api/auth/login     -- student id + password; returns token + user
  POST /api/auth/register  -- create a student account; returns token + user (201)
  GET  /api/auth/verify    -- confirm a Bearer token is still valid (requires auth)

Security:
  POST /login is rate-limited per client IP (LOGIN_RATE_LIMIT, default 10/minute).
  Unknown student id and wrong password produce the same 401 body.
  Cache-Control: no-store on every login response, success or failure.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_limit
from api.models import (
    AuthResponse,
    ErrorDetail,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
    VerifyResponse,
)
from auth.dependencies import get_current_user
from auth.models import AuthResult, User
from auth.service import AuthService
from core.errors import InvalidCredentials

# Auth policy:
# - POST /api/auth/login:     public
# - POST /api/auth/register:  public
# - GET  /api/auth/verify:    requires auth (get_current_user)
router = APIRouter()


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(token=result.token, user=UserResponse.from_user(result.user))


@limiter.limit(login_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with student id and password.

    Returns the same generic error for an unknown student id and a wrong
    password to avoid leaking which student ids exist. Missing fields raise
    ValidationError (400) from the service.
    """
    auth_service: AuthService = request.app.state.auth_service
    try:
        result = auth_service.login(body.student_id, body.password)
    except InvalidCredentials as exc:
        resp = JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message)).model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(status_code=200, content=_auth_response(result).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> AuthResponse:
    """Create a student account and return a session token for it.

    400 lists every missing required field; 409 on a duplicate student id or
    email (including when a concurrent request registered it first).
    """
    auth_service: AuthService = request.app.state.auth_service
    result = auth_service.register(
        student_id=body.student_id,
        name=body.name,
        email=body.email,
        password=body.password,
        program=body.program,
        year=body.year,
    )
    return _auth_response(result)


@router.get("/auth/verify", response_model=VerifyResponse)
def verify(current_user: User = Depends(get_current_user)) -> VerifyResponse:
    """Reaching the body means get_current_user accepted the token."""
    return VerifyResponse(valid=True, user=UserResponse.from_user(current_user))
