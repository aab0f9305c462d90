"""
api/main.py -- FastAPI application entry point for the university portal.

Run with:  python main.py serve
           uvicorn api.main:app --reload --port 3000

Middleware stack (outermost to innermost):
  1. CORSMiddleware     -- adds CORS headers for the front-end dev origins
  2. SlowAPIMiddleware  -- enforces per-route rate limits from api.limiter
  3. log_requests       -- one INFO line per request with latency

Lifespan owns the database engine: it is created once at startup, handed to
each store (dependency injection, no module-level connection), and disposed
on shutdown. The signing secret is read once via get_settings() and never
changes while the process runs.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from academics.store import CourseStore
from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.courses import router as courses_router
from api.routes.student import router as student_router
from api.seed import seed_demo_data
from auth.service import AuthService
from auth.store import UserStore
from core.config import get_settings
from core.database import create_db_engine
from core.errors import PortalError, ValidationError

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("portal.api")

_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the engine and stores, seed on first run, dispose on shutdown.

    A failure here (bad DATABASE_URL, seeding conflict) aborts startup rather
    than serving requests against a half-initialized database.
    """
    settings = get_settings()
    logger.info("University portal API starting up")
    engine = create_db_engine(settings.database_url)
    app.state.engine = engine
    app.state.user_store = UserStore(engine)
    app.state.course_store = CourseStore(engine)
    app.state.auth_service = AuthService(app.state.user_store)
    if settings.seed_demo_data and seed_demo_data(app.state.user_store, app.state.course_store):
        logger.info("Demo data loaded")
    logger.info("Database initialized")

    yield

    engine.dispose()
    logger.info("University portal API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="University Portal API",
    description="Student authentication, course catalog, and enrollment lookup.",
    version=_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(student_router, prefix="/api", tags=["Student"])
app.include_router(courses_router, prefix="/api", tags=["Courses"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, detail: ErrorDetail) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=detail).model_dump())


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    """Map the domain taxonomy (core/errors.py) to status codes.

    The status code and error code come from the exception class itself.
    """
    fields = None
    if isinstance(exc, ValidationError) and exc.missing:
        fields = exc.missing
    if exc.status_code >= 500:
        logger.error("Internal portal error on %s %s: %s", request.method, request.url.path, exc.message)
        return _error_response(500, ErrorDetail(code="internal_error", message="An unexpected error occurred."))
    return _error_response(exc.status_code, ErrorDetail(code=exc.code, message=exc.message, fields=fields))


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error_response(
        429,
        ErrorDetail(code="rate_limited", message="Too many requests.", detail=str(exc)),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or wrongly typed fields are the client's fault: 400, like missing fields."""
    return _error_response(
        400,
        ErrorDetail(
            code="validation_error",
            message="Request validation failed.",
            detail=str(exc.errors()),
        ),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Structured error for HTTPException, including the router's 404 for unknown paths.

    Registered against Starlette's HTTPException so it also covers errors the
    router raises before any FastAPI code runs. When detail is already a
    structured dict (auth/dependencies.py), run it through ErrorDetail so the
    body has the same keys as every other error.
    """
    if isinstance(exc.detail, dict):
        response = _error_response(exc.status_code, ErrorDetail(**exc.detail))
    elif exc.status_code == 404:
        response = _error_response(404, ErrorDetail(code="not_found", message="Endpoint not found."))
    else:
        response = _error_response(
            exc.status_code,
            ErrorDetail(code=f"http_{exc.status_code}", message=str(exc.detail)),
        )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the server log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, ErrorDetail(code="internal_error", message="An unexpected error occurred."))


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. No auth, no rate limit.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness."""
    return HealthResponse()
