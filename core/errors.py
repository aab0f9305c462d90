"""
core/errors.py -- Domain exception taxonomy for the portal.

Stores and services raise these; api/main.py maps them to HTTP responses via
a single exception handler keyed on PortalError. Each class carries the
status code and machine-readable error code it maps to, so the mapping lives
next to the exception rather than in a lookup table in the route layer.

Anything that is NOT a PortalError (SQLAlchemy errors, bcrypt errors) is an
internal failure and falls through to the generic 500 handler.
"""

from __future__ import annotations


class PortalError(Exception):
    """Base class for every error the portal raises on purpose."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortalError):
    """Missing or malformed client input."""

    status_code = 400
    code = "validation_error"
    default_message = "Request validation failed."

    def __init__(self, message: str | None = None, missing: list[str] | None = None) -> None:
        self.missing = list(missing or [])
        if message is None and self.missing:
            message = f"Missing required fields: {', '.join(self.missing)}"
        super().__init__(message)


class InvalidCredentials(PortalError):
    """Unknown student id OR wrong password. Never say which."""

    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid student ID or password."


class InvalidToken(PortalError):
    """Malformed, badly signed, or expired session token."""

    status_code = 403
    code = "invalid_token"
    default_message = "Invalid or expired token."


class ConflictError(PortalError):
    """A uniqueness constraint would be violated."""

    status_code = 409
    code = "conflict"
    default_message = "Resource already exists."


class NotFound(PortalError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found."


class InternalError(PortalError):
    """Unexpected storage or signing failure. Logged server-side; clients see a generic 500."""
