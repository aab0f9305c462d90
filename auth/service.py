"""
auth/service.py -- Login, registration, and session token verification.

AuthService is the only place that decides what a session token means. Routes
call it; the request dependency in auth/dependencies.py calls it; nothing else
decodes tokens.

Every failure is a core.errors exception:
  ValidationError     missing login/register fields
  InvalidCredentials  unknown student id or wrong password (indistinguishable)
  ConflictError       duplicate student id or email
  InvalidToken        malformed, badly signed, or expired token
  NotFound            token is valid but its user no longer exists
"""

from __future__ import annotations

import logging

from auth.models import AuthResult, User
from auth.store import UserStore
from auth.tokens import create_access_token, decode_access_token
from core.errors import InvalidCredentials, InvalidToken, NotFound, ValidationError

logger = logging.getLogger("portal.auth")

# bcrypt ignores (bcrypt>=5 rejects) anything past 72 bytes.
_MAX_PASSWORD_BYTES = 72


def _missing(**fields) -> list[str]:
    """Return the names of fields that are None or blank strings, in call order."""
    return [name for name, value in fields.items() if value is None or (isinstance(value, str) and not value.strip())]


class AuthService:
    def __init__(self, store: UserStore) -> None:
        self.store = store

    def login(self, student_id: str | None, password: str | None) -> AuthResult:
        """Check credentials and issue a 24-hour session token."""
        missing = _missing(student_id=student_id, password=password)
        if missing:
            raise ValidationError("Student ID and password are required.", missing=missing)

        try:
            user = self.store.verify(student_id, password)
        except InvalidCredentials:
            logger.info("Failed login for student_id=%s", student_id)
            raise
        return AuthResult(token=self._issue(user), user=user)

    def register(
        self,
        student_id: str | None,
        name: str | None,
        email: str | None,
        password: str | None,
        program: str | None = None,
        year: int | None = None,
    ) -> AuthResult:
        """Create a student account and log it in.

        program and year are optional and default to "" and 1.
        """
        missing = _missing(student_id=student_id, name=name, email=email, password=password)
        if missing:
            raise ValidationError(missing=missing)
        if len(password.encode("utf-8")) > _MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {_MAX_PASSWORD_BYTES} bytes.")

        user = self.store.create(
            student_id=student_id,
            name=name,
            email=email,
            password=password,
            program=program or "",
            year=year or 1,
        )
        return AuthResult(token=self._issue(user), user=user)

    def verify(self, token: str) -> User:
        """Resolve a session token to the user it names.

        Raises InvalidToken when the signature or expiry check fails, and
        NotFound when the token is fine but the user has since disappeared.
        """
        payload = decode_access_token(token)
        if payload is None:
            raise InvalidToken()
        user = self.store.find_by_id(payload["user_id"])
        if user is None:
            raise NotFound("User not found.")
        return user

    @staticmethod
    def _issue(user: User) -> str:
        return create_access_token(user.id, user.student_id)
