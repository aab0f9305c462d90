"""
auth/store.py -- SQLAlchemy Core persistence layer for student credentials.

Pattern: Repository + Data Mapper (same as academics/store.py).
UserStore is the repository; _row_to_user is the mapper. Route and service
code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Uniqueness of student_id and email is enforced twice: a lookup before the
  insert gives a precise conflict message, and the UNIQUE constraints catch
  the race where two registrations pass the lookup at the same time. The
  IntegrityError from the loser is translated to ConflictError, so exactly one
  of two concurrent duplicate registrations succeeds.

  Records returned by the public methods never carry password_hash.

Layer rule: no imports from api/, academics/, cache/, or client/.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.tokens import burn_password_check, hash_password, verify_password
from core.database import now_iso, users
from core.errors import ConflictError, InvalidCredentials

logger = logging.getLogger("portal.auth")


class UserStore:
    """Repository for User records.

    Usage:
        engine = create_db_engine(settings.database_url)
        store = UserStore(engine)
        user = store.create("12345", "John Doe", "john@u.edu", "password123")
        user = store.verify("12345", "password123")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def has_users(self) -> bool:
        """Return True if at least one user record exists. Drives first-run seeding."""
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(users)).scalar()
        return (result or 0) > 0

    def find_by_student_id(self, student_id: str) -> User | None:
        """Look up a user by exact student id. Returns None if not found."""
        row = self._fetch_one(users.c.student_id == student_id)
        return _public(row)

    def find_by_email(self, email: str) -> User | None:
        """Look up a user by exact email. Returns None if not found."""
        row = self._fetch_one(users.c.email == email)
        return _public(row)

    def find_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        row = self._fetch_one(users.c.id == user_id)
        return _public(row)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(
        self,
        student_id: str,
        name: str,
        email: str,
        password: str,
        program: str = "",
        year: int = 1,
    ) -> User:
        """Hash the password, insert a new user, and return it without the hash.

        Raises ConflictError if the student id or email is already registered.
        """
        if self._fetch_one(users.c.student_id == student_id) is not None:
            raise ConflictError("Student ID already registered.")
        if self._fetch_one(users.c.email == email) is not None:
            raise ConflictError("Email already registered.")

        password_hash = hash_password(password)
        stamp = now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    users.insert().values(
                        student_id=student_id,
                        name=name,
                        email=email,
                        password_hash=password_hash,
                        program=program,
                        year=year,
                        created_at=stamp,
                        updated_at=stamp,
                    )
                )
                conn.commit()
                user_id = result.inserted_primary_key[0]
        except IntegrityError as exc:
            # Lost a race against a concurrent registration for the same
            # student id or email. The constraint is the source of truth.
            logger.info("Registration conflict for student_id=%s", student_id)
            raise ConflictError("Email or student ID already exists.") from exc

        logger.info("Registered student_id=%s (user_id=%d)", student_id, user_id)
        created = self.find_by_id(user_id)
        if created is None:
            raise RuntimeError(f"User {user_id} missing immediately after insert")
        return created

    # ------------------------------------------------------------------
    # Credential check (constant-time)
    # ------------------------------------------------------------------

    def verify(self, student_id: str, password: str) -> User:
        """Return the user if password matches, else raise InvalidCredentials.

        Always runs bcrypt whether or not the student id exists:
        - Unknown student id: bcrypt runs against the dummy hash (same cost)
        - Wrong password: bcrypt runs against the real hash (same cost)

        Both failures raise the same error with the same message, so neither
        the response body nor its timing reveals which student ids exist.
        """
        row = self._fetch_one(users.c.student_id == student_id)
        if row is None:
            burn_password_check(password)
            raise InvalidCredentials()
        if not verify_password(password, row.password_hash):
            raise InvalidCredentials()
        return _public(row)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch_one(self, clause):
        with self.engine.connect() as conn:
            return conn.execute(users.select().where(clause)).fetchone()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        student_id=row.student_id,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        program=row.program or "",
        year=row.year,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _public(row) -> User | None:
    if row is None:
        return None
    return replace(_row_to_user(row), password_hash=None)
