"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in academics/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/, academics/, cache/, or client/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered student.

    student_id is the public login identifier ("12345"); id is the internal
    primary key carried inside session tokens.

    password_hash is populated only on records read for credential checks.
    Every record the store hands back to callers outside auth/ has it set to
    None, so it cannot leak into a response by accident.
    """

    student_id: str
    name: str
    email: str
    program: str = ""
    year: int = 1
    id: int | None = None
    password_hash: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class AuthResult:
    """What login and register hand back: a fresh token plus the user it names."""

    token: str
    user: User
