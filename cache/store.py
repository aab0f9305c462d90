"""
cache/store.py -- Offline, non-authoritative student login cache.

A local SQLite file that lets a demo client "log in" and "register" with no
server running. It mirrors the shape of the real API (token + user without
a password field) but is NOT an authentication system:

  - Passwords are stored as weak_hash(), a 32-bit string hash that is
    NOT cryptographic. Collisions are trivial to find and the hash is
    unsalted. Never point this at real credentials.
  - Tokens are "demo-token-<ms>" strings. Nothing verifies them; the API
    rejects them.
  - Records here are never synced to the server, and the server never reads
    them.

It deliberately shares no code with auth/: no bcrypt, no JWT, no
core.errors. Failures raise OfflineAuthError.

Usage:
    cache = OfflineAuthCache()
    cache.seed_defaults()
    session = cache.login("12345", "password123")   # {"token": ..., "user": {...}}
    cache.current_user()
    cache.logout()
    cache.close()
"""

import json
import sqlite3
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

_DEFAULT_DB = Path(__file__).parent / "offline_auth.db"

_DDL = """
CREATE TABLE IF NOT EXISTS offline_users (
    id            INTEGER PRIMARY KEY,
    student_id    TEXT UNIQUE NOT NULL,
    name          TEXT NOT NULL,
    email         TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    program       TEXT NOT NULL DEFAULT '',
    year          INTEGER NOT NULL DEFAULT 1,
    created_at    TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS offline_session (
    id          INTEGER PRIMARY KEY CHECK (id = 1),
    token       TEXT NOT NULL,
    user_json   TEXT NOT NULL
);
"""

_DEFAULT_USERS = [
    {
        "student_id": "12345",
        "name": "John Doe",
        "email": "john.doe@university.edu",
        "password": "password123",
        "program": "Computer Science",
        "year": 3,
    },
]

_INVALID_LOGIN = "Invalid Student ID or password"


class OfflineAuthError(Exception):
    pass


def weak_hash(password: str) -> str:
    """Return a 32-bit signed string hash of password. NOT cryptographic.

    h = h * 31 + code_unit over UTF-16 code units, wrapped to a signed 32-bit
    integer. Matches the browser demo's hash so records are interchangeable.
    """
    h = 0
    data = password.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = int.from_bytes(data[i : i + 2], "little")
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return str(h)


class OfflineAuthCache:
    def __init__(self, db_path: Path = _DEFAULT_DB) -> None:
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_DDL)
        self._conn.commit()

    def seed_defaults(self) -> int:
        """Insert the demo user(s) if the cache is empty. Returns rows added."""
        count = self._conn.execute("SELECT COUNT(*) FROM offline_users").fetchone()[0]
        if count:
            return 0
        for user in _DEFAULT_USERS:
            self._insert(**user)
        return len(_DEFAULT_USERS)

    def register(
        self,
        student_id: str,
        name: str,
        email: str,
        password: str,
        program: str = "",
        year: int = 1,
    ) -> dict:
        """Store a new offline user and start a demo session for it."""
        if self._find("student_id", student_id) is not None:
            raise OfflineAuthError("Student ID already exists")
        if self._find("email", email) is not None:
            raise OfflineAuthError("Email already registered")
        self._insert(student_id, name, email, password, program, year)
        return self._start_session(self._find("student_id", student_id))

    def login(self, student_id: str, password: str) -> dict:
        """Check password against the weak hash and start a demo session."""
        row = self._find("student_id", student_id)
        if row is None or row["password_hash"] != weak_hash(password):
            raise OfflineAuthError(_INVALID_LOGIN)
        return self._start_session(row)

    def logout(self) -> None:
        self._conn.execute("DELETE FROM offline_session")
        self._conn.commit()

    def current_token(self) -> Optional[str]:
        row = self._conn.execute("SELECT token FROM offline_session WHERE id = 1").fetchone()
        return row["token"] if row else None

    def current_user(self) -> Optional[dict]:
        """Return the stored session user, or None if there is none or it is unreadable."""
        row = self._conn.execute("SELECT user_json FROM offline_session WHERE id = 1").fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["user_json"])
        except json.JSONDecodeError:
            return None

    def is_authenticated(self) -> bool:
        return self.current_token() is not None

    def _find(self, column: str, value: str) -> Optional[sqlite3.Row]:
        # column comes from the two call sites above, never from input.
        return self._conn.execute(
            f"SELECT * FROM offline_users WHERE {column} = ?",  # noqa: S608
            (value,),
        ).fetchone()

    def _insert(self, student_id: str, name: str, email: str, password: str, program: str = "", year: int = 1) -> None:
        self._conn.execute(
            "INSERT INTO offline_users (student_id, name, email, password_hash, program, year, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (student_id, name, email, weak_hash(password), program, year, datetime.now(timezone.utc).isoformat()),
        )
        self._conn.commit()

    def _start_session(self, row: sqlite3.Row) -> dict:
        user = {k: row[k] for k in row.keys() if k != "password_hash"}
        token = f"demo-token-{int(time.time() * 1000)}"
        self._conn.execute(
            "INSERT OR REPLACE INTO offline_session (id, token, user_json) VALUES (1, ?, ?)",
            (token, json.dumps(user)),
        )
        self._conn.commit()
        return {"token": token, "user": user}

    def close(self) -> None:
        self._conn.close()
