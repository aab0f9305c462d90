"""
auth/tokens.py -- JWT and password hashing utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       the internal user_id, the student_id as subject, issue time, and an
       expiry 24 hours out. Verification returns None on any failure --
       AuthService turns that into InvalidToken.

  Passwords: bcrypt directly (no passlib wrapper). The cost factor comes from
       Settings.bcrypt_rounds (default 10). The _DUMMY_HASH constant enables
       timing equalization in UserStore.verify() so response time does not
       reveal whether a student id exists.

  SECRET_KEY: sourced from core.config.get_settings() once at module load.
       The Settings class validates the key: dev mode (DEBUG=true)
       auto-generates a random key with a warning; production mode refuses to
       start without one. Short keys (<32 chars) are rejected.

Layer rule: no imports from api/, academics/, cache/, or client/. Import from
core/ is allowed -- core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from core.config import get_settings

logger = logging.getLogger("portal.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


# bcrypt only looks at the first 72 bytes (bcrypt>=5 raises past that).
# AuthService.register rejects longer passwords, so no stored hash covers one.
_BCRYPT_MAX_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Callers must keep the password within 72 bytes; AuthService.register
    enforces this with its _MAX_PASSWORD_BYTES check.
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    bcrypt.checkpw compares in constant time. A password longer than 72
    bytes can never match, and a malformed stored hash is treated as a
    mismatch rather than an error.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > _BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


# Computed once at module load so the first failed login is not measurably
# slower than later ones. UserStore.verify() checks against this when the
# student id does not exist.
_DUMMY_HASH: str = hash_password("portal_timing_dummy")


def burn_password_check(plain: str) -> None:
    """Run one bcrypt comparison against the dummy hash and discard the result."""
    verify_password(plain, _DUMMY_HASH)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(
    user_id: int,
    student_id: str,
    expire_seconds: int = 0,
    issued_at: datetime | None = None,
) -> str:
    """Encode a signed JWT naming the user, valid for a fixed window.

    Args:
        user_id:        Internal users.id; AuthService.verify() resolves it.
        student_id:     Public student identifier, stored as the subject claim.
        expire_seconds: Validity window in seconds. 0 (default) uses
                        Settings.token_expire_seconds (24 hours).
        issued_at:      Issue time. Defaults to now; tests pass a time in the
                        past to mint an already-expired token.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    iat = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": student_id,
        "user_id": user_id,
        "iat": iat,
        "exp": iat + timedelta(seconds=duration),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure.

    Signature mismatch, malformed input, and an elapsed exp claim all come back
    as None. The caller cannot tell them apart, and neither can a client.
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if not isinstance(payload.get("user_id"), int):
        return None
    return payload
