"""Unit tests for auth/tokens.py -- password hashing and JWT encode/decode.

Covers:
- bcrypt round trip, salting, and empty / wrong password rejection
- A fresh token decodes to its user_id and student_id
- Expired, foreign-signed, malformed, and claim-less tokens decode to None
"""

import logging
from datetime import datetime, timedelta, timezone

from jose import jwt

from auth import tokens
from auth.tokens import create_access_token, decode_access_token, hash_password, verify_password


class TestPasswordHashing:
    def test_hash_verifies_against_original(self):
        hashed = hash_password("pw12345")
        assert verify_password("pw12345", hashed)

    def test_hash_is_salted(self):
        assert hash_password("pw12345") != hash_password("pw12345")

    def test_hash_is_not_plaintext(self):
        assert "pw12345" not in hash_password("pw12345")

    def test_wrong_password_rejected(self):
        hashed = hash_password("pw12345")
        assert not verify_password("pw1234", hashed)
        assert not verify_password("PW12345", hashed)

    def test_empty_password_rejected(self):
        assert not verify_password("", hash_password("pw12345"))

    def test_malformed_hash_is_a_mismatch(self):
        assert not verify_password("pw12345", "not-a-bcrypt-hash")

    def test_password_over_72_bytes_never_matches(self, caplog):
        hashed = hash_password("x" * 72)
        with caplog.at_level(logging.WARNING, logger="portal.auth"):
            assert not verify_password("x" * 80, hashed)
        assert "not a valid bcrypt hash" not in caplog.text


class TestAccessTokens:
    def test_fresh_token_round_trips(self):
        token = create_access_token(7, "12345")
        payload = decode_access_token(token)
        assert payload is not None
        assert payload["user_id"] == 7
        assert payload["sub"] == "12345"

    def test_default_expiry_is_24_hours(self):
        before = datetime.now(timezone.utc)
        payload = decode_access_token(create_access_token(7, "12345"))
        window = payload["exp"] - payload["iat"]
        assert window == 24 * 60 * 60
        assert payload["exp"] >= int((before + timedelta(hours=24)).timestamp()) - 1

    def test_expired_token_rejected(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=25)
        token = create_access_token(7, "12345", issued_at=issued)
        assert decode_access_token(token) is None

    def test_token_just_inside_window_accepted(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=23, minutes=59)
        token = create_access_token(7, "12345", issued_at=issued)
        assert decode_access_token(token) is not None

    def test_token_signed_with_other_secret_rejected(self):
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        forged = jwt.encode({"sub": "12345", "user_id": 7, "exp": exp}, "x" * 64, algorithm="HS256")
        assert decode_access_token(forged) is None

    def test_token_without_user_id_rejected(self):
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode({"sub": "12345", "exp": exp}, tokens._settings.secret_key, algorithm="HS256")
        assert decode_access_token(token) is None

    def test_garbage_rejected(self):
        assert decode_access_token("not.a.jwt") is None
        assert decode_access_token("") is None
