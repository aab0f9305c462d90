"""Unit tests for cache/store.py -- the offline demo login cache.

Covers:
- weak_hash() reproduces the browser demo's 32-bit string hash
- register/login/logout round trip with a persisted session
- duplicate student id and email rejected
- login failures share one message
"""

import pytest

from cache.store import OfflineAuthCache, OfflineAuthError, weak_hash


@pytest.fixture
def cache(tmp_path):
    c = OfflineAuthCache(tmp_path / "offline.db")
    yield c
    c.close()


class TestWeakHash:
    @pytest.mark.parametrize(
        "password, expected",
        [
            ("", "0"),
            ("a", "97"),
            ("ab", "3105"),
            ("password123", "1403730359"),
        ],
    )
    def test_known_values(self, password, expected):
        assert weak_hash(password) == expected

    def test_wraps_to_signed_32_bit(self):
        value = int(weak_hash("a much longer password that overflows"))
        assert -(2**31) <= value < 2**31

    def test_not_the_plaintext(self):
        assert weak_hash("secret") != "secret"


class TestRegisterAndLogin:
    def test_register_starts_session(self, cache):
        session = cache.register("99999", "Ann", "ann@u.edu", "pw12345")
        assert session["token"].startswith("demo-token-")
        assert session["user"]["student_id"] == "99999"
        assert "password_hash" not in session["user"]
        assert cache.is_authenticated()

    def test_login_after_register(self, cache):
        cache.register("99999", "Ann", "ann@u.edu", "pw12345", program="Physics", year=2)
        cache.logout()
        session = cache.login("99999", "pw12345")
        assert session["user"]["program"] == "Physics"
        assert session["user"]["year"] == 2

    def test_wrong_password_and_unknown_id_same_message(self, cache):
        cache.register("99999", "Ann", "ann@u.edu", "pw12345")
        with pytest.raises(OfflineAuthError) as wrong:
            cache.login("99999", "nope")
        with pytest.raises(OfflineAuthError) as unknown:
            cache.login("00000", "pw12345")
        assert str(wrong.value) == str(unknown.value)

    def test_duplicate_student_id(self, cache):
        cache.register("99999", "Ann", "ann@u.edu", "pw12345")
        with pytest.raises(OfflineAuthError, match="Student ID"):
            cache.register("99999", "Other", "other@u.edu", "pw")

    def test_duplicate_email(self, cache):
        cache.register("99999", "Ann", "ann@u.edu", "pw12345")
        with pytest.raises(OfflineAuthError, match="Email"):
            cache.register("88888", "Other", "ann@u.edu", "pw")


class TestSession:
    def test_no_session_initially(self, cache):
        assert cache.current_token() is None
        assert cache.current_user() is None
        assert not cache.is_authenticated()

    def test_logout_clears_session(self, cache):
        cache.register("99999", "Ann", "ann@u.edu", "pw12345")
        cache.logout()
        assert cache.current_user() is None
        assert not cache.is_authenticated()

    def test_session_survives_reopen(self, tmp_path):
        path = tmp_path / "offline.db"
        first = OfflineAuthCache(path)
        first.register("99999", "Ann", "ann@u.edu", "pw12345")
        first.close()

        second = OfflineAuthCache(path)
        try:
            assert second.current_user()["name"] == "Ann"
        finally:
            second.close()

    def test_unreadable_session_user_is_none(self, cache):
        cache.register("99999", "Ann", "ann@u.edu", "pw12345")
        cache._conn.execute("UPDATE offline_session SET user_json = '{broken' WHERE id = 1")
        cache._conn.commit()
        assert cache.current_user() is None


class TestSeedDefaults:
    def test_seeds_demo_student_once(self, cache):
        assert cache.seed_defaults() == 1
        assert cache.seed_defaults() == 0
        assert cache.login("12345", "password123")["user"]["name"] == "John Doe"

    def test_no_seed_when_users_exist(self, cache):
        cache.register("99999", "Ann", "ann@u.edu", "pw12345")
        assert cache.seed_defaults() == 0
        with pytest.raises(OfflineAuthError):
            cache.login("12345", "password123")
