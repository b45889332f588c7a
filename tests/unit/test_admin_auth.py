"""Tests for admin cookie-based session authentication."""

import os

from sceneit_engine.admin.auth import (
    check_password,
    create_session_cookie,
    verify_session_cookie,
)
from sceneit_engine.common.security import hash_ip


class TestSessionCookie:
    """Cookie signing and verification."""

    def setup_method(self):
        os.environ["SCENEIT_SECRET_KEY"] = "test-secret-key"
        os.environ["SCENEIT_ADMIN_PASSWORD"] = "hunter2"
        os.environ["SCENEIT_DB_URL"] = "sqlite+aiosqlite://"
        from sceneit_engine.common.config import get_settings
        get_settings.cache_clear()

    def teardown_method(self):
        from sceneit_engine.common.config import get_settings
        get_settings.cache_clear()

    def _set_password(self, password: str):
        os.environ["SCENEIT_ADMIN_PASSWORD"] = password
        from sceneit_engine.common.config import get_settings
        get_settings.cache_clear()

    def test_create_and_verify(self):
        payload = verify_session_cookie(create_session_cookie())
        assert payload is not None
        assert payload["role"] == "admin"

    def test_invalid_cookie(self):
        assert verify_session_cookie("garbage-value") is None

    def test_tampered_cookie(self):
        cookie = create_session_cookie()
        tampered = "AAAA" + cookie[4:]
        assert verify_session_cookie(tampered) is None

    def test_password_change_invalidates(self):
        cookie = create_session_cookie()
        self._set_password("new-password")
        assert verify_session_cookie(cookie) is None

    def test_password_removed_invalidates(self):
        cookie = create_session_cookie()
        self._set_password("")
        assert verify_session_cookie(cookie) is None


class TestCheckPassword:
    def setup_method(self):
        os.environ["SCENEIT_SECRET_KEY"] = "test-secret-key"
        os.environ["SCENEIT_ADMIN_PASSWORD"] = "hunter2"
        from sceneit_engine.common.config import get_settings
        get_settings.cache_clear()

    def teardown_method(self):
        from sceneit_engine.common.config import get_settings
        get_settings.cache_clear()

    def test_correct(self):
        assert check_password("hunter2") is True

    def test_wrong(self):
        assert check_password("hunter3") is False
        assert check_password("") is False
        assert check_password(None) is False

    def test_unset_password_fails_closed(self):
        os.environ["SCENEIT_ADMIN_PASSWORD"] = ""
        from sceneit_engine.common.config import get_settings
        get_settings.cache_clear()
        assert check_password("") is False
        assert check_password("anything") is False


class TestHashIp:
    def test_stable(self):
        assert hash_ip("203.0.113.7") == hash_ip("203.0.113.7")

    def test_distinct(self):
        assert hash_ip("203.0.113.7") != hash_ip("203.0.113.8")

    def test_base36(self):
        assert hash_ip("") == "0"
        # "a" hashes to 97
        assert hash_ip("a") == "2p"
        assert set(hash_ip("192.168.0.1")) <= set("0123456789abcdefghijklmnopqrstuvwxyz")
