"""Tests for offsetpanel.web.auth - Sessions, OTP input and token sync."""

from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from offsetpanel.api.tokens import MemoryTokenStore
from offsetpanel.config import reset_config
from offsetpanel.models import SessionUser, WebSession
from offsetpanel.web import auth


class TestInputValidation:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("9123456789", "9123456789"),
            ("09123456789", "9123456789"),
            ("۰۹۱۲۳۴۵۶۷۸۹", "9123456789"),
            (" 912 345 6789 ", "9123456789"),
        ],
    )
    def test_valid_mobile(self, raw, expected):
        assert auth.validate_mobile(raw) == expected

    @pytest.mark.parametrize("raw", ["", "912345678", "91234567890", "91234abcde"])
    def test_invalid_mobile(self, raw):
        assert auth.validate_mobile(raw) is None

    def test_otp_must_be_six_digits(self):
        assert auth.validate_otp("123456") == "123456"
        assert auth.validate_otp("۱۲۳۴۵۶") == "123456"
        assert auth.validate_otp("12345") is None
        assert auth.validate_otp("12345a") is None


class TestSessions:
    def test_create_and_validate_session(self):
        user = auth.build_session_user(
            {"id": 5, "mobile": "9123456789", "panel_id": 2}, "api-token-123"
        )
        token = auth.create_session(user)

        web_session = auth.get_web_session(token)

        assert web_session.status == "authenticated"
        assert web_session.user.id == "5"
        assert web_session.user.access_token == "api-token-123"
        assert web_session.user.panel_id == 2

    def test_session_stored_with_camel_case_token(self):
        token = auth.create_session(SessionUser(id="5", accessToken="abc"))

        data = auth.validate_session(token)

        assert data["user"]["accessToken"] == "abc"

    def test_unknown_session_is_unauthenticated(self):
        assert auth.get_web_session("nope").status == "unauthenticated"
        assert auth.get_web_session(None).status == "unauthenticated"

    def test_expired_session(self):
        token = auth.create_session(SessionUser(id="5", accessToken="abc"))
        key = f"session:{token}"
        auth._memory_sessions[key]["expires_at"] = (
            datetime.utcnow() - timedelta(seconds=1)
        ).isoformat()

        assert auth.validate_session(token) is None
        assert key not in auth._memory_sessions

    def test_logout_removes_session(self):
        token = auth.create_session(SessionUser(id="5", accessToken="abc"))

        auth.logout(token)

        assert auth.validate_session(token) is None


class TestPendingLogin:
    def test_store_and_clear(self):
        pending_id = auth.store_pending_login("exchange", "9123456789", otp="123456")

        pending = auth.get_pending_login(pending_id)
        assert pending["token"] == "exchange"
        assert pending["mobile"] == "9123456789"
        assert pending["otp"] == "123456"

        auth.clear_pending_login(pending_id)
        assert auth.get_pending_login(pending_id) is None

    def test_resend_wait(self):
        pending = {"sent_at": datetime.utcnow().isoformat()}
        assert 0 < auth.resend_wait_seconds(pending) <= 120

        old = {"sent_at": (datetime.utcnow() - timedelta(minutes=5)).isoformat()}
        assert auth.resend_wait_seconds(old) == 0


class TestRequireAuth:
    def test_redirects_to_login(self):
        with pytest.raises(HTTPException) as exc_info:
            auth.require_auth(request=None, session=None)

        assert exc_info.value.status_code == 307
        assert exc_info.value.headers["Location"] == "/login"

    def test_returns_session(self):
        token = auth.create_session(SessionUser(id="5", accessToken="abc"))

        web_session = auth.require_auth(request=None, session=token)

        assert web_session.user.id == "5"

    def test_disabled_auth(self, monkeypatch):
        monkeypatch.setenv("OFFSETPANEL_AUTH_DISABLED", "true")
        reset_config()

        web_session = auth.require_auth(request=None, session=None)

        assert web_session.status == "authenticated"
        assert web_session.user.id == "default_user"


class TestSyncToken:
    def test_authenticated_sets_token(self):
        store = MemoryTokenStore()
        web_session = WebSession(
            status="authenticated", user=SessionUser(id="5", accessToken="abc")
        )

        auth.sync_token(web_session, store)

        assert store.get_token() == "abc"

    def test_authenticated_replaces_stale_token(self):
        store = MemoryTokenStore("old")
        web_session = WebSession(
            status="authenticated", user=SessionUser(id="5", accessToken="new")
        )

        auth.sync_token(web_session, store)

        assert store.get_token() == "new"

    def test_unauthenticated_clears_token(self):
        store = MemoryTokenStore("abc")

        auth.sync_token(WebSession(status="unauthenticated"), store)

        assert store.get_token() is None

    def test_loading_leaves_token(self):
        store = MemoryTokenStore("abc")

        auth.sync_token(WebSession(status="loading"), store)

        assert store.get_token() == "abc"

    def test_rejected_token_is_not_restored(self):
        store = MemoryTokenStore("abc")
        store.reject_token()
        web_session = WebSession(
            status="authenticated", user=SessionUser(id="5", accessToken="abc")
        )

        auth.sync_token(web_session, store)

        assert store.get_token() is None

    def test_new_token_replaces_rejected_one(self):
        store = MemoryTokenStore("abc")
        store.reject_token()
        web_session = WebSession(
            status="authenticated", user=SessionUser(id="5", accessToken="renewed")
        )

        auth.sync_token(web_session, store)

        assert store.get_token() == "renewed"
        assert store.rejected_token() is None
