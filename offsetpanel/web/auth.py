"""Session authentication for the OffsetPanel dashboard.

Users sign in with a mobile number and a one-time code issued by the pricing
API. The verified user (including its API ``accessToken``) is stored in a
server-side session referenced by the ``session`` cookie; the API token slot
of the browser context is kept in sync with that session on every request.
"""

from __future__ import annotations

import json
import logging
import secrets
from datetime import datetime, timedelta
from typing import Any

import redis
from fastapi import Cookie, HTTPException, Request

from offsetpanel.api.tokens import TokenStore, get_redis_client
from offsetpanel.config import get_config
from offsetpanel.models import SessionUser, WebSession

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"
PENDING_COOKIE = "otp_pending"

# Pending OTP exchanges live for the resend window plus a margin
PENDING_EXPIRY_SECONDS = 15 * 60

_DIGITS = str.maketrans("۰۱۲۳۴۵۶۷۸۹٠١٢٣٤٥٦٧٨٩", "01234567890123456789")

# In-memory fallback for development when Redis is missing
_memory_sessions: dict[str, dict[str, Any]] = {}

_redis_client: redis.Redis | None = None


def session_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = get_redis_client(get_config().auth.redis_url)
    return _redis_client


def reset_redis_client() -> None:
    global _redis_client
    _redis_client = None


def session_expiry_seconds() -> int:
    return get_config().auth.session_expiry_hours * 3600


def _put(key: str, data: dict[str, Any], ttl_seconds: int) -> None:
    data = dict(data)
    data["expires_at"] = (datetime.utcnow() + timedelta(seconds=ttl_seconds)).isoformat()
    try:
        session_redis().setex(key, ttl_seconds, json.dumps(data))
    except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError):
        logger.warning("Redis unavailable, using in-memory session storage")
        _memory_sessions[key] = data


def _get(key: str) -> dict[str, Any] | None:
    try:
        raw = session_redis().get(key)
    except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError):
        data = _memory_sessions.get(key)
        if data is None:
            return None
        if datetime.utcnow() > datetime.fromisoformat(data["expires_at"]):
            del _memory_sessions[key]
            return None
        return data

    if not raw:
        return None
    try:
        data = json.loads(raw)
        if datetime.utcnow() > datetime.fromisoformat(data["expires_at"]):
            _delete(key)
            return None
        return data
    except (json.JSONDecodeError, KeyError, ValueError):
        # Invalid session data
        _delete(key)
        return None


def _delete(key: str) -> None:
    try:
        session_redis().delete(key)
    except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError):
        pass
    _memory_sessions.pop(key, None)


# Input validation


def normalize_digits(value: str) -> str:
    """Strip whitespace and map Persian/Arabic digits to ASCII."""
    return "".join(value.split()).translate(_DIGITS)


def validate_mobile(mobile: str) -> str | None:
    """Return the normalized mobile number, or None when it is not 10 digits.

    A leading ``0`` (``09123456789``) is dropped.
    """
    mobile = normalize_digits(mobile)
    length = get_config().auth.mobile_length
    if len(mobile) == length + 1 and mobile.startswith("0"):
        mobile = mobile[1:]
    if len(mobile) != length or not mobile.isdigit():
        return None
    return mobile


def validate_otp(otp: str) -> str | None:
    otp = normalize_digits(otp)
    if len(otp) != get_config().auth.otp_length or not otp.isdigit():
        return None
    return otp


# Pending OTP exchanges


def store_pending_login(exchange_token: str, mobile: str, otp: str | None = None) -> str:
    """Remember the exchange token issued by ``send-otp``; returns its id."""
    pending_id = secrets.token_urlsafe(24)
    _put(
        f"otp:{pending_id}",
        {
            "token": exchange_token,
            "mobile": mobile,
            "otp": otp,
            "sent_at": datetime.utcnow().isoformat(),
        },
        PENDING_EXPIRY_SECONDS,
    )
    return pending_id


def get_pending_login(pending_id: str | None) -> dict[str, Any] | None:
    if not pending_id:
        return None
    return _get(f"otp:{pending_id}")


def clear_pending_login(pending_id: str | None) -> None:
    if pending_id:
        _delete(f"otp:{pending_id}")


def resend_wait_seconds(pending: dict[str, Any]) -> int:
    """Seconds left before a new code may be requested for ``pending``."""
    sent_at = datetime.fromisoformat(pending["sent_at"])
    elapsed = (datetime.utcnow() - sent_at).total_seconds()
    return max(0, int(get_config().auth.otp_resend_seconds - elapsed))


# Sessions


def build_session_user(user: dict[str, Any], access_token: str) -> SessionUser:
    """Session user from the ``verify-otp`` payload."""
    return SessionUser(
        id=str(user.get("id", "")),
        mobile=user.get("mobile"),
        verified_at=user.get("verified_at"),
        panel_id=user.get("panel_id"),
        name=user.get("name"),
        accessToken=access_token,
    )


def create_session(user: SessionUser) -> str:
    """Create a new session for a verified user.

    Returns:
        str: Session token
    """
    session_token = secrets.token_urlsafe(32)
    _put(
        f"session:{session_token}",
        {
            "user": user.model_dump(by_alias=True),
            "created_at": datetime.utcnow().isoformat(),
        },
        session_expiry_seconds(),
    )
    logger.info("Session created for user %s", user.id)
    return session_token


def validate_session(session_token: str | None) -> dict[str, Any] | None:
    """Validate session token and return session data if valid."""
    if not session_token:
        return None
    return _get(f"session:{session_token}")


def get_web_session(session_token: str | None) -> WebSession:
    data = validate_session(session_token)
    if not data or not data.get("user"):
        return WebSession(status="unauthenticated")
    return WebSession(status="authenticated", user=SessionUser.model_validate(data["user"]))


def logout(session_token: str | None) -> None:
    """Logout user by invalidating session."""
    if session_token:
        _delete(f"session:{session_token}")


def disabled_auth_session() -> WebSession:
    return WebSession(
        status="authenticated",
        user=SessionUser(id="default_user", accessToken=""),
    )


def require_auth(request: Request, session: str | None = Cookie(default=None)) -> WebSession:
    """Dependency to require authentication on routes.

    Raises:
        HTTPException: If not authenticated (redirects to login)
    """
    if get_config().auth.auth_disabled:
        return disabled_auth_session()

    web_session = get_web_session(session)
    if web_session.status != "authenticated":
        raise HTTPException(
            status_code=307,
            detail="Authentication required",
            headers={"Location": "/login"},
        )
    return web_session


def sync_token(web_session: WebSession, token_store: TokenStore) -> None:
    """Mirror the session into the API token slot.

    Authenticated: the slot holds exactly ``user.accessToken``, unless the API
    already rejected that token for this context.
    Unauthenticated: the slot is cleared. ``loading`` leaves it untouched.
    """
    if web_session.status == "authenticated" and web_session.user is not None:
        token = web_session.user.access_token
        if token_store.get_token() != token:
            if token and token_store.rejected_token() == token:
                logger.debug("Session token was rejected by the API, not restoring it")
            else:
                token_store.set_token(token)
    elif web_session.status == "unauthenticated":
        token_store.clear_token()
