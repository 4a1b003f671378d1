"""Authentication routes for the OffsetPanel dashboard.

Two-step OTP login against the pricing API.

Routes:
- GET  /login         - Mobile form, or code form while an OTP is pending
- POST /login/otp     - Request a code for a mobile number
- POST /login/verify  - Verify the code and start a session
- POST /login/reset   - Drop the pending code (change number)
- GET  /logout        - Logout and clear session
- GET  /favicon.ico   - Return empty favicon (204)
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Cookie, Depends, Form, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse

from offsetpanel.api.client import ApiClient
from offsetpanel.api.errors import ApiError
from offsetpanel.api.services import AuthService
from offsetpanel.api.tokens import MemoryTokenStore, RedisTokenStore
from offsetpanel.config import get_config
from offsetpanel.i18n import translate
from offsetpanel.web.auth import (
    PENDING_COOKIE,
    SESSION_COOKIE,
    build_session_user,
    clear_pending_login,
    create_session,
    get_pending_login,
    get_web_session,
    resend_wait_seconds,
    session_expiry_seconds,
    session_redis,
    store_pending_login,
    sync_token,
    validate_mobile,
    validate_otp,
)
from offsetpanel.web.auth import logout as auth_logout
from offsetpanel.web.dependencies import get_api_client, get_templates

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["authentication"])

_ERROR_KEYS = {
    "invalid_mobile": "login.invalid_mobile",
    "invalid_otp": "login.invalid_otp",
    "expired": "login.expired",
}


def _render_login(request: Request, templates, locale: str, error: str | None, pending=None):
    config = get_config()
    context = {
        "request": request,
        "locale": locale,
        "error": error,
        "pending": pending,
        "otp_length": config.auth.otp_length,
        "mobile_length": config.auth.mobile_length,
        "resend_wait": resend_wait_seconds(pending) if pending else 0,
        "show_dev_otp": config.environment != "production",
    }
    template = "otp.html" if pending else "login.html"
    return templates.TemplateResponse(request, template, context)


@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    error: str | None = None,
    otp_pending: str | None = Cookie(default=None, alias=PENDING_COOKIE),
    templates=Depends(get_templates),
):
    """Login page; shows the code form while an OTP exchange is pending."""
    locale = get_config().locale.default_locale
    message = translate(_ERROR_KEYS[error], locale) if error in _ERROR_KEYS else None
    return _render_login(request, templates, locale, message, get_pending_login(otp_pending))


@router.post("/login/otp")
async def request_otp(
    request: Request,
    mobile: str = Form(...),
    otp_pending: str | None = Cookie(default=None, alias=PENDING_COOKIE),
    client: ApiClient = Depends(get_api_client),
    templates=Depends(get_templates),
):
    """Ask the API to send a code to ``mobile``.

    The exchange token is kept server-side under the ``otp_pending`` cookie.
    A resend inside the wait window is ignored.
    """
    normalized = validate_mobile(mobile)
    if normalized is None:
        return RedirectResponse(url="/login?error=invalid_mobile", status_code=302)

    pending = get_pending_login(otp_pending)
    if pending and pending["mobile"] == normalized and resend_wait_seconds(pending) > 0:
        return RedirectResponse(url="/login", status_code=302)

    service = AuthService(client.bind(MemoryTokenStore()))
    try:
        result = await service.request_otp(normalized)
    except ApiError as exc:
        locale = get_config().locale.default_locale
        return _render_login(request, templates, locale, exc.message)

    clear_pending_login(otp_pending)
    pending_id = store_pending_login(result.token, normalized, otp=result.otp)
    logger.info("otp_requested", is_new_user=result.is_new_user)

    response = RedirectResponse(url="/login", status_code=302)
    response.set_cookie(
        key=PENDING_COOKIE,
        value=pending_id,
        httponly=True,
        max_age=15 * 60,
        samesite="lax",
    )
    return response


@router.post("/login/verify")
async def verify_otp(
    request: Request,
    otp: str = Form(...),
    otp_pending: str | None = Cookie(default=None, alias=PENDING_COOKIE),
    client: ApiClient = Depends(get_api_client),
    templates=Depends(get_templates),
):
    """Verify the code and start a session holding the API access token."""
    pending = get_pending_login(otp_pending)
    if pending is None:
        response = RedirectResponse(url="/login?error=expired", status_code=302)
        response.delete_cookie(PENDING_COOKIE)
        return response

    locale = get_config().locale.default_locale
    code = validate_otp(otp)
    if code is None:
        return _render_login(
            request, templates, locale, translate("login.invalid_otp", locale), pending
        )

    service = AuthService(client.bind(MemoryTokenStore()))
    try:
        result = await service.verify_otp(pending["token"], code)
    except ApiError as exc:
        return _render_login(request, templates, locale, exc.message, pending)

    user = build_session_user(result.user, result.token)
    session_token = create_session(user)
    clear_pending_login(otp_pending)

    web_session = get_web_session(session_token)
    sync_token(
        web_session,
        RedisTokenStore(
            session_token, redis_client=session_redis(), ttl_seconds=session_expiry_seconds()
        ),
    )
    logger.info("login_verified", user_id=user.id)

    response = RedirectResponse(url=f"/{locale}/prices", status_code=302)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_token,
        httponly=True,
        max_age=session_expiry_seconds(),
        samesite="lax",
    )
    response.delete_cookie(PENDING_COOKIE)
    return response


@router.post("/login/reset")
async def reset_login(otp_pending: str | None = Cookie(default=None, alias=PENDING_COOKIE)):
    """Forget the pending code so another number can be entered."""
    clear_pending_login(otp_pending)
    response = RedirectResponse(url="/login", status_code=302)
    response.delete_cookie(PENDING_COOKIE)
    return response


@router.get("/logout")
async def logout(
    session: str | None = Cookie(default=None),
    client: ApiClient = Depends(get_api_client),
):
    """Logout and clear session.

    The upstream logout is best effort; the local session and the token
    slot are always cleared.
    """
    web_session = get_web_session(session)
    if session:
        store = RedisTokenStore(
            session, redis_client=session_redis(), ttl_seconds=session_expiry_seconds()
        )
        if web_session.user is not None:
            try:
                await AuthService(client.bind(store)).logout(web_session.user.access_token)
            except ApiError as exc:
                logger.warning("upstream_logout_failed", error=exc.message)
        auth_logout(session)
        store.clear_token()

    response = RedirectResponse(url="/login", status_code=302)
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/favicon.ico", include_in_schema=False)
async def favicon():
    """Return empty favicon to prevent 404s."""
    return Response(status_code=204)
