"""Shared dependencies for OffsetPanel web routes.

Dependencies are injected using FastAPI's Depends() system.

Usage:
    from fastapi import Depends
    from offsetpanel.web.dependencies import get_price_service

    @router.get("/page")
    async def page(
        request: Request,
        prices: PriceService = Depends(get_price_service),
    ):
        ...
"""

from __future__ import annotations

from pathlib import Path

from fastapi import Cookie, Depends, HTTPException, Request
from fastapi.templating import Jinja2Templates

from offsetpanel.api.client import ApiClient
from offsetpanel.api.services import AuthService, CooperatorService, PriceService
from offsetpanel.api.tokens import RedisTokenStore, TokenStore
from offsetpanel.config import get_config
from offsetpanel.i18n import LOCALES, direction, translate
from offsetpanel.web.auth import (
    PENDING_COOKIE,
    get_web_session,
    session_expiry_seconds,
    session_redis,
    sync_token,
)

# Global singleton for templates
_templates: Jinja2Templates | None = None


def get_templates() -> Jinja2Templates:
    """Get Jinja2Templates instance for rendering HTML templates.

    This is a singleton - the templates directory is only initialized once.
    ``t`` (translate) and ``direction`` are available in every template.
    """
    global _templates
    if _templates is None:
        _templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
        _templates.env.globals["t"] = translate
        _templates.env.globals["direction"] = direction
    return _templates


def get_locale(lang: str) -> str:
    """Path locale of a localized page; unsupported locales are 404."""
    if lang not in LOCALES:
        raise HTTPException(status_code=404, detail=f"Unsupported locale: {lang}")
    return lang


def get_api_client(request: Request) -> ApiClient:
    """Application-wide API client created by the app lifespan."""
    client = getattr(request.app.state, "api_client", None)
    if client is None:
        client = ApiClient()
        request.app.state.api_client = client
    return client


def get_token_store(
    session: str | None = Cookie(default=None),
    otp_pending: str | None = Cookie(default=None, alias=PENDING_COOKIE),
) -> TokenStore:
    """Token slot of this browser context, kept in sync with its session."""
    context_id = session or otp_pending or "anonymous"
    store = RedisTokenStore(context_id, redis_client=session_redis(), ttl_seconds=session_expiry_seconds())
    if session or not get_config().auth.auth_disabled:
        sync_token(get_web_session(session), store)
    return store


def get_bound_client(
    client: ApiClient = Depends(get_api_client),
    token_store: TokenStore = Depends(get_token_store),
) -> ApiClient:
    return client.bind(token_store)


def get_price_service(client: ApiClient = Depends(get_bound_client)) -> PriceService:
    return PriceService(client)


def get_cooperator_service(client: ApiClient = Depends(get_bound_client)) -> CooperatorService:
    return CooperatorService(client)


def get_auth_service(client: ApiClient = Depends(get_bound_client)) -> AuthService:
    return AuthService(client)
