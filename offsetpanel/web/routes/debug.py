"""Authentication debug routes.

Shows whether the browser session and the API token slot agree. Never
exposes the full token.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from offsetpanel.api.client import token_preview
from offsetpanel.api.services import PriceService
from offsetpanel.models import WebSession
from offsetpanel.web.auth import require_auth
from offsetpanel.web.dependencies import get_price_service

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/auth")
async def auth_debug(
    session: WebSession = Depends(require_auth),
    prices: PriceService = Depends(get_price_service),
):
    user = session.user
    session_token = user.access_token if user is not None else None
    stored = prices.client.get_stored_token()
    return {
        "session": {
            "status": session.status,
            "user_id": user.id if user is not None else None,
            "mobile": user.mobile if user is not None else None,
            "panel_id": user.panel_id if user is not None else None,
            "token_preview": token_preview(session_token),
        },
        "client": prices.auth_status(),
        "in_sync": stored == session_token,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
