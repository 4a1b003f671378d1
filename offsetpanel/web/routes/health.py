"""Health check API routes.

Provides endpoints for monitoring application health and upstream API
reachability.
"""

import httpx
from fastapi import APIRouter, Depends, status

from offsetpanel.api.client import ApiClient
from offsetpanel.web.dependencies import get_api_client

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health_check(client: ApiClient = Depends(get_api_client)):
    """Check application health.

    Any HTTP answer from the pricing API counts as reachable.
    """
    try:
        response = await client.http.get("/", timeout=5.0)
        return {"status": "ok", "api": "reachable", "api_status": response.status_code}
    except httpx.RequestError as e:
        return {
            "status": "degraded",
            "api": "unreachable",
            "detail": str(e),
        }
