"""Pricing API services: price tables, cooperators and OTP authentication."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from offsetpanel.api.client import ApiClient, token_preview
from offsetpanel.api.resource import Resource, list_payload, list_result
from offsetpanel.categories import category_for
from offsetpanel.models import FilterState, OtpRequestResult, OtpVerifyResult, PriceRecord

PRICE_BASE = "/client/offset"
AUTH_BASE = "/auth"


def build_price_params(category: str, filters: FilterState | None) -> dict[str, Any]:
    """Query parameters for a price list request.

    Only selectors active for ``category`` contribute; box type and bindery
    type share the ``type`` parameter and are never both active.
    """
    params: dict[str, Any] = {}
    if filters is None:
        return params
    meta = category_for(category)
    if filters.cooperator:
        params["cooperator"] = filters.cooperator
    if meta.needs_range_selector and filters.range_id:
        params["range_id"] = filters.range_id
    if meta.needs_box_type_selector and filters.box_type:
        params["type"] = filters.box_type
    elif meta.needs_bindery_type_selector and filters.bindery_type:
        params["type"] = filters.bindery_type
    return params


class PriceService:
    """Price tables of every category under ``/client/offset``."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.resource = Resource(client, PRICE_BASE)

    async def get_price_table(
        self, category: str, filters: FilterState | None = None
    ) -> list[PriceRecord]:
        response = await self.resource.get(
            f"/{category}", params=build_price_params(category, filters)
        )
        return list_result(response, f"{category} prices")

    async def get_circulation_ranges(self, category: str) -> list[dict[str, Any]]:
        return list_result(
            await self.resource.get(f"/{category}/circulation_range"), "circulation ranges"
        )

    async def get_box_types(self, category: str = "boxes") -> list[dict[str, Any]]:
        return list_result(await self.resource.get(f"/{category}/box-types"), "box types")

    async def get_bindery_types(self, category: str = "binderies") -> list[dict[str, Any]]:
        return list_result(await self.resource.get(f"/{category}/bindery_types"), "bindery types")

    async def create_price_entry(self, category: str, data: PriceRecord) -> Any:
        return await self.resource.post(f"/{category}", data)

    async def update_price_entry(self, category: str, entry_id: Any, data: PriceRecord) -> Any:
        return await self.resource.put(f"/{category}/{entry_id}", data)

    async def delete_price_entry(self, category: str, entry_id: Any) -> Any:
        return await self.resource.delete(f"/{category}/{entry_id}")

    async def bulk_update_prices(self, category: str, entries: list[PriceRecord]) -> Any:
        return await self.resource.put(f"/{category}/bulk", {"entries": entries})

    def auth_status(self) -> dict[str, Any]:
        token = self.client.get_stored_token()
        return {
            "is_authenticated": self.client.is_authenticated(),
            "has_token": bool(token),
            "token_preview": token_preview(token),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class CooperatorService:
    """Cooperator reference lists."""

    def __init__(self, client: ApiClient):
        self.resource = Resource(client, PRICE_BASE)

    async def get_cooperators(self, category: str = "papers") -> list[dict[str, Any]]:
        return list_result(await self.resource.get(f"/{category}"), "cooperators")


class AuthService:
    """Two-step OTP login against ``/auth``."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.resource = Resource(client, AUTH_BASE)

    async def request_otp(self, mobile: str) -> OtpRequestResult:
        response = await self.resource.post("/send-otp", {"mobile": mobile})
        data = response.get("data") or {}
        return OtpRequestResult(
            token=data["token"],
            otp=None if data.get("otp") is None else str(data["otp"]),
            is_new_user=bool(data.get("is_new_user")),
            message=response.get("message"),
        )

    async def verify_otp(self, token: str, otp: str) -> OtpVerifyResult:
        """Exchange the OTP token and code for a session token.

        The session token is stored in the client's token slot.
        """
        response = await self.resource.with_token("POST", "/verify-otp", token, {"otp": otp})
        data = response.get("data") or {}
        self.client.set_auth_token(data["token"])
        return OtpVerifyResult(
            user=data.get("user") or {},
            token=data["token"],
            message=response.get("message"),
        )

    async def get_profile(self, token: str | None = None) -> Any:
        if token:
            response = await self.resource.with_token("GET", "", token)
        else:
            response = await self.resource.get()
        return list_payload(response)

    async def logout(self, token: str | None = None) -> None:
        """Log out upstream; the stored token is cleared even if that fails."""
        try:
            if token:
                await self.resource.with_token("DELETE", "", token)
            else:
                await self.resource.delete()
        finally:
            self.client.clear_stored_token()

    def is_authenticated(self) -> bool:
        return self.client.is_authenticated()

    def get_token(self) -> str | None:
        return self.client.get_stored_token()

    def set_token(self, token: str) -> None:
        self.client.set_auth_token(token)

    def clear_auth(self) -> None:
        self.client.clear_stored_token()
