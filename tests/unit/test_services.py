"""Tests for the pricing API services."""

from __future__ import annotations

import json

import httpx
import pytest

from offsetpanel.api.client import ApiClient
from offsetpanel.api.errors import ApiError, ErrorType
from offsetpanel.api.services import (
    AuthService,
    CooperatorService,
    PriceService,
    build_price_params,
)
from offsetpanel.api.tokens import MemoryTokenStore
from offsetpanel.models import FilterState

BASE_URL = "http://pricing.test/api/v1"


class Recorder:
    """Mock transport handler recording every request."""

    def __init__(self, responses=None):
        self.requests: list[httpx.Request] = []
        self.responses = responses or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path.removeprefix("/api/v1"))
        status_code, payload = self.responses.get(key, (200, {"data": []}))
        return httpx.Response(status_code, json=payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_client(recorder: Recorder, token: str | None = None) -> ApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(recorder), base_url=BASE_URL)
    return ApiClient(base_url=BASE_URL, token_store=MemoryTokenStore(token), http=http)


class TestBuildPriceParams:
    def test_boxes_send_range_and_box_type(self):
        filters = FilterState(cooperator="7", range_id="2", box_type="drawer", bindery_type="x")

        assert build_price_params("boxes", filters) == {
            "cooperator": "7",
            "range_id": "2",
            "type": "drawer",
        }

    def test_binderies_send_bindery_type(self):
        filters = FilterState(cooperator="7", range_id="2", box_type="drawer", bindery_type="sewn")

        assert build_price_params("binderies", filters) == {"cooperator": "7", "type": "sewn"}

    def test_papers_send_only_cooperator(self):
        filters = FilterState(cooperator="7", range_id="2", box_type="drawer")

        assert build_price_params("papers", filters) == {"cooperator": "7"}

    def test_empty_filters(self):
        assert build_price_params("papers", FilterState()) == {}
        assert build_price_params("papers", None) == {}


class TestPriceService:
    @pytest.mark.asyncio
    async def test_get_price_table_unwraps_data(self, paper_rows):
        recorder = Recorder({("GET", "/client/offset/papers"): (200, {"data": paper_rows})})
        service = PriceService(make_client(recorder, token="tok"))

        rows = await service.get_price_table("papers", FilterState(cooperator="7"))

        assert rows == paper_rows
        assert recorder.last.url.params["cooperator"] == "7"
        assert recorder.last.headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_envelope_without_data_is_rejected(self):
        recorder = Recorder({("GET", "/client/offset/papers"): (200, {"message": "maintenance"})})
        service = PriceService(make_client(recorder))

        with pytest.raises(ApiError) as exc_info:
            await service.get_price_table("papers")

        assert exc_info.value.error_type == ErrorType.SERVER

    @pytest.mark.asyncio
    async def test_reference_list_rejects_object(self):
        recorder = Recorder({("GET", "/client/offset/boxes/box-types"): (200, {"id": 1})})
        service = PriceService(make_client(recorder))

        with pytest.raises(ApiError):
            await service.get_box_types("boxes")

    @pytest.mark.asyncio
    async def test_reference_list_endpoints(self):
        recorder = Recorder()
        service = PriceService(make_client(recorder))

        await service.get_circulation_ranges("boxes")
        await service.get_box_types("boxes")
        await service.get_bindery_types("binderies")

        paths = [request.url.path for request in recorder.requests]
        assert paths == [
            "/api/v1/client/offset/boxes/circulation_range",
            "/api/v1/client/offset/boxes/box-types",
            "/api/v1/client/offset/binderies/bindery_types",
        ]

    @pytest.mark.asyncio
    async def test_mutations(self):
        recorder = Recorder()
        service = PriceService(make_client(recorder))

        await service.create_price_entry("papers", {"title": "A4"})
        await service.update_price_entry("papers", 5, {"price": 10})
        await service.delete_price_entry("papers", 5)
        await service.bulk_update_prices("papers", [{"id": 5, "price": 10}])

        calls = [(r.method, r.url.path) for r in recorder.requests]
        assert calls == [
            ("POST", "/api/v1/client/offset/papers"),
            ("PUT", "/api/v1/client/offset/papers/5"),
            ("DELETE", "/api/v1/client/offset/papers/5"),
            ("PUT", "/api/v1/client/offset/papers/bulk"),
        ]
        assert json.loads(recorder.requests[-1].content) == {"entries": [{"id": 5, "price": 10}]}

    @pytest.mark.asyncio
    async def test_401_clears_token_and_surfaces_error(self):
        recorder = Recorder({("GET", "/client/offset/papers"): (401, {"message": "Unauthenticated."})})
        client = make_client(recorder, token="expired")
        service = PriceService(client)

        with pytest.raises(ApiError) as exc_info:
            await service.get_price_table("papers")

        assert exc_info.value.error_type == ErrorType.AUTHENTICATION
        assert exc_info.value.message == "Unauthenticated."
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
        assert client.get_stored_token() is None

    def test_auth_status(self):
        service = PriceService(make_client(Recorder(), token="abcdefghijklmnop"))

        status = service.auth_status()

        assert status["is_authenticated"] is True
        assert status["has_token"] is True
        assert status["token_preview"] == "abcdefghij..."


class TestCooperatorService:
    @pytest.mark.asyncio
    async def test_get_cooperators(self):
        cooperators = [{"id": 1, "name": "چاپخانه نور"}]
        recorder = Recorder({("GET", "/client/offset/papers"): (200, {"data": cooperators})})

        result = await CooperatorService(make_client(recorder)).get_cooperators("papers")

        assert result == cooperators


class TestAuthService:
    @pytest.mark.asyncio
    async def test_request_otp(self):
        recorder = Recorder(
            {
                ("POST", "/auth/send-otp"): (
                    200,
                    {"message": "sent", "data": {"token": "exchange", "otp": 123456, "is_new_user": True}},
                )
            }
        )

        result = await AuthService(make_client(recorder)).request_otp("9123456789")

        assert result.token == "exchange"
        assert result.otp == "123456"
        assert result.is_new_user is True
        assert json.loads(recorder.last.content) == {"mobile": "9123456789"}

    @pytest.mark.asyncio
    async def test_verify_otp_stores_session_token(self):
        recorder = Recorder(
            {
                ("POST", "/auth/verify-otp"): (
                    200,
                    {"data": {"token": "session-token", "user": {"id": 4, "mobile": "9123456789"}}},
                )
            }
        )
        client = make_client(recorder)

        result = await AuthService(client).verify_otp("exchange", "123456")

        assert recorder.last.headers["Authorization"] == "Bearer exchange"
        assert json.loads(recorder.last.content) == {"otp": "123456"}
        assert result.token == "session-token"
        assert result.user["id"] == 4
        assert client.get_stored_token() == "session-token"

    @pytest.mark.asyncio
    async def test_logout_clears_token_even_on_failure(self):
        recorder = Recorder({("DELETE", "/auth"): (500, {})})
        client = make_client(recorder, token="tok")
        service = AuthService(client)

        with pytest.raises(ApiError):
            await service.logout()

        assert client.get_stored_token() is None
        assert service.is_authenticated() is False
