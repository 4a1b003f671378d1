"""Tests for offsetpanel.web.routes.health and offsetpanel.web.routes.debug."""

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from offsetpanel.api.client import ApiClient
from offsetpanel.api.services import PriceService
from offsetpanel.api.tokens import MemoryTokenStore
from offsetpanel.models import SessionUser, WebSession
from offsetpanel.web.auth import require_auth
from offsetpanel.web.dependencies import get_price_service
from offsetpanel.web.routes import debug, health

BASE_URL = "http://pricing.test/api/v1"


def api_client(handler, token=None):
    http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return ApiClient(http=http, token_store=MemoryTokenStore(token))


class TestHealth:
    @pytest.fixture
    def app(self):
        test_app = FastAPI()
        test_app.include_router(health.router)
        return test_app

    def test_api_reachable(self, app):
        app.state.api_client = api_client(lambda request: httpx.Response(404))

        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "api": "reachable", "api_status": 404}

    def test_api_unreachable(self, app):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        app.state.api_client = api_client(refuse)

        response = TestClient(app).get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["api"] == "unreachable"
        assert "connection refused" in body["detail"]


class TestAuthDebug:
    @pytest.fixture
    def app(self):
        test_app = FastAPI()
        test_app.include_router(debug.router)
        return test_app

    def test_in_sync(self, app):
        token = "abcdefghijklmnop"
        app.dependency_overrides[require_auth] = lambda: WebSession(
            status="authenticated", user=SessionUser(id="5", mobile="9123456789", accessToken=token)
        )
        app.dependency_overrides[get_price_service] = lambda: PriceService(
            api_client(lambda request: httpx.Response(200), token=token)
        )

        body = TestClient(app).get("/debug/auth").json()

        assert body["in_sync"] is True
        assert body["session"]["user_id"] == "5"
        assert body["session"]["token_preview"] == "abcdefghij..."
        assert body["client"]["has_token"] is True
        assert token not in str(body)

    def test_out_of_sync(self, app):
        app.dependency_overrides[require_auth] = lambda: WebSession(
            status="authenticated", user=SessionUser(id="5", accessToken="session-token")
        )
        app.dependency_overrides[get_price_service] = lambda: PriceService(
            api_client(lambda request: httpx.Response(200))
        )

        body = TestClient(app).get("/debug/auth").json()

        assert body["in_sync"] is False
        assert body["client"]["is_authenticated"] is False

    def test_requires_auth(self, app):
        response = TestClient(app).get("/debug/auth", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/login"
