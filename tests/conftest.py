"""Pytest configuration and fixtures for OffsetPanel tests.

Provides common fixtures for testing.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import redis

from offsetpanel.api import tokens
from offsetpanel.config import reset_config
from offsetpanel.web import auth


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("API_URL", "http://pricing.test/api/v1")
    monkeypatch.setenv("REDIS_URL", "redis://127.0.0.1:1/0")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.delenv("DEFAULT_LOCALE", raising=False)
    monkeypatch.delenv("COOPERATOR_CATEGORY", raising=False)
    monkeypatch.delenv("OFFSETPANEL_AUTH_DISABLED", raising=False)
    monkeypatch.delenv("REDIRECT_ON_AUTH_ERROR", raising=False)
    monkeypatch.delenv("JSON_LOGS", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def offline_redis(monkeypatch):
    """Redis that is always unreachable, so the in-memory fallbacks are used."""
    client = MagicMock()
    error = redis.exceptions.ConnectionError("redis unavailable in tests")
    client.get.side_effect = error
    client.set.side_effect = error
    client.setex.side_effect = error
    client.delete.side_effect = error

    monkeypatch.setattr(auth, "_redis_client", client)
    monkeypatch.setattr(tokens, "get_redis_client", lambda redis_url=None: client)
    auth._memory_sessions.clear()
    tokens._memory_tokens.clear()
    yield client
    auth._memory_sessions.clear()
    tokens._memory_tokens.clear()


@pytest.fixture
def paper_rows() -> list[dict]:
    """Two paper price records as the API returns them."""
    return [
        {
            "id": 1,
            "title": "گلاسه ۱۳۵",
            "grammage": 135,
            "quantity": 500,
            "price": 1200000,
            "type": {"id": 3, "title": "گلاسه"},
            "material": None,
            "dimension": {"width": 70, "height": 100},
            "cooperator_id": 7,
            "created_at": "2024-05-01T10:00:00Z",
        },
        {
            "id": 2,
            "title": "تحریر ۸۰",
            "grammage": 80,
            "quantity": 500,
            "price": 800000,
            "type": {"id": 4, "title": "تحریر"},
            "material": None,
            "dimension": {"width": 70, "height": 100},
            "cooperator_id": 7,
            "created_at": "2024-05-01T10:00:00Z",
        },
    ]
