"""Bearer token storage for the API client.

One slot per browser context. The web session is mirrored into this slot by
``offsetpanel.web.auth.sync_token``; the API client only reads it and rejects
it on 401 responses. A rejected token is remembered so the session does not
copy it back into the slot.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol, runtime_checkable

import redis

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
REJECTED_KEY = "auth_token_rejected"

# In-memory fallback for development when Redis is missing
_memory_tokens: dict[str, str] = {}


@runtime_checkable
class TokenStore(Protocol):
    def get_token(self) -> str | None: ...

    def set_token(self, token: str) -> None: ...

    def clear_token(self) -> None: ...

    def reject_token(self) -> None: ...

    def rejected_token(self) -> str | None: ...


class MemoryTokenStore:
    """Single token slot held in process memory (CLI, tests)."""

    def __init__(self, token: str | None = None):
        self._token = token
        self._rejected: str | None = None

    def get_token(self) -> str | None:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token
        self._rejected = None

    def clear_token(self) -> None:
        self._token = None

    def reject_token(self) -> None:
        """Clear the slot, remembering the token the API refused."""
        if self._token:
            self._rejected = self._token
        self._token = None

    def rejected_token(self) -> str | None:
        return self._rejected


def get_redis_client(redis_url: str | None = None) -> redis.Redis:
    """Get Redis client for token storage."""
    url = redis_url or os.environ.get("REDIS_URL", "redis://redis:6379/0")
    return redis.from_url(url, decode_responses=True)


class RedisTokenStore:
    """Token slot of one browser context, stored in Redis.

    Falls back to process memory while Redis is unreachable.
    """

    def __init__(
        self,
        context_id: str,
        redis_client: redis.Redis | None = None,
        ttl_seconds: int | None = None,
    ):
        self.context_id = context_id
        self.key = f"{TOKEN_KEY}:{context_id}"
        self.rejected_key = f"{REJECTED_KEY}:{context_id}"
        self.redis = redis_client if redis_client is not None else get_redis_client()
        self.ttl_seconds = ttl_seconds

    def _read(self, key: str) -> str | None:
        try:
            return self.redis.get(key)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError):
            return _memory_tokens.get(key)

    def _write(self, key: str, value: str) -> None:
        try:
            if self.ttl_seconds:
                self.redis.setex(key, self.ttl_seconds, value)
            else:
                self.redis.set(key, value)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError):
            logger.warning("Redis unavailable, keeping API token in memory")
            _memory_tokens[key] = value

    def _delete(self, key: str) -> None:
        try:
            self.redis.delete(key)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError):
            pass
        _memory_tokens.pop(key, None)

    def get_token(self) -> str | None:
        return self._read(self.key)

    def set_token(self, token: str) -> None:
        self._write(self.key, token)
        self._delete(self.rejected_key)

    def clear_token(self) -> None:
        self._delete(self.key)

    def reject_token(self) -> None:
        """Clear the slot, remembering the token the API refused."""
        token = self.get_token()
        self._delete(self.key)
        if token:
            self._write(self.rejected_key, token)

    def rejected_token(self) -> str | None:
        return self._read(self.rejected_key)
