"""REST resources composed over the shared API client."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from offsetpanel.api.client import ApiClient
from offsetpanel.api.errors import (
    ApiError,
    ErrorType,
    get_error_type,
    response_of,
    server_message,
)

logger = structlog.get_logger(__name__)


def format_error(error: httpx.HTTPError) -> ApiError:
    """Turn an ``httpx`` failure into an ``ApiError`` carrying a display message."""
    message = server_message(error) or str(error) or "An unexpected error occurred"
    response = response_of(error)
    return ApiError(
        message,
        error_type=get_error_type(error),
        status_code=response.status_code if response is not None else None,
        original=error,
    )


def list_payload(response: Any) -> Any:
    """Unwrap ``{"data": [...]}`` envelopes."""
    if isinstance(response, dict) and "data" in response:
        return response["data"]
    return response


def list_result(response: Any, what: str) -> list[Any]:
    """Unwrapped list payload; an empty body is an empty list.

    Anything other than a list of objects (a bare object, an envelope
    without ``data``, a list of strings) raises ``ApiError``.
    """
    payload = list_payload(response)
    if payload is None:
        return []
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        logger.warning("unexpected_payload", what=what, payload_type=type(payload).__name__)
        raise ApiError(f"Unexpected response for {what}", error_type=ErrorType.SERVER)
    return payload


class Resource:
    """A base path on the pricing API.

    Each verb joins ``endpoint`` onto the base path and raises ``ApiError``
    (original ``httpx`` exception chained) on failure.
    """

    def __init__(self, client: ApiClient, base_path: str):
        self.client = client
        self.base_path = base_path.rstrip("/")

    def url(self, endpoint: str = "") -> str:
        return f"{self.base_path}{endpoint}"

    async def _send(self, method: str, endpoint: str, **kwargs) -> Any:
        url = self.url(endpoint)
        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("resource_request_failed", method=method, url=url, error=str(exc))
            raise format_error(exc) from exc

    async def get(self, endpoint: str = "", params: dict[str, Any] | None = None) -> Any:
        return await self._send("GET", endpoint, params=params)

    async def post(self, endpoint: str = "", data: Any = None) -> Any:
        return await self._send("POST", endpoint, json=data if data is not None else {})

    async def put(self, endpoint: str = "", data: Any = None) -> Any:
        return await self._send("PUT", endpoint, json=data if data is not None else {})

    async def patch(self, endpoint: str = "", data: Any = None) -> Any:
        return await self._send("PATCH", endpoint, json=data if data is not None else {})

    async def delete(self, endpoint: str = "", params: dict[str, Any] | None = None) -> Any:
        return await self._send("DELETE", endpoint, params=params)

    async def upload(self, endpoint: str, files: Any, data: dict[str, Any] | None = None) -> Any:
        return await self._send("POST", endpoint, json=data, files=files)

    async def with_token(self, method: str, endpoint: str, token: str, data: Any = None) -> Any:
        url = self.url(endpoint)
        try:
            return await self.client.request_with_token(method, url, token, data)
        except httpx.HTTPError as exc:
            logger.warning("resource_request_failed", method=method, url=url, error=str(exc))
            raise format_error(exc) from exc
