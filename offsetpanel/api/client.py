"""HTTP client for the pricing REST API."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import structlog

from offsetpanel.api.errors import ErrorType, get_error_type, handle_global_error
from offsetpanel.api.tokens import MemoryTokenStore, TokenStore
from offsetpanel.config import get_config

logger = structlog.get_logger(__name__)


def token_preview(token: str | None) -> str | None:
    return f"{token[:10]}..." if token else None


class ApiClient:
    """Client for the pricing REST API.

    One instance (and one connection pool) is created at application start;
    ``bind()`` gives each browser context a view that reads its own token
    slot. Every request carries ``Authorization: Bearer <token>`` when the
    slot holds a token. Failures are classified and logged centrally, a 401
    rejects the token in the slot, and the original ``httpx`` exception is
    re-raised.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token_store: TokenStore | None = None,
        http: httpx.AsyncClient | None = None,
        on_auth_error: Callable[[httpx.HTTPError], Any] | None = None,
    ):
        config = get_config().api
        self.base_url = base_url or config.base_url
        self.timeout = timeout if timeout is not None else config.timeout_seconds
        self.token_store: TokenStore = token_store if token_store is not None else MemoryTokenStore()
        self.on_auth_error = on_auth_error
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            # httpx sets Content-Type per body (JSON or multipart)
            headers={"Accept": "application/json"},
        )

    def bind(self, token_store: TokenStore) -> ApiClient:
        """Return a client sharing this connection pool but using ``token_store``."""
        return ApiClient(
            base_url=self.base_url,
            timeout=self.timeout,
            token_store=token_store,
            http=self.http,
            on_auth_error=self.on_auth_error,
        )

    # Token slot

    def set_auth_token(self, token: str) -> None:
        self.token_store.set_token(token)

    def get_stored_token(self) -> str | None:
        return self.token_store.get_token()

    def clear_stored_token(self) -> None:
        self.token_store.clear_token()

    def reject_stored_token(self) -> None:
        self.token_store.reject_token()

    def is_authenticated(self) -> bool:
        return bool(self.get_stored_token())

    # Requests

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        files: Any = None,
        token: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body."""
        method = method.upper()
        request_headers = dict(headers or {})
        bearer = token or self.get_stored_token()
        if bearer:
            request_headers["Authorization"] = f"Bearer {bearer}"
            logger.debug("api_token_used", token=token_preview(bearer), method=method, url=url)
        else:
            logger.debug("api_no_token", method=method, url=url)

        logger.debug("api_request", method=method, url=url, params=params)

        try:
            response = await self.http.request(
                method,
                url,
                params=params,
                json=json if files is None else None,
                data=json if files is not None else None,
                files=files,
                headers=request_headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            self._handle_response_error(exc)
            raise

        logger.debug("api_response", method=method, url=url, status_code=response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            error = httpx.DecodingError(
                f"Invalid JSON in response from {method} {url}", request=response.request
            )
            self._handle_response_error(error)
            raise error from exc

    def _handle_response_error(self, exc: httpx.HTTPError) -> None:
        error_type = get_error_type(exc)
        if error_type == ErrorType.AUTHENTICATION:
            self.reject_stored_token()
            if self.on_auth_error is not None:
                self.on_auth_error(exc)
        handle_global_error(exc)

    async def get(self, url: str, params: dict[str, Any] | None = None, **kwargs) -> Any:
        return await self.request("GET", url, params=params, **kwargs)

    async def post(self, url: str, data: Any = None, **kwargs) -> Any:
        return await self.request("POST", url, json=data if data is not None else {}, **kwargs)

    async def patch(self, url: str, data: Any = None, **kwargs) -> Any:
        return await self.request("PATCH", url, json=data if data is not None else {}, **kwargs)

    async def put(self, url: str, data: Any = None, **kwargs) -> Any:
        return await self.request("PUT", url, json=data if data is not None else {}, **kwargs)

    async def delete(self, url: str, params: dict[str, Any] | None = None, **kwargs) -> Any:
        return await self.request("DELETE", url, params=params, **kwargs)

    async def upload(self, url: str, files: Any, data: dict[str, Any] | None = None, **kwargs) -> Any:
        return await self.request("POST", url, json=data, files=files, **kwargs)

    async def request_with_token(
        self, method: str, url: str, token: str, data: Any = None, **kwargs
    ) -> Any:
        """Send a request with an explicit bearer token (OTP exchange)."""
        if method.upper() in ("GET", "DELETE"):
            return await self.request(method, url, token=token, **kwargs)
        return await self.request(
            method, url, json=data if data is not None else {}, token=token, **kwargs
        )

    async def close(self) -> None:
        """Close the HTTP client (only when this instance created it)."""
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
