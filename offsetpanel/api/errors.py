"""Central classification of API failures.

Handling here is observational: it classifies, logs and derives messages.
Callers always receive the original exception.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

import httpx
import structlog

from offsetpanel.i18n import translate

logger = structlog.get_logger(__name__)


class ErrorType(str, Enum):
    NETWORK = "NETWORK"
    VALIDATION = "VALIDATION"
    AUTHENTICATION = "AUTHENTICATION"
    AUTHORIZATION = "AUTHORIZATION"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT = "RATE_LIMIT"
    SERVER = "SERVER"
    UNKNOWN = "UNKNOWN"


_STATUS_TYPES = {
    401: ErrorType.AUTHENTICATION,
    403: ErrorType.AUTHORIZATION,
    404: ErrorType.NOT_FOUND,
    422: ErrorType.VALIDATION,
    429: ErrorType.RATE_LIMIT,
    500: ErrorType.SERVER,
    502: ErrorType.SERVER,
    503: ErrorType.SERVER,
    504: ErrorType.SERVER,
}

_RETRYABLE = {ErrorType.NETWORK, ErrorType.SERVER, ErrorType.RATE_LIMIT}


class ApiError(Exception):
    """A failed API call, formatted for display.

    The originating exception is kept as ``original`` and ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.UNKNOWN,
        status_code: int | None = None,
        original: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.original = original


@dataclass
class HandledError:
    type: ErrorType
    message: str
    original: BaseException


def response_of(error: BaseException) -> httpx.Response | None:
    if isinstance(error, ApiError) and error.original is not None:
        return response_of(error.original)
    if isinstance(error, httpx.HTTPStatusError):
        return error.response
    return None


def response_payload(error: BaseException) -> dict[str, Any]:
    response = response_of(error)
    if response is None:
        return {}
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def request_url(error: BaseException) -> str | None:
    if isinstance(error, ApiError) and error.original is not None:
        return request_url(error.original)
    if isinstance(error, (httpx.HTTPStatusError, httpx.RequestError)):
        try:
            return str(error.request.url)
        except RuntimeError:
            return None
    return None


def get_error_type(error: BaseException) -> ErrorType:
    """Classify ``error``; transport failures (no response) are NETWORK.

    An undecodable body is SERVER: the upstream answered, but not with JSON.
    """
    if isinstance(error, ApiError):
        return error.error_type
    if isinstance(error, httpx.DecodingError):
        return ErrorType.SERVER
    if isinstance(error, httpx.RequestError):
        return ErrorType.NETWORK
    response = response_of(error)
    if response is None:
        return ErrorType.UNKNOWN
    return _STATUS_TYPES.get(response.status_code, ErrorType.UNKNOWN)


def first_validation_error(errors: Any) -> str | None:
    if isinstance(errors, dict) and errors:
        first = next(iter(errors.values()))
    elif isinstance(errors, list) and errors:
        first = errors[0]
    else:
        return None
    if isinstance(first, list):
        first = first[0] if first else None
    return None if first is None else str(first)


def server_message(error: BaseException) -> str | None:
    """Message supplied by the API itself, if any."""
    payload = response_payload(error)
    if payload.get("message"):
        return str(payload["message"])
    return first_validation_error(payload.get("errors"))


def get_user_friendly_message(error: BaseException, locale: str | None = None) -> str:
    message = server_message(error)
    if message:
        return message
    return translate(f"api.{get_error_type(error).value.lower()}", locale)


def handle_global_error(
    error: BaseException,
    custom_handler: Callable[[BaseException, ErrorType, str], Any] | None = None,
    locale: str | None = None,
) -> Any:
    """Classify and log ``error``; never swallows it for the caller."""
    error_type = get_error_type(error)
    message = get_user_friendly_message(error, locale)
    response = response_of(error)

    logger.error(
        "api_error",
        error_type=error_type.value,
        status_code=response.status_code if response is not None else None,
        url=request_url(error),
        message=message,
    )

    if custom_handler is not None:
        return custom_handler(error, error_type, message)

    return HandledError(type=error_type, message=message, original=error)


@dataclass
class ErrorNotification:
    title: str
    message: str
    error_type: ErrorType
    duration_ms: int = 5000
    show_retry: bool = False
    on_retry: Optional[Callable[[], Any]] = None
    id: int = field(default_factory=lambda: int(time.time() * 1000))
    type: str = "error"
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


def create_error_notification(
    error: BaseException,
    title: str = "Error",
    duration_ms: int = 5000,
    show_retry: bool = False,
    on_retry: Callable[[], Any] | None = None,
    locale: str | None = None,
) -> ErrorNotification:
    return ErrorNotification(
        title=title,
        message=get_user_friendly_message(error, locale),
        error_type=get_error_type(error),
        duration_ms=duration_ms,
        show_retry=show_retry,
        on_retry=on_retry,
    )


def should_retry(error: BaseException) -> bool:
    """Whether a retry could help. Informational; nothing retries automatically."""
    return get_error_type(error) in _RETRYABLE


def should_show_to_user(error: BaseException) -> bool:
    silent_errors: set[ErrorType] = set()
    return get_error_type(error) not in silent_errors
