"""OffsetPanel Pydantic models for table schemas, filters and sessions."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PriceRecord = dict[str, Any]

# Fields every price record carries that are never shown as columns
SYSTEM_FIELDS = frozenset(
    {"id", "panel_id", "cooperator_id", "created_at", "updated_at", "deleted_at"}
)


class SelectOption(BaseModel):
    """Choice of a ``select`` column."""

    value: Any
    label: str


class ColumnSchema(BaseModel):
    """Column metadata driving the editable price table.

    ``key`` is a dot path into a price record (one level of nesting).
    ``formatter`` is called with the raw nested value and the full row and
    wins over type-based display rendering.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: str
    label: str
    type: Literal["number", "text", "select"] = "text"
    editable: bool = True
    options: Optional[list[SelectOption]] = None
    formatter: Optional[Callable[[Any, PriceRecord], str]] = Field(default=None, exclude=True)

    # Presentation extras
    default_value: Any = None
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    suffix: Optional[str] = None
    multiline: bool = False
    rows: int = 1
    required: bool = False

    @property
    def is_nested(self) -> bool:
        return "." in self.key


class TableStatus(str, Enum):
    """Lifecycle of a price table container."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class FilterState(BaseModel):
    """Selected filter values narrowing a price query."""

    cooperator: Optional[str] = None
    range_id: Optional[str] = None
    box_type: Optional[str] = None
    bindery_type: Optional[str] = None


class SessionUser(BaseModel):
    """Authenticated dashboard user, as returned by OTP verification."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    mobile: Optional[str] = None
    verified_at: Optional[str] = None
    panel_id: Optional[int | str] = None
    access_token: str = Field(alias="accessToken")
    name: Optional[str] = None


class WebSession(BaseModel):
    """Browser session state mirrored into the API client's token slot."""

    status: Literal["authenticated", "unauthenticated", "loading"] = "unauthenticated"
    user: Optional[SessionUser] = None


class OtpRequestResult(BaseModel):
    """Result of ``POST /auth/send-otp``."""

    token: str
    otp: Optional[str] = None  # only echoed by development backends
    is_new_user: bool = False
    message: Optional[str] = None


class OtpVerifyResult(BaseModel):
    """Result of ``POST /auth/verify-otp``."""

    user: dict[str, Any]
    token: str
    message: Optional[str] = None
