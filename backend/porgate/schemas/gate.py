"""Gate Schemas: Pydantic models with field-level validation for API boundaries.

Invariants:
    - Symbols: 1-32 chars of [A-Za-z0-9._-]
    - Decimals: 0-77 (10**77 is the largest power of ten below 2**256)
    - IssueRequest.amount: positive and within a 256-bit word
    - SetHeartbeatRequest.heartbeat_seconds: non-negative (upper bound is per gate, checked in core)
    - Blank feed strings mean "unset"

Design Decisions:
    - field_validator for side-effect-free transforms (strip) keeps models pure
    - Upper heartbeat bound NOT validated here: it depends on the gate's max age,
      so it surfaces as POR_HEARTBEAT_GREATER_THAN_MAX_AGE, not a schema error
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from porgate.core.domain_types import UINT256_MAX

SYMBOL_PATTERN = r"^[A-Za-z0-9._-]{1,32}$"


def _blank_to_none(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    return v or None


class GateCreate(BaseModel):
    """Gate creation: issued token backed by an underlying token."""
    asset_symbol: str = Field(pattern=SYMBOL_PATTERN)
    asset_decimals: int = Field(ge=0, le=77)
    underlying_symbol: str = Field(pattern=SYMBOL_PATTERN)
    underlying_decimals: int = Field(ge=0, le=77)
    feed: str | None = Field(None, max_length=500)

    @field_validator("feed")
    @classmethod
    def strip_feed(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class SetFeedRequest(BaseModel):
    """Replace or clear (null / blank) the feed reference."""
    feed: str | None = Field(None, max_length=500)

    @field_validator("feed")
    @classmethod
    def strip_feed(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class SetHeartbeatRequest(BaseModel):
    """Set the heartbeat; 0 selects the gate's max age."""
    heartbeat_seconds: int = Field(ge=0)


class GateConfigResponse(BaseModel):
    """Read interface: feed, heartbeat, max age."""
    asset_symbol: str
    underlying_symbol: str
    feed: str | None
    heartbeat_seconds: int
    max_age_seconds: int


class ConfigChangeResponse(BaseModel):
    """Change event: old and new effective value of one field."""
    field: str
    old_value: str | int | None
    new_value: str | int | None
    caller: str | None = None
    created_at: datetime | None = None


class IssueRequest(BaseModel):
    """Guarded issuance request."""
    recipient: str = Field(min_length=1, max_length=64)
    amount: int = Field(gt=0, le=UINT256_MAX)

    @field_validator("recipient")
    @classmethod
    def strip_recipient(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("recipient cannot be empty or whitespace")
        return v


class IssueResponse(BaseModel):
    """Successful issuance: recipient's balance after the mint."""
    asset_symbol: str
    recipient: str
    amount: int
    balance: int


class GateCheckResponse(BaseModel):
    """Dry-run gate decision."""
    asset_symbol: str
    feed: str | None
    heartbeat_seconds: int
    allowed: bool
    deny_reason: str | None = None
    error_code: str | None = None
