"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - Address, FeedRef, AssetSymbol wrap str: never pass bare strings through domain logic
    - Token amounts are unbounded ints; 256-bit bounds enforced in normalize_decimals
    - FeedReading.value is None when the feed reported no answer
    - GateDecision is either allowed (reason None) or denied with exactly one DenyReason

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: REST error envelope)
    - Frozen dataclasses for readings: produced by adapters, never mutated by the core
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Address = NewType("Address", str)
FeedRef = NewType("FeedRef", str)          # feed locator, e.g. an https URL
AssetSymbol = NewType("AssetSymbol", str)


# ─── Constants ───────────────────────────────────────────────────

ONE_DAY_SECONDS = 24 * 60 * 60
MAX_AGE_SECONDS = 7 * ONE_DAY_SECONDS
UINT256_MAX = 2 ** 256 - 1


# ─── Enums ───────────────────────────────────────────────────────

class DenyReason(str, Enum):
    """Why the reserve gate refused an issuance."""
    INVALID_ANSWER = "invalid_answer"
    STALE_ANSWER = "stale_answer"
    INSUFFICIENT_RESERVES = "insufficient_reserves"


class ConfigField(str, Enum):
    """Gate configuration fields that emit change events."""
    FEED = "feed"
    HEARTBEAT = "heartbeat"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class FeedReading:
    """One proof-of-reserves answer as reported by a feed."""
    value: int | None
    decimals: int
    observed_at: int  # unix seconds


@dataclass(frozen=True)
class UnderlyingAssetView:
    """Supply snapshot of the asset backing the issued token."""
    total_supply: int
    decimals: int


@dataclass(frozen=True)
class GateDecision:
    """Result of one gate evaluation."""
    reason: DenyReason | None = None

    @property
    def allowed(self) -> bool:
        return self.reason is None

    @classmethod
    def allow(cls) -> "GateDecision":
        return cls()

    @classmethod
    def deny(cls, reason: DenyReason) -> "GateDecision":
        return cls(reason=reason)


@dataclass(frozen=True)
class ConfigChange:
    """Observable change event: previous and new effective value of a field."""
    field: ConfigField
    old_value: str | int | None
    new_value: str | int | None
