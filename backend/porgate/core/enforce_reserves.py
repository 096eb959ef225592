"""Reserve Enforcement: decides whether an issuance is backed by attested reserves.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Each check returns a DenyReason on violation, None on success
    - evaluate chains all checks in fixed order, first denial wins:
      invalid answer, then staleness, then reserve coverage
    - Freshness boundary is inclusive: observed_at == now - heartbeat is fresh
    - Supply equal to reserves passes

Design Decisions:
    - Pure functions over method dispatch: testable without mocks (ADR: ExMA Functional Core)
    - Return reasons (not exceptions): the guard decides how a denial propagates,
      the dry-run check endpoint reuses the same chain without raising
"""

from porgate.core.domain_types import (
    DenyReason, FeedReading, GateDecision, UnderlyingAssetView,
)
from porgate.core.normalize_decimals import normalize_pair


def check_answer_valid(reading: FeedReading) -> DenyReason | None:
    """Rule 1: a missing or non-positive reserve answer is never trustworthy."""
    if reading.value is None or reading.value <= 0:
        return DenyReason.INVALID_ANSWER
    return None


def oldest_allowed_timestamp(now: int, heartbeat: int) -> int:
    """Saturating now - heartbeat."""
    return max(now - heartbeat, 0)


def check_answer_fresh(
    reading: FeedReading, now: int, heartbeat: int,
) -> DenyReason | None:
    """Rule 2: answer must have been observed within the heartbeat window."""
    if reading.observed_at < oldest_allowed_timestamp(now, heartbeat):
        return DenyReason.STALE_ANSWER
    return None


def check_reserves_cover_supply(
    underlying: UnderlyingAssetView, reading: FeedReading,
) -> DenyReason | None:
    """Rule 3: normalized underlying supply must not exceed normalized reserves."""
    supply, reserves = normalize_pair(
        underlying.total_supply, underlying.decimals,
        reading.value, reading.decimals,
    )
    if supply > reserves:
        return DenyReason.INSUFFICIENT_RESERVES
    return None


def evaluate(
    now: int,
    underlying: UnderlyingAssetView,
    reading: FeedReading,
    heartbeat: int,
) -> GateDecision:
    """Chain all reserve checks. Returns Allow or the first denial."""
    reason = (
        check_answer_valid(reading)
        or check_answer_fresh(reading, now, heartbeat)
        or check_reserves_cover_supply(underlying, reading)
    )
    if reason is None:
        return GateDecision.allow()
    return GateDecision.deny(reason)
