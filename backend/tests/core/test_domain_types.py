"""Domain Types: verifies value types, constants, and enum values.

Tests:
    - MAX_AGE is 7 days, UINT256_MAX is 2**256 - 1
    - GateDecision allow/deny constructors
    - DenyReason has exactly the 3 denial kinds
    - Readings are immutable
"""

import dataclasses

import pytest

from porgate.core.domain_types import (
    Address, FeedRef, AssetSymbol,
    MAX_AGE_SECONDS, ONE_DAY_SECONDS, UINT256_MAX,
    DenyReason, ConfigField, FeedReading, GateDecision,
)


def test_identity_types_wrap_str():
    assert Address("0xabc") == "0xabc"
    assert FeedRef("https://feed") == "https://feed"
    assert AssetSymbol("WBTC") == "WBTC"


def test_max_age_is_seven_days():
    assert MAX_AGE_SECONDS == 7 * ONE_DAY_SECONDS == 604800


def test_uint256_max():
    assert UINT256_MAX == 2 ** 256 - 1


def test_deny_reason_has_exactly_three_reasons():
    assert set(DenyReason) == {
        DenyReason.INVALID_ANSWER,
        DenyReason.STALE_ANSWER,
        DenyReason.INSUFFICIENT_RESERVES,
    }


def test_config_fields():
    assert ConfigField.FEED.value == "feed"
    assert ConfigField.HEARTBEAT.value == "heartbeat"


def test_gate_decision_allow():
    decision = GateDecision.allow()
    assert decision.allowed
    assert decision.reason is None


def test_gate_decision_deny_carries_reason():
    decision = GateDecision.deny(DenyReason.STALE_ANSWER)
    assert not decision.allowed
    assert decision.reason == DenyReason.STALE_ANSWER


def test_gate_decisions_compare_by_value():
    assert GateDecision.allow() == GateDecision.allow()
    assert GateDecision.deny(DenyReason.INVALID_ANSWER) != GateDecision.allow()


def test_feed_reading_is_frozen():
    reading = FeedReading(value=1, decimals=8, observed_at=0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        reading.value = 2
