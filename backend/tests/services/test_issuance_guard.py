"""Issuance Guard: unit tests with in-memory ledger and feed fakes (no DB).

Tests cover:
    - No feed: mint delegated regardless of reserves, feed never read
    - Allow: recipient credited by exactly amount
    - Each DenyReason raised as IssuanceDeniedError with nothing minted
    - Supply and reading read fresh on every call
    - check() never mints
"""

import pytest

from porgate.core.domain_types import (
    Address, AssetSymbol, DenyReason, FeedRef, ONE_DAY_SECONDS,
)
from porgate.core.errors import IssuanceDeniedError, NormalizationOverflowError
from porgate.core.gate_config import GateConfig
from porgate.services.issuance_guard import IssuanceGuard

from tests.services.fakes import FakeClock, NOW

FEED = FeedRef("https://reserves.example/wbtc")
ASSET = AssetSymbol("aWBTC")
USER = Address("0xuser")


class MemoryToken:
    """UnderlyingAsset + IssuancePrimitive over a dict."""

    def __init__(self, decimals: int = 8, supply: int = 0):
        self._decimals = decimals
        self.supply = supply
        self.balances: dict[str, int] = {}
        self.supply_reads = 0

    async def total_supply(self) -> int:
        self.supply_reads += 1
        return self.supply

    async def decimals(self) -> int:
        return self._decimals

    async def mint(self, recipient: Address, amount: int) -> None:
        self.balances[recipient] = self.balances.get(recipient, 0) + amount
        self.supply += amount


def _guard(config, feeds, underlying, issued, clock=None) -> IssuanceGuard:
    return IssuanceGuard(
        ASSET, config, feeds, underlying, issued, clock=clock or FakeClock(),
    )


@pytest.fixture
def wbtc() -> MemoryToken:
    return MemoryToken(decimals=8, supply=10 * 10 ** 8)


@pytest.fixture
def awbtc() -> MemoryToken:
    return MemoryToken(decimals=8)


async def test_no_feed_mints_without_reading(feeds, wbtc, awbtc):
    guard = _guard(GateConfig(), feeds, wbtc, awbtc)
    decision = await guard.guarded_issue(USER, 5)
    assert decision.allowed
    assert awbtc.balances[USER] == 5
    assert wbtc.supply_reads == 0


async def test_no_feed_bypasses_even_with_zero_reserves(feeds, wbtc, awbtc):
    feeds.push(FEED, 0)
    guard = _guard(GateConfig(), feeds, wbtc, awbtc)
    await guard.guarded_issue(USER, 10 ** 20)
    assert awbtc.balances[USER] == 10 ** 20


async def test_allow_mints_exact_amount(feeds, wbtc, awbtc):
    feeds.push(FEED, 1_000_000 * 10 ** 8)
    config = GateConfig(feed=FEED, heartbeat_seconds=ONE_DAY_SECONDS)
    guard = _guard(config, feeds, wbtc, awbtc)
    await guard.guarded_issue(USER, 7)
    await guard.guarded_issue(USER, 3)
    assert awbtc.balances[USER] == 10


@pytest.mark.parametrize(
    "value, age, reason",
    [
        (0, 0, DenyReason.INVALID_ANSWER),
        (None, 0, DenyReason.INVALID_ANSWER),
        (1_000_000 * 10 ** 8, 2 * ONE_DAY_SECONDS, DenyReason.STALE_ANSWER),
        (10 * 10 ** 8 - 1, 0, DenyReason.INSUFFICIENT_RESERVES),
    ],
)
async def test_deny_raises_and_mints_nothing(feeds, wbtc, awbtc, value, age, reason):
    feeds.push(FEED, value, observed_at=NOW - age)
    config = GateConfig(feed=FEED, heartbeat_seconds=ONE_DAY_SECONDS)
    guard = _guard(config, feeds, wbtc, awbtc)
    with pytest.raises(IssuanceDeniedError) as exc_info:
        await guard.guarded_issue(USER, 1)
    assert exc_info.value.reason == reason
    assert exc_info.value.context.asset == ASSET
    assert exc_info.value.context.feed == FEED
    assert awbtc.balances == {}
    assert awbtc.supply == 0


async def test_each_call_reads_feed_and_supply_fresh(feeds, wbtc, awbtc):
    feed = feeds.push(FEED, 10 * 10 ** 8)
    guard = _guard(GateConfig(feed=FEED), feeds, wbtc, awbtc)
    await guard.guarded_issue(USER, 1)
    wbtc.supply += 1  # underlying grows past reserves
    with pytest.raises(IssuanceDeniedError) as exc_info:
        await guard.guarded_issue(USER, 1)
    assert exc_info.value.reason == DenyReason.INSUFFICIENT_RESERVES
    assert feed.calls == 2
    assert wbtc.supply_reads == 2


async def test_reading_goes_stale_as_clock_advances(feeds, wbtc, awbtc):
    clock = FakeClock()
    feeds.push(FEED, 1_000_000 * 10 ** 8)
    config = GateConfig(feed=FEED, heartbeat_seconds=ONE_DAY_SECONDS)
    guard = _guard(config, feeds, wbtc, awbtc, clock)
    clock.advance(ONE_DAY_SECONDS)
    await guard.guarded_issue(USER, 1)
    clock.advance(1)
    with pytest.raises(IssuanceDeniedError) as exc_info:
        await guard.guarded_issue(USER, 1)
    assert exc_info.value.reason == DenyReason.STALE_ANSWER


async def test_check_never_mints(feeds, wbtc, awbtc):
    feeds.push(FEED, 10 * 10 ** 8 - 1)
    guard = _guard(GateConfig(feed=FEED), feeds, wbtc, awbtc)
    decision = await guard.check()
    assert decision.reason == DenyReason.INSUFFICIENT_RESERVES
    assert awbtc.balances == {}


async def test_check_bypassed_allows_without_reading(feeds, wbtc, awbtc):
    guard = _guard(GateConfig(), feeds, wbtc, awbtc)
    assert (await guard.check()).allowed
    assert wbtc.supply_reads == 0


async def test_overflow_tagged_with_asset_and_feed(feeds, awbtc):
    huge = MemoryToken(decimals=0, supply=2 ** 255)
    feeds.push(FEED, 1, decimals=18)
    guard = _guard(GateConfig(feed=FEED), feeds, huge, awbtc)
    with pytest.raises(NormalizationOverflowError) as exc_info:
        await guard.guarded_issue(USER, 1)
    assert exc_info.value.context.asset == ASSET
    assert exc_info.value.context.feed == FEED
    assert awbtc.balances == {}
