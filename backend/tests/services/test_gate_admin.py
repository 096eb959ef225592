"""Gate Admin: service-level tests against the SQL store.

Tests cover:
    - create_gate registers both tokens and persists config
    - Unauthorized calls raise before touching state
    - set_feed / set_heartbeat persist config and one change event each
    - Rejected heartbeat leaves config and history untouched
    - Settings-supplied max age bounds the heartbeat
"""

import pytest

from porgate.core.domain_types import (
    Address, AssetSymbol, ConfigField, FeedRef, MAX_AGE_SECONDS, ONE_DAY_SECONDS,
)
from porgate.core.errors import (
    ConflictError, HeartbeatTooLargeError, UnauthorizedError,
)
from porgate.infrastructure.gate_store import SqlGateRepository
from porgate.infrastructure.ledger import LedgerToken
from porgate.models.gate import Gate
from porgate.services.gate_admin import GateAdmin

ASSET = AssetSymbol("aUSDC")
UNDERLYING = AssetSymbol("USDC")
FEED = FeedRef("https://reserves.example/usdc")
STRANGER = Address("0x00000000000000000000000000000000000000ff")


@pytest.fixture
def gate_admin(test_db, admin) -> GateAdmin:
    return GateAdmin(test_db, admin)


@pytest.fixture
async def created(gate_admin, admin):
    await gate_admin.create_gate(admin, ASSET, 6, UNDERLYING, 6, feed=FEED)
    return gate_admin


async def test_create_gate_registers_tokens(created, test_db):
    assert await LedgerToken(test_db, ASSET).decimals() == 6
    assert await LedgerToken(test_db, UNDERLYING).total_supply() == 0
    config = await SqlGateRepository(test_db).load_config(ASSET)
    assert config.feed == FEED
    assert config.heartbeat_seconds == MAX_AGE_SECONDS


async def test_create_gate_twice_conflicts(created, admin):
    with pytest.raises(ConflictError) as exc_info:
        await created.create_gate(admin, ASSET, 6, UNDERLYING, 6)
    assert exc_info.value.code == "GATE_ALREADY_EXISTS"


async def test_create_gate_unauthorized(gate_admin, test_db):
    with pytest.raises(UnauthorizedError):
        await gate_admin.create_gate(STRANGER, ASSET, 6, UNDERLYING, 6)
    assert await test_db.get(Gate, ASSET) is None


async def test_set_feed_records_change(created, admin, test_db):
    change = await created.set_feed(admin, ASSET, None)
    assert change.field == ConfigField.FEED
    assert change.old_value == FEED
    assert change.new_value is None
    repo = SqlGateRepository(test_db)
    assert (await repo.load_config(ASSET)).is_bypassed
    changes = await repo.list_changes(ASSET)
    assert len(changes) == 1
    assert changes[0].caller == admin


async def test_set_feed_unauthorized_leaves_config(created, test_db):
    with pytest.raises(UnauthorizedError) as exc_info:
        await created.set_feed(STRANGER, ASSET, None)
    assert exc_info.value.context.caller == STRANGER
    assert exc_info.value.context.asset == ASSET
    repo = SqlGateRepository(test_db)
    assert (await repo.load_config(ASSET)).feed == FEED
    assert await repo.list_changes(ASSET) == []


async def test_set_heartbeat_persists(created, admin, test_db):
    change = await created.set_heartbeat(admin, ASSET, ONE_DAY_SECONDS)
    assert change.field == ConfigField.HEARTBEAT
    assert change.new_value == ONE_DAY_SECONDS
    config = await SqlGateRepository(test_db).load_config(ASSET)
    assert config.heartbeat_seconds == ONE_DAY_SECONDS


async def test_set_heartbeat_too_large_rejected(created, admin, test_db):
    with pytest.raises(HeartbeatTooLargeError) as exc_info:
        await created.set_heartbeat(admin, ASSET, MAX_AGE_SECONDS + 1)
    assert exc_info.value.context.asset == ASSET
    repo = SqlGateRepository(test_db)
    assert (await repo.load_config(ASSET)).heartbeat_seconds == MAX_AGE_SECONDS
    assert await repo.list_changes(ASSET) == []


async def test_custom_max_age_bounds_heartbeat(test_db, admin):
    gate_admin = GateAdmin(test_db, admin, max_age_seconds=ONE_DAY_SECONDS)
    await gate_admin.create_gate(admin, ASSET, 6, UNDERLYING, 6, feed=FEED)
    with pytest.raises(HeartbeatTooLargeError):
        await gate_admin.set_heartbeat(admin, ASSET, ONE_DAY_SECONDS + 1)
    change = await gate_admin.set_heartbeat(admin, ASSET, 0)
    assert change.new_value == ONE_DAY_SECONDS
