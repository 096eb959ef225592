"""Ledger Adapter: SQL-backed token supply, balances, and mint."""

import pytest

from porgate.core.domain_types import Address, AssetSymbol, UINT256_MAX
from porgate.core.errors import ResourceNotFoundError
from porgate.infrastructure.ledger import LedgerToken, ensure_token

WBTC = AssetSymbol("WBTC")
ALICE = Address("0xa11ce")
BOB = Address("0xb0b")


@pytest.fixture
async def wbtc(test_db) -> LedgerToken:
    await ensure_token(test_db, WBTC, 8)
    await test_db.commit()
    return LedgerToken(test_db, WBTC)


async def test_new_token_is_empty(wbtc):
    assert await wbtc.total_supply() == 0
    assert await wbtc.decimals() == 8
    assert await wbtc.balance_of(ALICE) == 0


async def test_mint_credits_balance_and_supply(wbtc):
    await wbtc.mint(ALICE, 300)
    await wbtc.mint(BOB, 200)
    await wbtc.mint(ALICE, 1)
    assert await wbtc.balance_of(ALICE) == 301
    assert await wbtc.balance_of(BOB) == 200
    assert await wbtc.total_supply() == 501


async def test_mint_rejects_non_positive(wbtc):
    with pytest.raises(ValueError):
        await wbtc.mint(ALICE, 0)


async def test_amounts_beyond_64_bits_round_trip(wbtc, test_db):
    await wbtc.mint(ALICE, UINT256_MAX)
    await test_db.commit()
    assert await wbtc.balance_of(ALICE) == UINT256_MAX
    assert await wbtc.total_supply() == UINT256_MAX


async def test_rollback_discards_mint(wbtc, test_db):
    await wbtc.mint(ALICE, 50)
    await test_db.rollback()
    assert await wbtc.balance_of(ALICE) == 0
    assert await wbtc.total_supply() == 0


async def test_unknown_token_not_found(test_db):
    with pytest.raises(ResourceNotFoundError):
        await LedgerToken(test_db, AssetSymbol("NOPE")).total_supply()


async def test_ensure_token_keeps_existing_decimals(wbtc, test_db):
    token = await ensure_token(test_db, WBTC, 18)
    assert token.decimals == 8
