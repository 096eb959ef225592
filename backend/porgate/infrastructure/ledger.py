"""Ledger Adapter: SQL-backed base token ledger behind the gate's boundary protocols.

Invariants:
    - Supply and decimals are re-read from the database on every call (no caching)
    - mint increases the recipient's balance and the token's total_supply by exactly amount
    - mint reads the token and balance rows with SELECT ... FOR UPDATE, so the
      read-modify-write of amount and total_supply holds across worker processes
    - Nothing here commits: the caller owns the transaction

Design Decisions:
    - One LedgerToken serves as both UnderlyingAsset (for the backing asset) and
      IssuancePrimitive (for the issued token); the guard only sees the protocols
    - populate_existing on reads: the identity map must not serve a stale supply
"""

import logging

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from porgate.core.domain_types import Address, AssetSymbol
from porgate.core.errors import ResourceNotFoundError
from porgate.models.token import Token
from porgate.models.token_balance import TokenBalance

logger = logging.getLogger(__name__)


def token_query(symbol: AssetSymbol, for_update: bool = False) -> Select:
    stmt = (
        select(Token)
        .where(Token.symbol == symbol)
        .execution_options(populate_existing=True)
    )
    return stmt.with_for_update() if for_update else stmt


def balance_query(
    symbol: AssetSymbol, holder: Address, for_update: bool = False,
) -> Select:
    stmt = (
        select(TokenBalance)
        .where(
            TokenBalance.token_symbol == symbol,
            TokenBalance.holder == holder,
        )
        .execution_options(populate_existing=True)
    )
    return stmt.with_for_update() if for_update else stmt


class LedgerToken:
    """One token of the base ledger, bound to a DB session."""

    def __init__(self, db: AsyncSession, symbol: AssetSymbol):
        self._db = db
        self.symbol = symbol

    async def _token(self, for_update: bool = False) -> Token:
        result = await self._db.execute(token_query(self.symbol, for_update))
        token = result.scalar_one_or_none()
        if token is None:
            raise ResourceNotFoundError("Token", self.symbol)
        return token

    async def total_supply(self) -> int:
        return (await self._token()).total_supply

    async def decimals(self) -> int:
        return (await self._token()).decimals

    async def balance_of(self, holder: Address) -> int:
        row = await self._balance_row(holder)
        return row.amount if row else 0

    async def mint(self, recipient: Address, amount: int) -> None:
        """Base issuance primitive: credit recipient and grow supply."""
        if amount <= 0:
            raise ValueError(f"mint amount must be positive: {amount}")
        token = await self._token(for_update=True)
        row = await self._balance_row(recipient, for_update=True)
        if row is None:
            row = TokenBalance(token_symbol=self.symbol, holder=recipient, amount=0)
            self._db.add(row)
        row.amount = row.amount + amount
        token.total_supply = token.total_supply + amount
        await self._db.flush()
        logger.info(
            f"Minted {amount} {self.symbol}",
            extra={"asset": self.symbol, "recipient": recipient, "amount": amount},
        )

    async def _balance_row(
        self, holder: Address, for_update: bool = False,
    ) -> TokenBalance | None:
        result = await self._db.execute(
            balance_query(self.symbol, holder, for_update),
        )
        return result.scalar_one_or_none()


async def ensure_token(
    db: AsyncSession, symbol: AssetSymbol, decimals: int,
) -> Token:
    """Register a token if missing. Existing tokens keep their decimals."""
    token = await db.get(Token, symbol)
    if token is None:
        token = Token(symbol=symbol, decimals=decimals, total_supply=0)
        db.add(token)
        await db.flush()
    elif token.decimals != decimals:
        logger.warning(
            f"Token {symbol} already registered with {token.decimals} decimals, "
            f"ignoring requested {decimals}",
            extra={"asset": symbol},
        )
    return token
