"""Issuance Guard: wraps the base mint primitive with the proof-of-reserves gate.

Invariants:
    - No feed configured: mint is delegated directly (gate fully transparent)
    - Feed configured: reading and underlying supply are read fresh, evaluated, and
      mint is called only on Allow with the original recipient and amount
    - Deny raises IssuanceDeniedError(reason) before anything is minted
    - No retry: a denied issuance must be resubmitted by the caller
    - issue_through_gate resolves the gate first (unknown asset -> 404, no lock
      created), then runs under the gate lock in one DB transaction that holds
      the gates row FOR UPDATE; any failure rolls the ledger back

Design Decisions:
    - Composition over inheritance: the guard holds an IssuancePrimitive capability
      instead of overriding the ledger's mint
    - Clock injected as a callable: tests pin "now" without patching time
    - Attempts logged to issuance_attempts after rollback (observability only)
"""

import logging
import time
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from porgate.core.domain_types import (
    Address, AssetSymbol, GateDecision, UnderlyingAssetView,
)
from porgate.core.enforce_reserves import evaluate
from porgate.core.errors import (
    ErrorContext, IssuanceDeniedError, NormalizationOverflowError,
)
from porgate.core.gate_config import GateConfig
from porgate.core.repository_protocols import (
    FeedAdapterFactory, IssuancePrimitive, UnderlyingAsset,
)
from porgate.infrastructure.gate_store import SqlGateRepository
from porgate.infrastructure.ledger import LedgerToken
from porgate.services.gate_locks import gate_lock

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def unix_now() -> int:
    return int(time.time())


class IssuanceGuard:
    """Reserve-backed gate in front of one token's mint."""

    def __init__(
        self,
        asset: AssetSymbol,
        config: GateConfig,
        feed_factory: FeedAdapterFactory,
        underlying: UnderlyingAsset,
        issuer: IssuancePrimitive,
        clock: Clock = unix_now,
    ):
        self.asset = asset
        self._config = config
        self._feed_factory = feed_factory
        self._underlying = underlying
        self._issuer = issuer
        self._clock = clock

    @property
    def config(self) -> GateConfig:
        return self._config

    async def check(self) -> GateDecision:
        """Evaluate the gate against the current feed answer without minting."""
        if self._config.is_bypassed:
            return GateDecision.allow()
        feed = self._config.feed
        reading = await self._feed_factory(feed).latest_reading()
        view = UnderlyingAssetView(
            total_supply=await self._underlying.total_supply(),
            decimals=await self._underlying.decimals(),
        )
        try:
            decision = evaluate(
                self._clock(), view, reading, self._config.heartbeat_seconds,
            )
        except NormalizationOverflowError as e:
            e.context.asset = self.asset
            e.context.feed = feed
            raise
        logger.info(
            f"Reserve gate decision for {self.asset}: "
            f"{'allow' if decision.allowed else 'deny'}",
            extra={
                "asset": self.asset,
                "feed": feed,
                "deny_reason": decision.reason.value if decision.reason else None,
            },
        )
        return decision

    async def guarded_issue(self, recipient: Address, amount: int) -> GateDecision:
        """Mint amount to recipient if the reserve gate allows it."""
        if self._config.is_bypassed:
            await self._issuer.mint(recipient, amount)
            return GateDecision.allow()
        decision = await self.check()
        if not decision.allowed:
            raise IssuanceDeniedError(
                decision.reason,
                ErrorContext(asset=self.asset, feed=self._config.feed),
            )
        await self._issuer.mint(recipient, amount)
        return decision


async def _build_guard(
    db: AsyncSession,
    asset: AssetSymbol,
    feed_factory: FeedAdapterFactory,
    clock: Clock,
    for_update: bool = False,
) -> IssuanceGuard:
    repo = SqlGateRepository(db)
    gate = await repo.get_gate(asset, for_update)
    config = await repo.load_config(asset)
    return IssuanceGuard(
        asset, config, feed_factory,
        underlying=LedgerToken(db, AssetSymbol(gate.underlying_symbol)),
        issuer=LedgerToken(db, asset),
        clock=clock,
    )


async def issue_through_gate(
    db: AsyncSession,
    asset: AssetSymbol,
    recipient: Address,
    amount: int,
    feed_factory: FeedAdapterFactory,
    clock: Clock = unix_now,
) -> int:
    """Guarded issuance as one atomic operation. Returns the recipient's new balance."""
    await SqlGateRepository(db).get_gate(asset)
    async with gate_lock(asset):
        guard = await _build_guard(db, asset, feed_factory, clock, for_update=True)
        try:
            await guard.guarded_issue(recipient, amount)
        except IssuanceDeniedError as e:
            await db.rollback()
            logger.warning(
                f"Issuance denied for {asset}: {e.code}",
                extra={
                    "asset": asset, "recipient": recipient, "amount": amount,
                    "deny_reason": e.reason.value, "error_code": e.code,
                },
            )
            await SqlGateRepository(db).record_attempt(
                asset, recipient, amount, e.reason,
            )
            await db.commit()
            raise
        except Exception:
            await db.rollback()
            raise
        await SqlGateRepository(db).record_attempt(asset, recipient, amount, None)
        balance = await LedgerToken(db, asset).balance_of(recipient)
        await db.commit()
        return balance


async def preview_gate(
    db: AsyncSession,
    asset: AssetSymbol,
    feed_factory: FeedAdapterFactory,
    clock: Clock = unix_now,
) -> tuple[GateConfig, GateDecision]:
    """Dry-run: evaluate the gate now, mint nothing."""
    await SqlGateRepository(db).get_gate(asset)
    async with gate_lock(asset):
        guard = await _build_guard(db, asset, feed_factory, clock)
        return guard.config, await guard.check()
