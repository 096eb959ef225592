"""Gate Administration: admin-gated creation and mutation of gate configs.

Invariants:
    - require_admin runs first in every operation: unauthorized calls touch nothing
    - Mutations resolve the gate before taking its lock, then hold the gates row
      FOR UPDATE until config + change event commit together
    - A rejected mutation (HeartbeatTooLargeError) rolls back and records nothing
    - New gates start with heartbeat == max_age and the max_age from settings

Design Decisions:
    - Class bound to (db, admin) per request: mirrors the per-dispatch handler objects
    - Change events both logged and persisted (gate_config_changes) for audit
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from porgate.core.domain_types import (
    Address, AssetSymbol, ConfigChange, FeedRef, MAX_AGE_SECONDS,
)
from porgate.core.enforce_admin import require_admin
from porgate.core.errors import ErrorContext, PorGateError
from porgate.core.gate_config import GateConfig
from porgate.infrastructure.gate_store import SqlGateRepository
from porgate.infrastructure.ledger import ensure_token
from porgate.services.gate_locks import gate_lock

logger = logging.getLogger(__name__)


class GateAdmin:
    """Administrator operations for reserve gates."""

    def __init__(
        self, db: AsyncSession, admin: str, max_age_seconds: int = MAX_AGE_SECONDS,
    ):
        self._db = db
        self._admin = admin
        self._max_age_seconds = max_age_seconds
        self._repo = SqlGateRepository(db)

    async def create_gate(
        self,
        caller: Address | None,
        asset: AssetSymbol,
        asset_decimals: int,
        underlying: AssetSymbol,
        underlying_decimals: int,
        feed: FeedRef | None = None,
    ) -> GateConfig:
        """Register a gate (and its tokens if new). Heartbeat starts at max age."""
        require_admin(caller, self._admin, ErrorContext(asset=asset))
        async with gate_lock(asset):
            config = GateConfig(max_age_seconds=self._max_age_seconds, feed=feed)
            try:
                await ensure_token(self._db, asset, asset_decimals)
                await ensure_token(self._db, underlying, underlying_decimals)
                await self._repo.create_gate(asset, underlying, config)
            except PorGateError:
                await self._db.rollback()
                raise
            await self._db.commit()
        logger.info(
            f"Gate created for {asset} backed by {underlying}",
            extra={"asset": asset, "caller": caller, "feed": feed},
        )
        return config

    async def set_feed(
        self, caller: Address | None, asset: AssetSymbol, new_feed: FeedRef | None,
    ) -> ConfigChange:
        """Replace or clear the gate's feed. Always succeeds for the admin."""
        require_admin(caller, self._admin, ErrorContext(asset=asset))
        await self._repo.get_gate(asset)
        async with gate_lock(asset):
            config = await self._repo.load_config(asset, for_update=True)
            change = config.set_feed(new_feed)
            return await self._commit_change(caller, asset, config, change)

    async def set_heartbeat(
        self, caller: Address | None, asset: AssetSymbol, new_heartbeat: int,
    ) -> ConfigChange:
        """Set the freshness window; 0 means max age."""
        require_admin(caller, self._admin, ErrorContext(asset=asset))
        await self._repo.get_gate(asset)
        async with gate_lock(asset):
            config = await self._repo.load_config(asset, for_update=True)
            try:
                change = config.set_heartbeat(new_heartbeat)
            except PorGateError as e:
                e.context.asset = asset
                e.context.caller = caller
                await self._db.rollback()
                raise
            return await self._commit_change(caller, asset, config, change)

    async def _commit_change(
        self,
        caller: Address,
        asset: AssetSymbol,
        config: GateConfig,
        change: ConfigChange,
    ) -> ConfigChange:
        await self._repo.save_config(asset, config)
        await self._repo.record_change(asset, change, caller)
        await self._db.commit()
        logger.info(
            f"Gate {asset} {change.field.value} changed: "
            f"{change.old_value} -> {change.new_value}",
            extra={"asset": asset, "caller": caller},
        )
        return change
