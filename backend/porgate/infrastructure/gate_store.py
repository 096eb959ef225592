"""Gate Store: SQL implementation of GateRepository.

Invariants:
    - GateConfig <-> Gate row conversion lives only here
    - for_update=True reads take SELECT ... FOR UPDATE on the gates row: every
      issuance and every set_feed / set_heartbeat on one gate queue on that row,
      across worker processes, until the transaction ends
    - Change values come back typed: heartbeat as int, feed as str or None
    - max_age_seconds is written on create and never on save
    - Nothing here commits: the caller owns the transaction
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from porgate.core.domain_types import (
    Address, AssetSymbol, ConfigChange, ConfigField, DenyReason, FeedRef,
)
from porgate.core.errors import ConflictError, ErrorContext, ResourceNotFoundError
from porgate.core.gate_config import GateConfig
from porgate.models.gate import Gate
from porgate.models.gate_config_change import GateConfigChange
from porgate.models.issuance_attempt import IssuanceAttempt

logger = logging.getLogger(__name__)


def _as_text(value: str | int | None) -> str | None:
    return None if value is None else str(value)


def decode_change_value(field: str, value: str | None) -> str | int | None:
    """Inverse of the text encoding used for gate_config_changes values."""
    if value is None:
        return None
    if field == ConfigField.HEARTBEAT.value:
        return int(value)
    return value


def gate_query(asset: AssetSymbol, for_update: bool = False) -> Select:
    stmt = (
        select(Gate)
        .where(Gate.asset_symbol == asset)
        .execution_options(populate_existing=True)
    )
    return stmt.with_for_update() if for_update else stmt


class SqlGateRepository:
    """Persists gate configs, change events, and issuance attempts."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_gate(self, asset: AssetSymbol, for_update: bool = False) -> Gate:
        result = await self._db.execute(gate_query(asset, for_update))
        gate = result.scalar_one_or_none()
        if gate is None:
            raise ResourceNotFoundError(
                "Gate", asset, ErrorContext(asset=asset),
            )
        return gate

    async def create_gate(
        self,
        asset: AssetSymbol,
        underlying: AssetSymbol,
        config: GateConfig,
    ) -> Gate:
        if await self._db.get(Gate, asset) is not None:
            raise ConflictError(
                f"Gate for '{asset}' already exists", "GATE_ALREADY_EXISTS",
                ErrorContext(asset=asset),
            )
        gate = Gate(
            asset_symbol=asset,
            underlying_symbol=underlying,
            feed_ref=config.feed,
            heartbeat_seconds=config.heartbeat_seconds,
            max_age_seconds=config.max_age_seconds,
        )
        self._db.add(gate)
        await self._db.flush()
        return gate

    async def load_config(
        self, asset: AssetSymbol, for_update: bool = False,
    ) -> GateConfig:
        gate = await self.get_gate(asset, for_update)
        return GateConfig(
            max_age_seconds=gate.max_age_seconds,
            feed=FeedRef(gate.feed_ref) if gate.feed_ref else None,
            heartbeat_seconds=gate.heartbeat_seconds,
        )

    async def save_config(self, asset: AssetSymbol, config: GateConfig) -> None:
        gate = await self.get_gate(asset)
        gate.feed_ref = config.feed
        gate.heartbeat_seconds = config.heartbeat_seconds
        gate.updated_at = datetime.now(timezone.utc)
        await self._db.flush()

    async def record_change(
        self, asset: AssetSymbol, change: ConfigChange, caller: Address,
    ) -> None:
        self._db.add(GateConfigChange(
            asset_symbol=asset,
            field=change.field.value,
            old_value=_as_text(change.old_value),
            new_value=_as_text(change.new_value),
            caller=caller,
        ))
        await self._db.flush()

    async def record_attempt(
        self,
        asset: AssetSymbol,
        recipient: Address,
        amount: int,
        reason: DenyReason | None,
    ) -> None:
        self._db.add(IssuanceAttempt(
            asset_symbol=asset,
            recipient=recipient,
            amount=amount,
            deny_reason=reason.value if reason else None,
        ))
        await self._db.flush()

    async def list_changes(
        self, asset: AssetSymbol, limit: int = 50, offset: int = 0,
    ) -> list[GateConfigChange]:
        await self.get_gate(asset)
        result = await self._db.execute(
            select(GateConfigChange)
            .where(GateConfigChange.asset_symbol == asset)
            .order_by(GateConfigChange.created_at.desc())
            .limit(limit)
            .offset(offset),
        )
        return list(result.scalars().all())
