"""Gate Routes: create gates, read config, and administer feed / heartbeat.

Invariants:
    - Admin routes pass the caller straight to GateAdmin (authorization lives there)
    - Responses expose effective values (heartbeat 0 is never echoed back)
    - A change event has the same wire types on PUT and on GET /events:
      heartbeat values are ints, feed values strings or null
    - Unknown gates surface as RESOURCE_NOT_FOUND (404) via the global handler
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from porgate.api.dependencies import AssetPath, get_caller
from porgate.config import Settings, get_settings
from porgate.core.domain_types import Address, AssetSymbol, ConfigChange, FeedRef
from porgate.infrastructure.database import get_db
from porgate.infrastructure.gate_store import SqlGateRepository, decode_change_value
from porgate.schemas.gate import (
    ConfigChangeResponse, GateConfigResponse, GateCreate,
    SetFeedRequest, SetHeartbeatRequest,
)
from porgate.services.gate_admin import GateAdmin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/gates", tags=["gates"])


def _gate_admin(db: AsyncSession, settings: Settings) -> GateAdmin:
    return GateAdmin(
        db, settings.admin_address, max_age_seconds=settings.por_max_age_seconds,
    )


def _change_response(change: ConfigChange, caller: Address) -> ConfigChangeResponse:
    return ConfigChangeResponse(
        field=change.field.value,
        old_value=change.old_value,
        new_value=change.new_value,
        caller=caller,
    )


async def _config_response(
    db: AsyncSession, asset: AssetSymbol,
) -> GateConfigResponse:
    repo = SqlGateRepository(db)
    gate = await repo.get_gate(asset)
    config = await repo.load_config(asset)
    return GateConfigResponse(
        asset_symbol=gate.asset_symbol,
        underlying_symbol=gate.underlying_symbol,
        feed=config.feed,
        heartbeat_seconds=config.heartbeat_seconds,
        max_age_seconds=config.max_age_seconds,
    )


@router.post(
    "", response_model=GateConfigResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_gate(
    body: GateCreate,
    caller: Address | None = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Create a reserve gate (admin only)."""
    asset = AssetSymbol(body.asset_symbol)
    await _gate_admin(db, settings).create_gate(
        caller,
        asset,
        body.asset_decimals,
        AssetSymbol(body.underlying_symbol),
        body.underlying_decimals,
        feed=FeedRef(body.feed) if body.feed else None,
    )
    return await _config_response(db, asset)


@router.get("/{asset}", response_model=GateConfigResponse)
async def get_gate(asset: AssetPath, db: AsyncSession = Depends(get_db)):
    """Read interface: feed, heartbeat, and max age."""
    return await _config_response(db, AssetSymbol(asset))


@router.put("/{asset}/feed", response_model=ConfigChangeResponse)
async def set_feed(
    asset: AssetPath,
    body: SetFeedRequest,
    caller: Address | None = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Replace or clear the proof-of-reserves feed (admin only)."""
    change = await _gate_admin(db, settings).set_feed(
        caller, AssetSymbol(asset), FeedRef(body.feed) if body.feed else None,
    )
    return _change_response(change, caller)


@router.put("/{asset}/heartbeat", response_model=ConfigChangeResponse)
async def set_heartbeat(
    asset: AssetPath,
    body: SetHeartbeatRequest,
    caller: Address | None = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Set the freshness window; 0 selects max age (admin only)."""
    change = await _gate_admin(db, settings).set_heartbeat(
        caller, AssetSymbol(asset), body.heartbeat_seconds,
    )
    return _change_response(change, caller)


@router.get("/{asset}/events")
async def list_config_changes(
    asset: AssetPath,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Config change history, newest first."""
    changes = await SqlGateRepository(db).list_changes(
        AssetSymbol(asset), limit=limit, offset=offset,
    )
    return {
        "events": [
            ConfigChangeResponse(
                field=c.field,
                old_value=decode_change_value(c.field, c.old_value),
                new_value=decode_change_value(c.field, c.new_value),
                caller=c.caller,
                created_at=c.created_at,
            ).model_dump(mode="json")
            for c in changes
        ],
        "pagination": {"limit": limit, "offset": offset},
    }
