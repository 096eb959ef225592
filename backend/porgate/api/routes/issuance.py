"""Issuance Routes: guarded mint, dry-run gate check, and balance reads.

Invariants:
    - POST /issue either mints exactly `amount` or fails with a specific code;
      a failure leaves balances and supply unchanged
    - GET /check never mints
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from porgate.api.dependencies import (
    AssetPath, HolderPath, get_clock, get_feed_factory,
)
from porgate.core.domain_types import Address, AssetSymbol
from porgate.core.errors import DENY_REASON_CODES
from porgate.core.repository_protocols import FeedAdapterFactory
from porgate.infrastructure.database import get_db
from porgate.infrastructure.gate_store import SqlGateRepository
from porgate.infrastructure.ledger import LedgerToken
from porgate.schemas.gate import GateCheckResponse, IssueRequest, IssueResponse
from porgate.services.issuance_guard import Clock, issue_through_gate, preview_gate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/gates", tags=["issuance"])


@router.post("/{asset}/issue", response_model=IssueResponse)
async def issue(
    asset: AssetPath,
    body: IssueRequest,
    db: AsyncSession = Depends(get_db),
    feed_factory: FeedAdapterFactory = Depends(get_feed_factory),
    clock: Clock = Depends(get_clock),
):
    """Mint through the proof-of-reserves gate."""
    balance = await issue_through_gate(
        db, AssetSymbol(asset), Address(body.recipient), body.amount,
        feed_factory, clock,
    )
    return IssueResponse(
        asset_symbol=asset,
        recipient=body.recipient,
        amount=body.amount,
        balance=balance,
    )


@router.get("/{asset}/check", response_model=GateCheckResponse)
async def check_gate(
    asset: AssetPath,
    db: AsyncSession = Depends(get_db),
    feed_factory: FeedAdapterFactory = Depends(get_feed_factory),
    clock: Clock = Depends(get_clock),
):
    """Evaluate the gate right now without minting."""
    config, decision = await preview_gate(
        db, AssetSymbol(asset), feed_factory, clock,
    )
    return GateCheckResponse(
        asset_symbol=asset,
        feed=config.feed,
        heartbeat_seconds=config.heartbeat_seconds,
        allowed=decision.allowed,
        deny_reason=decision.reason.value if decision.reason else None,
        error_code=DENY_REASON_CODES[decision.reason] if decision.reason else None,
    )


@router.get("/{asset}/balances/{holder}")
async def get_balance(
    asset: AssetPath, holder: HolderPath, db: AsyncSession = Depends(get_db),
):
    """Issued-token balance of one holder."""
    await SqlGateRepository(db).get_gate(AssetSymbol(asset))
    balance = await LedgerToken(db, AssetSymbol(asset)).balance_of(Address(holder))
    return {"asset_symbol": asset, "holder": holder, "balance": balance}
