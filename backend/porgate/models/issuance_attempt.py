"""IssuanceAttempt ORM: logging table for guarded issuance requests.

Invariants:
    - Every gated attempt (allowed or denied) is logged
    - deny_reason NULL means the issuance went through

Design Decisions:
    - Logging table, not enforcement: observability only, no decision depends on it
    - Denied attempts are written after the ledger transaction rolls back,
      so a denial never leaves ledger state behind
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from porgate.db.base import Base
from porgate.db.types import TokenAmount


class IssuanceAttempt(Base):
    """IssuanceAttempt log entry."""
    __tablename__ = "issuance_attempts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    asset_symbol: Mapped[str] = mapped_column(
        String(32), ForeignKey("gates.asset_symbol", ondelete="CASCADE"),
        nullable=False,
    )
    recipient: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[int] = mapped_column(TokenAmount, nullable=False)
    deny_reason: Mapped[str | None] = mapped_column(
        String(32), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
