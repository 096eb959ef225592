"""GateConfigChange ORM: audit trail of admin mutations (old value, new value).

Invariants:
    - One row per successful set_feed / set_heartbeat
    - Rejected mutations write nothing

Design Decisions:
    - Values stored as text: feed refs and heartbeats share one column pair
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from porgate.db.base import Base


class GateConfigChange(Base):
    """Change event for one gate config field."""
    __tablename__ = "gate_config_changes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    asset_symbol: Mapped[str] = mapped_column(
        String(32), ForeignKey("gates.asset_symbol", ondelete="CASCADE"),
        nullable=False,
    )
    field: Mapped[str] = mapped_column(String(20), nullable=False)
    old_value: Mapped[str | None] = mapped_column(String(500), nullable=True)
    new_value: Mapped[str | None] = mapped_column(String(500), nullable=True)
    caller: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
