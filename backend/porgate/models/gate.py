"""Gate ORM: persisted GateConfig for one issued token.

Invariants:
    - asset_symbol (the issued token) is the primary key: one gate per token
    - heartbeat_seconds <= max_age_seconds (enforced by core/gate_config.py)
    - max_age_seconds written once at creation, never updated
    - feed_ref NULL means the gate is bypassed

Design Decisions:
    - Flat columns mirror GateConfig one-to-one: conversion lives in gate_store
    - No ORM relationships: audit rows are queried by asset_symbol,
      deletes cascade at the FK (ondelete="CASCADE")
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from porgate.db.base import Base


class Gate(Base):
    """Reserve gate in front of one token's mint."""
    __tablename__ = "gates"
    __table_args__ = (
        CheckConstraint(
            "heartbeat_seconds > 0 AND heartbeat_seconds <= max_age_seconds",
            name="ck_gates_heartbeat_bounds",
        ),
    )

    asset_symbol: Mapped[str] = mapped_column(
        String(32), ForeignKey("tokens.symbol"), primary_key=True,
    )
    underlying_symbol: Mapped[str] = mapped_column(
        String(32), ForeignKey("tokens.symbol"), nullable=False,
    )
    feed_ref: Mapped[str | None] = mapped_column(String(500), nullable=True)
    heartbeat_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    max_age_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
