"""Token ORM: a fungible asset tracked by the base ledger.

Invariants:
    - symbol is the primary key
    - total_supply equals the sum of all TokenBalance.amount rows for the token
    - decimals fixed at registration

Design Decisions:
    - Base ledger lives beside the gate only so the service is runnable end-to-end;
      the gate reads it through the UnderlyingAsset/IssuancePrimitive protocols
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from porgate.db.base import Base
from porgate.db.types import TokenAmount


class Token(Base):
    """Ledger token with its circulating supply."""
    __tablename__ = "tokens"

    symbol: Mapped[str] = mapped_column(String(32), primary_key=True)
    decimals: Mapped[int] = mapped_column(Integer, nullable=False)
    total_supply: Mapped[int] = mapped_column(
        TokenAmount, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
