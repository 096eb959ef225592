"""TokenBalance ORM: one holder's balance of one token."""

import uuid

from sqlalchemy import String, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from porgate.db.base import Base
from porgate.db.types import TokenAmount


class TokenBalance(Base):
    """Balance row, unique per (token, holder)."""
    __tablename__ = "token_balances"
    __table_args__ = (
        UniqueConstraint("token_symbol", "holder", name="uq_token_holder"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    token_symbol: Mapped[str] = mapped_column(
        String(32), ForeignKey("tokens.symbol"), nullable=False,
    )
    holder: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[int] = mapped_column(TokenAmount, nullable=False, default=0)
