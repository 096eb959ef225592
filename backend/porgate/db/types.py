"""Column Types: arbitrary-precision token amounts.

Invariants:
    - Amounts round-trip exactly up to 78 digits (2**256 - 1 fits)
    - Negative amounts are rejected on write

Design Decisions:
    - Stored as decimal text, not NUMERIC: SQLite silently degrades large
      NUMERIC values to REAL, and tests run on SQLite
"""

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class TokenAmount(TypeDecorator):
    """Unsigned integer persisted as its base-10 string."""

    impl = String(80)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if value < 0:
            raise ValueError(f"token amounts are unsigned: {value}")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
