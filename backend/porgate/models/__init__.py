"""ORM Models: SQLAlchemy declarative models for ledger and gate entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Gate is the aggregate root for config changes and issuance attempts

Design Decisions:
    - One file per entity for locality (ADR: ExMA max 3-4 files to understand a feature)
    - All models imported here so Base.metadata holds every table (and every
      ForeignKey target) before create_all or Alembic autogenerate runs
"""

from porgate.models.token import Token  # noqa: F401
from porgate.models.token_balance import TokenBalance  # noqa: F401
from porgate.models.gate import Gate  # noqa: F401
from porgate.models.gate_config_change import GateConfigChange  # noqa: F401
from porgate.models.issuance_attempt import IssuanceAttempt  # noqa: F401
