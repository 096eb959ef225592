"""Initial schema: tokens, token_balances, gates, gate_config_changes, issuance_attempts.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tokens",
        sa.Column("symbol", sa.String(32), primary_key=True),
        sa.Column("decimals", sa.Integer, nullable=False),
        sa.Column("total_supply", sa.String(80), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "token_balances",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("token_symbol", sa.String(32), sa.ForeignKey("tokens.symbol"), nullable=False),
        sa.Column("holder", sa.String(64), nullable=False),
        sa.Column("amount", sa.String(80), nullable=False, server_default="0"),
        sa.UniqueConstraint("token_symbol", "holder", name="uq_token_holder"),
    )

    op.create_table(
        "gates",
        sa.Column("asset_symbol", sa.String(32), sa.ForeignKey("tokens.symbol"), primary_key=True),
        sa.Column("underlying_symbol", sa.String(32), sa.ForeignKey("tokens.symbol"), nullable=False),
        sa.Column("feed_ref", sa.String(500), nullable=True),
        sa.Column("heartbeat_seconds", sa.Integer, nullable=False),
        sa.Column("max_age_seconds", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "heartbeat_seconds > 0 AND heartbeat_seconds <= max_age_seconds",
            name="ck_gates_heartbeat_bounds",
        ),
    )

    op.create_table(
        "gate_config_changes",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "asset_symbol", sa.String(32),
            sa.ForeignKey("gates.asset_symbol", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("field", sa.String(20), nullable=False),
        sa.Column("old_value", sa.String(500), nullable=True),
        sa.Column("new_value", sa.String(500), nullable=True),
        sa.Column("caller", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_gate_config_changes_asset_created",
        "gate_config_changes", ["asset_symbol", "created_at"],
    )

    op.create_table(
        "issuance_attempts",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "asset_symbol", sa.String(32),
            sa.ForeignKey("gates.asset_symbol", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("recipient", sa.String(64), nullable=False),
        sa.Column("amount", sa.String(80), nullable=False),
        sa.Column("deny_reason", sa.String(32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("issuance_attempts")
    op.drop_index("ix_gate_config_changes_asset_created", table_name="gate_config_changes")
    op.drop_table("gate_config_changes")
    op.drop_table("gates")
    op.drop_table("token_balances")
    op.drop_table("tokens")
