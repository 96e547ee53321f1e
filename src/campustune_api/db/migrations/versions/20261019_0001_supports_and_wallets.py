"""supports and artist wallets

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "supports",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("supporter_id", sa.String(length=64), nullable=False),
        sa.Column("artist_id", sa.String(length=64), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("payment_method", sa.String(length=32), nullable=False),
        sa.Column("message", sa.String(length=500), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("transaction_id", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_supports_amount_positive"),
        sa.CheckConstraint(
            "status in ('pending', 'completed', 'failed')",
            name="ck_supports_status",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("transaction_id", name="uq_supports_transaction_id"),
    )
    op.create_index("ix_supports_supporter_id", "supports", ["supporter_id"])
    op.create_index("ix_supports_artist_id_created_at", "supports", ["artist_id", "created_at"])

    op.create_table(
        "artist_wallets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("artist_id", sa.String(length=64), nullable=False),
        sa.Column("total_received", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("balance", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("balance >= 0", name="ck_artist_wallets_balance_non_negative"),
        sa.CheckConstraint(
            "total_received >= balance",
            name="ck_artist_wallets_total_covers_balance",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("artist_id", name="uq_artist_wallets_artist_id"),
    )


def downgrade() -> None:
    op.drop_table("artist_wallets")
    op.drop_index("ix_supports_artist_id_created_at", table_name="supports")
    op.drop_index("ix_supports_supporter_id", table_name="supports")
    op.drop_table("supports")
