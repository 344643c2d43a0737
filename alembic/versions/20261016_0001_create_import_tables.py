"""create budget_txs, payees, transactions and splits tables

Revision ID: 20261016_0001
Revises:
Create Date: 2026-10-16 09:30:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261016_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "budget_txs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("amount", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=False), nullable=False),
        sa.Column("category", sa.String(length=255), nullable=False),
        sa.Column(
            "frequency",
            sa.Integer(),
            nullable=False,
            comment="How many times the amount is tracked through the year",
        ),
        sa.Column("memo", sa.String(length=1024), nullable=True),
        sa.Column("selected", sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_budget_txs_timestamp_category",
        "budget_txs",
        ["timestamp", "category"],
        unique=False,
    )

    op.create_table(
        "payees",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=255), nullable=True),
        sa.Column("selected", sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payees_name", "payees", ["name"], unique=False)

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=False), nullable=False),
        sa.Column("payee", sa.String(length=255), nullable=True),
        sa.Column("amount", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("category", sa.String(length=255), nullable=True),
        sa.Column("memo", sa.String(length=1024), nullable=True),
        sa.Column("bank_reference", sa.String(length=64), nullable=True),
        sa.Column("imported", sa.Boolean(), nullable=False),
        sa.Column("hidden", sa.Boolean(), nullable=False),
        sa.Column("selected", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_transactions_timestamp_hidden_category",
        "transactions",
        ["timestamp", "hidden", "category"],
        unique=False,
    )
    op.create_index("ix_transactions_imported", "transactions", ["imported"], unique=False)

    op.create_table(
        "splits",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "transaction_id",
            sa.Integer(),
            nullable=True,
            comment="Unset until the owning transaction has been inserted",
        ),
        sa.Column("amount", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("category", sa.String(length=255), nullable=True),
        sa.Column("memo", sa.String(length=1024), nullable=True),
        sa.ForeignKeyConstraint(["transaction_id"], ["transactions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_splits_transaction_id", "splits", ["transaction_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_splits_transaction_id", table_name="splits")
    op.drop_table("splits")
    op.drop_index("ix_transactions_imported", table_name="transactions")
    op.drop_index("ix_transactions_timestamp_hidden_category", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_payees_name", table_name="payees")
    op.drop_table("payees")
    op.drop_index("ix_budget_txs_timestamp_category", table_name="budget_txs")
    op.drop_table("budget_txs")
