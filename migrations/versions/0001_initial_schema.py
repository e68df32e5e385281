"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("balance_cents", sa.BigInteger(), nullable=False),
        sa.Column("icon", sa.String(50), nullable=False),
        sa.Column("color", sa.String(50), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_accounts_user_id", "accounts", ["user_id"])

    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("icon", sa.String(50), nullable=False),
        sa.Column("color", sa.String(50), nullable=False),
        sa.Column(
            "type",
            sa.Enum("expense", "income", name="category_type_enum"),
            nullable=False,
        ),
        sa.Column(
            "parent_id",
            sa.String(36),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_categories_user_id", "categories", ["user_id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column(
            "transaction_type",
            sa.Enum("expense", "income", "transfer", name="transaction_type_enum"),
            nullable=False,
        ),
        sa.Column(
            "account_id", sa.String(36),
            sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "from_account_id", sa.String(36),
            sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "to_account_id", sa.String(36),
            sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "category_id", sa.String(36),
            sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("amount_cents", sa.BigInteger(), nullable=True),
        sa.Column("amount_sent_cents", sa.BigInteger(), nullable=True),
        sa.Column("amount_received_cents", sa.BigInteger(), nullable=True),
        sa.Column("date", sa.BigInteger(), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column(
            "expense_type",
            sa.Enum("mandatory", "optional", name="expense_type_enum"),
            nullable=True,
        ),
        sa.Column(
            "income_type",
            sa.Enum("active", "passive", name="income_type_enum"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index(
        "transactions_user_date_idx", "transactions", ["user_id", "date"]
    )
    op.create_index(
        "transactions_user_account_idx", "transactions", ["user_id", "account_id"]
    )
    op.create_index(
        "transactions_user_category_idx", "transactions", ["user_id", "category_id"]
    )

    op.create_table(
        "imports",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "pending", "running", "completed", "failed",
                name="import_status_enum",
            ),
            nullable=False,
        ),
        sa.Column("meta", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_imports_user_id", "imports", ["user_id"])
    op.create_index("ix_imports_source", "imports", ["source"])


def downgrade() -> None:
    op.drop_table("imports")
    op.drop_table("transactions")
    op.drop_table("categories")
    op.drop_table("accounts")
