"""initial bookkeeping schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ACCOUNT_TYPE = sa.Enum(
    "ASSET", "LIABILITY", "EQUITY", "REVENUE", "EXPENSE",
    name="account_type_enum",
)
BALANCE_SIDE = sa.Enum("DEBIT", "CREDIT", name="balance_side_enum")
MATCH_TYPE = sa.Enum(
    "CONTAINS", "EXACT", "STARTS_WITH", "ENDS_WITH", "REGEX",
    name="match_type_enum",
)
RULE_SOURCE = sa.Enum("SYSTEM", "USER", name="rule_source_enum")
CLASSIFICATION_SOURCE = sa.Enum(
    "RULE", "MANUAL", name="classification_source_enum"
)
PERIOD_STATUS = sa.Enum(
    "OPEN", "PROCESSED", name="period_status_enum", create_constraint=True
)


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False, unique=True),
        sa.Column("bank_account_code", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "account_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "organization_id", sa.Integer(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column("key", sa.String(50), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("account_type", ACCOUNT_TYPE, nullable=False),
        sa.Column("normal_balance", BALANCE_SIDE, nullable=False),
        sa.UniqueConstraint(
            "organization_id", "key", name="uq_category_org_key"
        ),
    )

    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "organization_id", sa.Integer(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column(
            "category_id", sa.Integer(),
            sa.ForeignKey("account_categories.id"), nullable=False,
        ),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_bank_account", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "organization_id", "code", name="uq_account_org_code"
        ),
    )

    op.create_table(
        "mapping_rules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "organization_id", sa.Integer(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("match_type", MATCH_TYPE, nullable=False),
        sa.Column("pattern", sa.String(255), nullable=False),
        sa.Column("account_code", sa.String(20), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("source", RULE_SOURCE, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "fiscal_periods",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "organization_id", sa.Integer(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", PERIOD_STATUS, nullable=False),
        sa.Column("total_debits", sa.Numeric(19, 2), nullable=False),
        sa.Column("total_credits", sa.Numeric(19, 2), nullable=False),
        sa.Column("journal_entry_count", sa.Integer(), nullable=False),
        sa.Column("unclassified_count", sa.Integer(), nullable=False),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "bank_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "organization_id", sa.Integer(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column(
            "fiscal_period_id", sa.Integer(),
            sa.ForeignKey("fiscal_periods.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column("debit_amount", sa.Numeric(19, 2), nullable=False),
        sa.Column("credit_amount", sa.Numeric(19, 2), nullable=False),
        sa.Column("balance", sa.Numeric(19, 2), nullable=True),
        sa.Column("account_code", sa.String(20), nullable=True, index=True),
        sa.Column(
            "classification_source", CLASSIFICATION_SOURCE, nullable=True
        ),
        sa.Column("classified_by", sa.String(200), nullable=True),
        sa.Column("classified_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "(debit_amount > 0 AND credit_amount = 0) OR "
            "(credit_amount > 0 AND debit_amount = 0)",
            name="ck_bank_transaction_one_side",
        ),
    )

    op.create_table(
        "journal_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "organization_id", sa.Integer(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column(
            "fiscal_period_id", sa.Integer(),
            sa.ForeignKey("fiscal_periods.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column("reference", sa.String(100), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("created_by", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "journal_entry_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "journal_entry_id", sa.Integer(),
            sa.ForeignKey("journal_entries.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column("line_number", sa.Integer(), nullable=False),
        sa.Column(
            "account_id", sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="RESTRICT"),
            nullable=False, index=True,
        ),
        sa.Column("debit_amount", sa.Numeric(19, 2), nullable=False),
        sa.Column("credit_amount", sa.Numeric(19, 2), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column(
            "source_transaction_id", sa.Integer(),
            sa.ForeignKey("bank_transactions.id", ondelete="SET NULL"),
            nullable=True, index=True,
        ),
        sa.CheckConstraint(
            "(debit_amount > 0 AND credit_amount = 0) OR "
            "(credit_amount > 0 AND debit_amount = 0)",
            name="ck_journal_line_one_side",
        ),
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "organization_id", sa.Integer(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=True, index=True,
        ),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("journal_entry_lines")
    op.drop_table("journal_entries")
    op.drop_table("bank_transactions")
    op.drop_table("fiscal_periods")
    op.drop_table("mapping_rules")
    op.drop_table("accounts")
    op.drop_table("account_categories")
    op.drop_table("organizations")
