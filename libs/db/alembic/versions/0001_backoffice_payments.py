# ruff: noqa: I001
"""Back-office core tables: businesses, suppliers, invoices, payments, splits.

Revision ID: 0001_backoffice_payments
Revises: None
Create Date: 2025-11-02
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_backoffice_payments"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Mirrored from db.models.backoffice.PAYMENT_METHODS at the time of writing.
_PAYMENT_METHODS = (
    "bank_transfer",
    "cash",
    "check",
    "bit",
    "paybox",
    "credit_card",
    "credit_company",
    "standing_order",
    "other",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "businesses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "suppliers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("business_id", sa.String(36), sa.ForeignKey("businesses.id"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_suppliers_business_id", "suppliers", ["business_id"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("business_id", sa.String(36), sa.ForeignKey("businesses.id"), nullable=False),
        sa.Column("supplier_id", sa.String(36), sa.ForeignKey("suppliers.id"), nullable=False),
        sa.Column("invoice_number", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_invoices_business_id", "invoices", ["business_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("business_id", sa.String(36), sa.ForeignKey("businesses.id"), nullable=False),
        sa.Column("supplier_id", sa.String(36), sa.ForeignKey("suppliers.id"), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("receipt_url", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_payments_business_id", "payments", ["business_id"])

    op.create_table(
        "payment_splits",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "payment_id",
            sa.String(36),
            sa.ForeignKey("payments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("payment_method", sa.String(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("installments_count", sa.Integer(), nullable=False),
        sa.Column("installment_number", sa.Integer(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("reference_number", sa.Text(), nullable=True),
        sa.Column("check_number", sa.Text(), nullable=True),
        sa.Column("credit_card_id", sa.String(36), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "payment_method in (" + ",".join(f"'{m}'" for m in _PAYMENT_METHODS) + ")",
            name="ck_payment_splits_method",
        ),
        sa.CheckConstraint("amount > 0", name="ck_payment_splits_amount_positive"),
        sa.CheckConstraint(
            "installment_number >= 1 AND installments_count >= 1",
            name="ck_payment_splits_installments",
        ),
    )
    op.create_index("ix_payment_splits_payment_id", "payment_splits", ["payment_id"])


def downgrade() -> None:
    op.drop_index("ix_payment_splits_payment_id", table_name="payment_splits")
    op.drop_table("payment_splits")
    op.drop_index("ix_payments_business_id", table_name="payments")
    op.drop_table("payments")
    op.drop_index("ix_invoices_business_id", table_name="invoices")
    op.drop_table("invoices")
    op.drop_index("ix_suppliers_business_id", table_name="suppliers")
    op.drop_table("suppliers")
    op.drop_table("businesses")
