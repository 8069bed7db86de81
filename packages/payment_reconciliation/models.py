"""Data models for ``payment_reconciliation``.

Three families live here:

- CSV-side views (``Row``, ``ParsedCsv``) produced by the ingest adapter.
- Reconciliation output (``ParsedSplit``, ``MergedPayment``,
  ``ReconciliationResult``) produced by the engine and reviewed by operators.
- Store-side snapshots (``BusinessRecord``, ``SupplierRecord``,
  ``InvoiceRecord``) and validated insert payloads (``PaymentInsert``,
  ``PaymentSplitInsert``) used by the importer.

Amounts on the reconciliation side are plain floats in currency units and
dates are ISO ``YYYY-MM-DD`` strings (empty when unknown), so earliest-date
selection is a string minimum. Conversion to ``Decimal``/``date`` happens
only in the insert payloads.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .normalizers import PAYMENT_METHODS, is_uuid

# ---------------------------------------------------------------------------
# CSV-side views
# ---------------------------------------------------------------------------

type Row = Mapping[str, str]
"""One CSV data line: original header → raw cell text."""


@dataclass(frozen=True, slots=True)
class ParsedCsv:
    """Rows of one uploaded file plus its header list in file order."""

    headers: tuple[str, ...]
    rows: tuple[dict[str, str], ...]
    name: str = ""

    def __len__(self) -> int:
        return len(self.rows)


# ---------------------------------------------------------------------------
# Reconciliation output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParsedSplit:
    """One actual money movement belonging to a :class:`MergedPayment`."""

    payment_method: str
    amount: float
    installment_number: int = 1
    installments_count: int = 1
    reference_number: str = ""
    check_number: str = ""
    due_date: str = ""
    notes: str = ""
    credit_card_id: str = ""


@dataclass(slots=True)
class MergedPayment:
    """A logical payment to one supplier, possibly split across methods.

    Built incrementally by the reconciliation passes. A *bare* payment
    (``total_amount == 0`` and no splits) only exists between Pass 2 and
    Pass 3 as an attachment target; finalization drops or fills it.
    """

    supplier_name: str
    payment_date: str
    total_amount: float
    expense_type: str = ""
    notes: str = ""
    receipt_url: str = ""
    splits: list[ParsedSplit] = field(default_factory=list)

    @property
    def is_bare(self) -> bool:
        return not self.splits and self.total_amount == 0

    @property
    def methods(self) -> list[str]:
        """Distinct split methods in first-seen order."""
        return list(dict.fromkeys(s.payment_method for s in self.splits))


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    payments: list[MergedPayment]
    # Operator-facing diagnostics (dropped records), in the order encountered
    errors: list[str]
    # Supplier names with no roster match, first-seen order, as written
    unmatched_suppliers: list[str]


@dataclass(slots=True)
class ImportResult:
    inserted: int = 0
    skipped: int = 0
    payment_ids: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Store-side snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BusinessRecord:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class SupplierRecord:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class InvoiceRecord:
    id: str
    invoice_number: str
    supplier_id: str
    total_amount: float | None = None


# ---------------------------------------------------------------------------
# Validated insert payloads
# ---------------------------------------------------------------------------

_CENTS = Decimal("0.01")


def to_cents(raw: Any) -> Decimal:
    """Money value as a two-place ``Decimal``, rounding half up."""

    try:
        d = Decimal(str(raw))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    return d.quantize(_CENTS, rounding=ROUND_HALF_UP)


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class PaymentInsert(BaseModel):
    """Row written to ``payments``."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    business_id: str
    supplier_id: str
    payment_date: date
    total_amount: Decimal
    notes: str | None = None
    receipt_url: str | None = None
    created_by: str | None = None

    @field_validator("total_amount", mode="before")
    @classmethod
    def _quantize(cls, v: Any) -> Decimal:
        return to_cents(v)

    @field_validator("notes", "receipt_url", "created_by", mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> Any:
        return _blank_to_none(v)


class PaymentSplitInsert(BaseModel):
    """Row written to ``payment_splits``.

    ``credit_card_id`` is kept only when it is shaped like a UUID; anything
    else (card nicknames, last-four digits) is dropped rather than rejected.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    payment_id: str
    payment_method: str
    amount: Decimal = Field(gt=0)
    installments_count: int = Field(ge=1)
    installment_number: int = Field(ge=1)
    due_date: date | None = None
    reference_number: str | None = None
    check_number: str | None = None
    credit_card_id: str | None = None

    @field_validator("payment_method")
    @classmethod
    def _known_method(cls, v: str) -> str:
        if v not in PAYMENT_METHODS:
            raise ValueError(f"unknown payment method: {v!r}")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def _quantize(cls, v: Any) -> Decimal:
        return to_cents(v)

    @field_validator("due_date", "reference_number", "check_number", mode="before")
    @classmethod
    def _optional(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("credit_card_id", mode="before")
    @classmethod
    def _uuid_or_none(cls, v: Any) -> str | None:
        if isinstance(v, str) and is_uuid(v.strip()):
            return v.strip()
        return None


__all__ = [
    "Row",
    "ParsedCsv",
    "ParsedSplit",
    "MergedPayment",
    "ReconciliationResult",
    "ImportResult",
    "BusinessRecord",
    "SupplierRecord",
    "InvoiceRecord",
    "PaymentInsert",
    "PaymentSplitInsert",
    "to_cents",
]
