"""Pre-import review figures for a reconciled payment list."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .models import MergedPayment
from .normalizers import method_label
from .suppliers import SupplierRoster


@dataclass(frozen=True, slots=True)
class MethodBreakdown:
    method: str
    label: str
    count: int
    amount: float


@dataclass(frozen=True, slots=True)
class PaymentSummary:
    payments_count: int
    matched_count: int
    splits_count: int
    total_amount: float
    # Per split method, in first-seen order
    by_method: tuple[MethodBreakdown, ...]
    unmatched_suppliers: tuple[str, ...]

    @property
    def unmatched_count(self) -> int:
        return self.payments_count - self.matched_count


def summarize(payments: Sequence[MergedPayment], roster: SupplierRoster | None = None) -> PaymentSummary:
    """Counts and sums over ``payments``.

    Without a roster every payment counts as unmatched.
    """

    counts: dict[str, tuple[int, float]] = {}
    for p in payments:
        for s in p.splits:
            n, total = counts.get(s.payment_method, (0, 0.0))
            counts[s.payment_method] = (n + 1, total + s.amount)

    matched = [p for p in payments if roster is not None and roster.is_known(p.supplier_name)]
    unmatched = roster.unmatched(p.supplier_name for p in payments) if roster is not None else list(
        dict.fromkeys(p.supplier_name for p in payments)
    )
    return PaymentSummary(
        payments_count=len(payments),
        matched_count=len(matched),
        splits_count=sum(len(p.splits) for p in payments),
        total_amount=sum(p.total_amount for p in payments),
        by_method=tuple(
            MethodBreakdown(method=m, label=method_label(m), count=n, amount=total)
            for m, (n, total) in counts.items()
        ),
        unmatched_suppliers=tuple(unmatched),
    )


def format_shekels(amount: float) -> str:
    """``1180.5`` → ``"₪1,180.5"``; at most two decimals, trailing zeros trimmed."""

    q = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    text = f"{q:,.2f}".rstrip("0").rstrip(".")
    return f"₪{text}"


__all__ = ["MethodBreakdown", "PaymentSummary", "summarize", "format_shekels"]
