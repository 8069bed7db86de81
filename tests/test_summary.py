import pytest

from payment_reconciliation.models import MergedPayment, ParsedSplit, SupplierRecord
from payment_reconciliation.summary import format_shekels, summarize
from payment_reconciliation.suppliers import SupplierRoster


def _payment(supplier: str, *splits: tuple[str, float]) -> MergedPayment:
    parts = [ParsedSplit(payment_method=m, amount=a) for m, a in splits]
    return MergedPayment(
        supplier_name=supplier,
        payment_date="2025-01-01",
        total_amount=sum(a for _, a in splits),
        splits=parts,
    )


def test_summary_counts_and_method_breakdown():
    payments = [
        _payment("ACME", ("check", 500.0), ("check", 500.0)),
        _payment("Bazaar", ("cash", 20.0), ("check", 5.5)),
        _payment("Bazaar", ("bit", 1.0)),
    ]
    roster = SupplierRoster("b1", [SupplierRecord(id="s1", name="acme")])

    summary = summarize(payments, roster)

    assert summary.payments_count == 3
    assert summary.matched_count == 1
    assert summary.unmatched_count == 2
    assert summary.splits_count == 5
    assert summary.total_amount == pytest.approx(1026.5)
    assert [(m.method, m.count, m.amount) for m in summary.by_method] == [
        ("check", 3, 1005.5),
        ("cash", 1, 20.0),
        ("bit", 1, 1.0),
    ]
    assert summary.by_method[0].label == "צ'ק"
    assert summary.unmatched_suppliers == ("Bazaar",)


def test_summary_of_nothing():
    summary = summarize([], None)

    assert summary.payments_count == 0
    assert summary.total_amount == 0
    assert summary.by_method == ()


@pytest.mark.parametrize(
    ("amount", "text"),
    [(1180.5, "₪1,180.5"), (1000, "₪1,000"), (0.1 + 0.2, "₪0.3"), (12.345, "₪12.35"), (0, "₪0")],
)
def test_format_shekels(amount, text):
    assert format_shekels(amount) == text
