from io import StringIO

from rich.console import Console

from payment_reconciliation.models import InvoiceRecord, MergedPayment, ParsedSplit, SupplierRecord
from payment_reconciliation.report import linked_invoice, render_payments
from payment_reconciliation.suppliers import SupplierRoster


def _roster() -> SupplierRoster:
    return SupplierRoster(
        "b1",
        [SupplierRecord(id="s1", name="ACME")],
        [InvoiceRecord(id="i1", invoice_number="INV-7", supplier_id="s1", total_amount=300.0)],
    )


def _payment(supplier: str, *refs: str) -> MergedPayment:
    splits = [ParsedSplit(payment_method="bank_transfer", amount=100.0, reference_number=r) for r in refs]
    return MergedPayment(
        supplier_name=supplier,
        payment_date="2025-01-01",
        total_amount=100.0 * len(splits),
        splits=splits,
    )


def _render(payments, roster=None) -> str:
    out = StringIO()
    render_payments(Console(file=out, width=140, color_system=None), payments, roster)
    return out.getvalue()


def test_linked_invoice_uses_split_references():
    roster = _roster()

    assert linked_invoice(_payment("acme", "", " INV-7 "), roster).id == "i1"
    assert linked_invoice(_payment("ACME", "INV-8"), roster) is None
    assert linked_invoice(_payment("Other", "INV-7"), roster) is None


def test_payment_table_shows_linked_invoice_with_roster():
    text = _render([_payment("ACME", "INV-7"), _payment("Other", "X")], _roster())

    assert "Invoice" in text
    assert "INV-7" in text
    assert "Other" in text


def test_payment_table_without_roster_has_no_invoice_column():
    text = _render([_payment("ACME", "INV-7")])

    assert "Invoice" not in text
    assert "ACME" in text
