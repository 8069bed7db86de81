"""Rich renderings of a reconciled payment list for operator review."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .models import InvoiceRecord, MergedPayment
from .normalizers import method_label
from .summary import PaymentSummary, format_shekels
from .suppliers import SupplierRoster


def render_summary(console: Console, summary: PaymentSummary, errors: Sequence[str] = ()) -> None:
    """Totals panel, per-method table, unmatched suppliers and diagnostics."""

    lines = [
        f"Payments: {summary.payments_count}",
        f"Matched suppliers: {summary.matched_count}/{summary.payments_count}",
        f"Splits: {summary.splits_count}",
        f"Total: {format_shekels(summary.total_amount)}",
    ]
    console.print(Panel("\n".join(lines), title="Reconciliation summary", border_style="cyan"))

    if summary.by_method:
        table = Table(title="By payment method")
        table.add_column("Method")
        table.add_column("Splits", justify="right")
        table.add_column("Amount", justify="right")
        for row in summary.by_method:
            table.add_row(row.label, str(row.count), format_shekels(row.amount))
        console.print(table)

    if summary.unmatched_suppliers:
        names = "\n".join(f"- {escape(n)}" for n in summary.unmatched_suppliers)
        console.print(
            Panel(
                names,
                title=f"Unmatched suppliers ({len(summary.unmatched_suppliers)})",
                border_style="red",
            )
        )

    if errors:
        body = "\n".join(escape(e) for e in errors)
        console.print(Panel(body, title=f"Skipped ({len(errors)})", border_style="yellow"))


def linked_invoice(payment: MergedPayment, roster: SupplierRoster) -> InvoiceRecord | None:
    """First supplier invoice whose number matches a split reference."""

    for split in payment.splits:
        inv = roster.find_invoice(payment.supplier_name, split.reference_number.strip())
        if inv is not None:
            return inv
    return None


def render_payments(
    console: Console,
    payments: Sequence[MergedPayment],
    roster: SupplierRoster | None = None,
) -> None:
    """Numbered payment table; row numbers are the ones the removal prompt takes.

    With a roster, unknown suppliers are shown in red and an ``Invoice``
    column lists the invoice a split reference points at.
    """

    table = Table(title="Payments")
    table.add_column("#", justify="right")
    table.add_column("Supplier")
    table.add_column("Date")
    table.add_column("Total", justify="right")
    table.add_column("Splits", justify="right")
    table.add_column("Methods")
    if roster is not None:
        table.add_column("Invoice")
    for i, p in enumerate(payments, start=1):
        supplier = escape(p.supplier_name)
        cells = [
            str(i),
            supplier,
            p.payment_date,
            format_shekels(p.total_amount),
            str(len(p.splits)),
            ", ".join(method_label(m) for m in p.methods),
        ]
        if roster is not None:
            if not roster.is_known(p.supplier_name):
                cells[1] = f"[red]{supplier}[/red]"
            inv = linked_invoice(p, roster)
            cells.append(escape(inv.invoice_number) if inv is not None and inv.invoice_number else "")
        table.add_row(*cells)
    console.print(table)


__all__ = ["render_summary", "render_payments", "linked_invoice"]
