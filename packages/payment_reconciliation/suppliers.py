"""Supplier roster snapshot and name matching for one business.

The roster is read once when a business is selected and then treated as an
immutable snapshot; reconciliation and import only look names up in it.
Matching is exact after trimming and case folding on both sides. Suppliers
are never created here: unknown names block the import instead.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from db.models.backoffice import Business, Invoice, Supplier
from sqlalchemy import select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import BusinessRecord, InvoiceRecord, SupplierRecord

logger = get_logger("payment_reconciliation.suppliers")


def _match_key(name: str) -> str:
    return name.strip().casefold()


class SupplierRoster:
    """Suppliers and invoices of one business, indexed for name lookup."""

    __slots__ = ("business_id", "suppliers", "invoices", "_by_name")

    def __init__(
        self,
        business_id: str,
        suppliers: Sequence[SupplierRecord],
        invoices: Sequence[InvoiceRecord] = (),
    ) -> None:
        self.business_id = business_id
        self.suppliers = tuple(suppliers)
        self.invoices = tuple(invoices)
        self._by_name: dict[str, SupplierRecord] = {}
        for s in self.suppliers:
            # First supplier wins when two names collide after folding
            self._by_name.setdefault(_match_key(s.name), s)

    def __len__(self) -> int:
        return len(self.suppliers)

    def find(self, name: str) -> SupplierRecord | None:
        return self._by_name.get(_match_key(name))

    def is_known(self, name: str) -> bool:
        return self.find(name) is not None

    def find_invoice(self, supplier_name: str, invoice_number: str) -> InvoiceRecord | None:
        """Invoice of ``supplier_name`` with exactly ``invoice_number``, if any."""

        if not invoice_number:
            return None
        supplier = self.find(supplier_name)
        if supplier is None:
            return None
        for inv in self.invoices:
            if inv.supplier_id == supplier.id and inv.invoice_number == invoice_number:
                return inv
        return None

    def unmatched(self, names: Iterable[str]) -> list[str]:
        """Names with no roster match, de-duplicated in first-seen order."""

        out: dict[str, None] = {}
        for name in names:
            if name not in out and not self.is_known(name):
                out[name] = None
        return list(out)


def load_roster(session: Session, business_id: str) -> SupplierRoster:
    """Read the live, not-deleted suppliers and invoices of ``business_id``."""

    supplier_rows = session.execute(
        select(Supplier.id, Supplier.name)
        .where(Supplier.business_id == business_id, Supplier.deleted_at.is_(None))
        .order_by(Supplier.name)
    ).all()
    invoice_rows = session.execute(
        select(Invoice.id, Invoice.invoice_number, Invoice.supplier_id, Invoice.total_amount).where(
            Invoice.business_id == business_id,
            Invoice.deleted_at.is_(None),
            Invoice.invoice_number.is_not(None),
        )
    ).all()

    suppliers = [SupplierRecord(id=r.id, name=r.name) for r in supplier_rows]
    invoices = [
        InvoiceRecord(
            id=r.id,
            invoice_number=r.invoice_number,
            supplier_id=r.supplier_id,
            total_amount=float(r.total_amount) if r.total_amount is not None else None,
        )
        for r in invoice_rows
    ]
    logger.info(
        "loaded roster for business %s: %d supplier(s), %d invoice(s)",
        business_id,
        len(suppliers),
        len(invoices),
    )
    return SupplierRoster(business_id, suppliers, invoices)


def list_businesses(session: Session) -> list[BusinessRecord]:
    rows = session.execute(select(Business.id, Business.name).order_by(Business.name)).all()
    return [BusinessRecord(id=r.id, name=r.name) for r in rows]


__all__ = ["SupplierRoster", "load_roster", "list_businesses"]
