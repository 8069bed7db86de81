"""Reconcile the main and sub-payments CSVs into logical payments.

The engine runs three ordered passes over in-memory rows and a finalization
step:

1. Group main-file rows (see :mod:`payment_reconciliation.grouping`).
2. Build one :class:`MergedPayment` per group. Claimed groups take their
   splits from the sub-payments rows pointing at them; merged installment
   groups take one split per main row; a single unclaimed row yields one
   split when it carries an amount and a known method, otherwise a *bare*
   payment that only waits for Pass 3.
3. Sub-payments rows without a parent are grouped by supplier name. Each
   supplier group fills the first bare payment of exactly that supplier, or
   becomes a new payment of its own.

Finalization drops payments with neither splits nor amount, recomputes a
non-positive total from the splits, and gives a split-less payment a single
``other`` split for its full amount.

Data problems never raise. Rows with a non-positive amount are dropped
silently; a payment whose date cannot be resolved is skipped with a Hebrew
diagnostic in ``ReconciliationResult.errors``.

Dates are ISO strings, so the earliest date is the string minimum.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .grouping import GroupKeyFn, MainGroup, claimed_parent_ids, group_main_rows, receipt_group_key
from .ingest.headers import MAIN_HEADER_ALIASES, SUBS_HEADER_ALIASES, FieldGetter, make_field_getter
from .logging_setup import get_logger
from .models import MergedPayment, ParsedCsv, ParsedSplit, ReconciliationResult, Row
from .normalizers import FALLBACK_METHOD, parse_amount, parse_date, parse_int, resolve_method
from .suppliers import SupplierRoster

logger = get_logger("payment_reconciliation.reconcile")

_SUB_PAYMENT_TAG = "תשלום משנה"


def missing_date_message(supplier_name: str, tag: str = "") -> str:
    """Diagnostic for a payment skipped because no date could be resolved."""

    suffix = f" ({tag})" if tag else ""
    return f'ספק "{supplier_name}"{suffix}: תאריך תשלום חסר - דילוג'


def _earliest_due_date(splits: Iterable[ParsedSplit]) -> str:
    dates = [s.due_date for s in splits if s.due_date]
    return min(dates) if dates else ""


def _splits_from_sub_rows(rows: Sequence[Row], get: FieldGetter) -> list[ParsedSplit]:
    """One split per sub-payments row with a positive amount.

    ``installments_count`` is the size of the whole row set, dropped rows
    included.
    """

    splits: list[ParsedSplit] = []
    for row in rows:
        amount = parse_amount(get(row, "amount"))
        if amount <= 0:
            continue
        splits.append(
            ParsedSplit(
                payment_method=resolve_method(get(row, "payment_method")),
                amount=amount,
                installment_number=parse_int(get(row, "installment_number"), 1),
                installments_count=len(rows),
                reference_number=get(row, "reference_number"),
                check_number=get(row, "check_number"),
                due_date=parse_date(get(row, "payment_date")) or "",
                notes=get(row, "notes"),
                credit_card_id=get(row, "credit_card_id"),
            )
        )
    return splits


def _splits_from_main_rows(rows: Sequence[Row], get: FieldGetter) -> list[ParsedSplit]:
    splits: list[ParsedSplit] = []
    for row in rows:
        amount = parse_amount(get(row, "split_amount"))
        if amount <= 0:
            continue
        splits.append(
            ParsedSplit(
                payment_method=resolve_method(get(row, "payment_method")),
                amount=amount,
                installment_number=parse_int(get(row, "installment_number"), 1),
                installments_count=parse_int(get(row, "installments_count"), len(rows)),
                reference_number=get(row, "reference_number"),
                check_number=get(row, "check_number"),
                due_date=parse_date(get(row, "payment_date")) or "",
                notes=get(row, "notes"),
            )
        )
    return splits


class _Reconciler:
    """Holds the per-run state shared by the passes."""

    def __init__(self, main: ParsedCsv, subs: ParsedCsv | None, group_key: GroupKeyFn) -> None:
        self.main = main
        self.subs_rows: tuple[dict[str, str], ...] = subs.rows if subs is not None else ()
        self.get_main = make_field_getter(main.headers, MAIN_HEADER_ALIASES)
        self.get_subs = make_field_getter(subs.headers if subs is not None else (), SUBS_HEADER_ALIASES)
        self.group_key = group_key
        self.payments: list[MergedPayment] = []
        self.errors: list[str] = []

        self.subs_by_parent: dict[str, list[Row]] = {}
        for row in self.subs_rows:
            pid = self.get_subs(row, "parent_id")
            if pid:
                self.subs_by_parent.setdefault(pid, []).append(row)

    # -- Pass 1 + 2 ---------------------------------------------------------

    def main_pass(self) -> None:
        claimed = claimed_parent_ids(self.subs_rows, self.get_subs)
        groups = group_main_rows(self.main.rows, self.get_main, claimed, group_key=self.group_key)
        logger.debug("pass 1: %d main row(s) -> %d group(s)", len(self.main), len(groups))

        for group in groups:
            parent = next((uid for uid in group.unique_ids if uid in claimed), None)
            if parent is not None:
                self._claimed_group(group, parent)
            elif len(group.rows) > 1:
                self._installment_group(group)
            else:
                self._single_row(group)

    def _base_payment(self, row: Row, payment_date: str, splits: list[ParsedSplit]) -> MergedPayment:
        get = self.get_main
        return MergedPayment(
            supplier_name=get(row, "supplier_name"),
            payment_date=payment_date,
            total_amount=sum(s.amount for s in splits),
            expense_type=get(row, "expense_type"),
            notes=get(row, "notes"),
            receipt_url=get(row, "images"),
            splits=splits,
        )

    def _raw_main_date(self, row: Row) -> str:
        return self.get_main(row, "payment_date") or self.get_main(row, "received_date")

    def _claimed_group(self, group: MainGroup, parent: str) -> None:
        first = group.first
        supplier = self.get_main(first, "supplier_name")
        if not supplier:
            return
        splits = _splits_from_sub_rows(self.subs_by_parent.get(parent, []), self.get_subs)
        if not splits:
            return
        payment_date = _earliest_due_date(splits) or parse_date(self._raw_main_date(first)) or ""
        if not payment_date:
            self.errors.append(missing_date_message(supplier))
            return
        self.payments.append(self._base_payment(first, payment_date, splits))

    def _installment_group(self, group: MainGroup) -> None:
        first = group.first
        supplier = self.get_main(first, "supplier_name")
        if not supplier:
            return
        splits = _splits_from_main_rows(group.rows, self.get_main)
        if not splits:
            return
        payment_date = _earliest_due_date(splits)
        if not payment_date:
            self.errors.append(missing_date_message(supplier))
            return
        self.payments.append(self._base_payment(first, payment_date, splits))

    def _single_row(self, group: MainGroup) -> None:
        row = group.first
        get = self.get_main
        supplier = get(row, "supplier_name")
        if not supplier:
            return
        payment_date = parse_date(self._raw_main_date(row))
        if not payment_date:
            self.errors.append(missing_date_message(supplier, group.unique_ids[0]))
            return

        method = resolve_method(get(row, "payment_method"))
        amount = parse_amount(get(row, "split_amount"))
        splits: list[ParsedSplit] = []
        if amount > 0 and method != FALLBACK_METHOD:
            splits.append(
                ParsedSplit(
                    payment_method=method,
                    amount=amount,
                    installment_number=parse_int(get(row, "installment_number"), 1),
                    installments_count=parse_int(get(row, "installments_count"), 1),
                    reference_number=get(row, "reference_number"),
                    check_number=get(row, "check_number"),
                    due_date=payment_date,
                )
            )
        # With no splits this is a bare payment: total 0, waiting for Pass 3
        self.payments.append(self._base_payment(row, payment_date, splits))

    # -- Pass 3 -------------------------------------------------------------

    def standalone_pass(self) -> None:
        by_supplier: dict[str, list[Row]] = {}
        for row in self.subs_rows:
            if self.get_subs(row, "parent_id"):
                continue
            supplier = self.get_subs(row, "supplier_name")
            if supplier:
                by_supplier.setdefault(supplier, []).append(row)

        for supplier, rows in by_supplier.items():
            splits = _splits_from_sub_rows(rows, self.get_subs)
            if not splits:
                continue
            earliest = _earliest_due_date(splits)
            bare = next(
                (p for p in self.payments if p.supplier_name == supplier and p.is_bare),
                None,
            )
            if bare is not None:
                bare.splits = splits
                bare.total_amount = sum(s.amount for s in splits)
                # Once splits exist the first money movement dates the payment
                if earliest:
                    bare.payment_date = earliest
                logger.debug("pass 3: attached %d split(s) to bare payment of %r", len(splits), supplier)
                continue
            if not earliest:
                self.errors.append(missing_date_message(supplier, _SUB_PAYMENT_TAG))
                continue
            self.payments.append(
                MergedPayment(
                    supplier_name=supplier,
                    payment_date=earliest,
                    total_amount=sum(s.amount for s in splits),
                    splits=splits,
                )
            )

    # -- Finalization -------------------------------------------------------

    def finalize(self) -> list[MergedPayment]:
        final = [p for p in self.payments if p.splits or p.total_amount > 0]
        for p in final:
            if p.total_amount <= 0 and p.splits:
                p.total_amount = sum(s.amount for s in p.splits)
            if not p.splits and p.total_amount > 0:
                p.splits.append(
                    ParsedSplit(
                        payment_method=FALLBACK_METHOD,
                        amount=p.total_amount,
                        due_date=p.payment_date,
                    )
                )
        dropped = len(self.payments) - len(final)
        if dropped:
            logger.debug("finalize: dropped %d bare payment(s)", dropped)
        return final


def reconcile_payments(
    main: ParsedCsv,
    subs: ParsedCsv | None = None,
    roster: SupplierRoster | None = None,
    *,
    group_key: GroupKeyFn = receipt_group_key,
) -> ReconciliationResult:
    """Correlate both files into finalized payments.

    Parameters
    ----------
    main:
        Parsed main payments file.
    subs:
        Parsed sub-payments file, or ``None`` when none was uploaded.
    roster:
        Supplier roster of the selected business. When given, supplier names
        of the finalized payments without a match are reported in
        ``unmatched_suppliers``.
    group_key:
        Receipt grouping policy for unclaimed installment rows.
    """

    run = _Reconciler(main, subs, group_key)
    run.main_pass()
    run.standalone_pass()
    payments = run.finalize()

    unmatched = roster.unmatched(p.supplier_name for p in payments) if roster is not None else []
    logger.info(
        "reconciled %d main row(s), %d sub row(s) into %d payment(s); %d diagnostic(s), %d unmatched supplier(s)",
        len(main),
        len(run.subs_rows),
        len(payments),
        len(run.errors),
        len(unmatched),
    )
    return ReconciliationResult(payments=payments, errors=run.errors, unmatched_suppliers=unmatched)


__all__ = ["reconcile_payments", "missing_date_message"]
