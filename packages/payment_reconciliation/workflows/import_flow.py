"""Operator session for the two-file payment import.

``ImportSession`` holds the state an operator builds up before importing:
the selected business and its roster, the two uploaded files, and the
reconciled result under review. Changing any input invalidates what was
derived from it:

- selecting a business clears both files and any result;
- loading either file clears the result (``process`` must run again);
- a successful import clears everything but the business.
"""

from __future__ import annotations

import csv
from collections.abc import Callable
from os import PathLike

from db.client import session_scope
from db.models.backoffice import Business

from ..errors import FileLoadError, SessionStateError
from ..importer import import_payments
from ..ingest.csv_reader import read_payments_csv
from ..logging_setup import get_logger
from ..models import ImportResult, MergedPayment, ParsedCsv, ReconciliationResult
from ..reconcile import reconcile_payments
from ..summary import PaymentSummary, summarize
from ..suppliers import SupplierRoster, load_roster

logger = get_logger("payment_reconciliation.workflows.import_flow")

MAIN_FILE_ERROR = "שגיאה בקריאת קובץ תשלומים ראשיים"
SUBS_FILE_ERROR = "שגיאה בקריאת קובץ תשלומי משנה"

type CsvSource = str | PathLike[str] | bytes


def _load(source: CsvSource, name: str | None, message: str) -> ParsedCsv:
    try:
        return read_payments_csv(source, name=name)
    except (csv.Error, OSError) as exc:
        logger.warning("%s: %s", message, exc)
        raise FileLoadError(f"{message}: {exc}") from exc


class ImportSession:
    """Stateful front for one operator's reconcile-review-import cycle."""

    def __init__(self, *, database_url: str | None = None) -> None:
        self.database_url = database_url
        self.business_id: str | None = None
        self.roster: SupplierRoster | None = None
        self.main: ParsedCsv | None = None
        self.subs: ParsedCsv | None = None
        self.result: ReconciliationResult | None = None

    # -- inputs -------------------------------------------------------------

    def select_business(self, business_id: str) -> SupplierRoster:
        """Switch to ``business_id``, dropping all file and result state."""

        self.clear()
        self.business_id = None
        self.roster = None
        with session_scope(database_url=self.database_url) as s:
            if s.get(Business, business_id) is None:
                raise SessionStateError(f"העסק לא נמצא: {business_id}")
            roster = load_roster(s, business_id)
        self.business_id = business_id
        self.roster = roster
        return roster

    def load_main_file(self, source: CsvSource, *, name: str | None = None) -> ParsedCsv:
        parsed = _load(source, name, MAIN_FILE_ERROR)
        self.main = parsed
        self.result = None
        return parsed

    def load_subs_file(self, source: CsvSource, *, name: str | None = None) -> ParsedCsv:
        parsed = _load(source, name, SUBS_FILE_ERROR)
        self.subs = parsed
        self.result = None
        return parsed

    # -- reconcile & review -------------------------------------------------

    def process(self) -> ReconciliationResult:
        if self.roster is None:
            raise SessionStateError("יש לבחור עסק לפני עיבוד הקבצים")
        if self.main is None:
            raise SessionStateError("יש להעלות קובץ תשלומים ראשיים")
        self.result = reconcile_payments(self.main, self.subs, self.roster)
        return self.result

    @property
    def payments(self) -> list[MergedPayment]:
        return self.result.payments if self.result is not None else []

    def remove_payment(self, index: int) -> MergedPayment:
        """Drop one reviewed payment; unmatched suppliers are recomputed."""

        if self.result is None:
            raise SessionStateError("אין תוצאות עיבוד")
        payments = list(self.result.payments)
        if not 0 <= index < len(payments):
            raise SessionStateError(f"אין תשלום במיקום {index}")
        removed = payments.pop(index)
        unmatched = self.roster.unmatched(p.supplier_name for p in payments) if self.roster else []
        self.result = ReconciliationResult(
            payments=payments, errors=self.result.errors, unmatched_suppliers=unmatched
        )
        return removed

    def summary(self) -> PaymentSummary:
        return summarize(self.payments, self.roster)

    def clear(self) -> None:
        """Forget both files and the result; the business stays selected."""

        self.main = None
        self.subs = None
        self.result = None

    # -- import -------------------------------------------------------------

    def run_import(
        self,
        *,
        created_by: str | None = None,
        on_progress: Callable[[str], None] | None = None,
    ) -> ImportResult:
        """Import the reviewed payments; clears the session on success.

        Raises ``ImportBlockedError`` or ``ImportFailedError`` from the
        importer; on failure the session keeps its state for another attempt.
        """

        with session_scope(database_url=self.database_url) as s:
            result = import_payments(
                s,
                business_id=self.business_id,
                payments=self.payments,
                roster=self.roster,
                created_by=created_by,
                on_progress=on_progress,
            )
        self.clear()
        return result


__all__ = ["ImportSession", "MAIN_FILE_ERROR", "SUBS_FILE_ERROR"]
