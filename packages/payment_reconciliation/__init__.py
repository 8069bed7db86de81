"""Public interface for the ``payment_reconciliation`` package.

Symbol re-exports only: the reconciliation engine, the importer, the operator
session and the models they exchange.
"""

from .errors import (
    FileLoadError,
    ImportBlockedError,
    ImportFailedError,
    PaymentImportError,
    SessionStateError,
)
from .importer import import_payments, success_message
from .ingest.csv_reader import read_payments_csv
from .models import (
    ImportResult,
    MergedPayment,
    ParsedCsv,
    ParsedSplit,
    ReconciliationResult,
)
from .reconcile import reconcile_payments
from .summary import PaymentSummary, summarize
from .suppliers import SupplierRoster, load_roster
from .workflows.import_flow import ImportSession

__all__ = [
    # Operations
    "read_payments_csv",
    "reconcile_payments",
    "summarize",
    "load_roster",
    "import_payments",
    "success_message",
    "ImportSession",
    # Models / types
    "ParsedCsv",
    "ParsedSplit",
    "MergedPayment",
    "ReconciliationResult",
    "ImportResult",
    "PaymentSummary",
    "SupplierRoster",
    # Errors
    "PaymentImportError",
    "FileLoadError",
    "SessionStateError",
    "ImportBlockedError",
    "ImportFailedError",
]
