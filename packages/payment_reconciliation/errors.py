"""Exceptions raised by the payment import flow.

Every exception carries an operator-facing (Hebrew) message as ``str(exc)``;
the CLI prints it verbatim. Row-level data problems are not exceptions: the
reconciliation engine reports them as diagnostic strings instead.
"""

from __future__ import annotations

from .models import ImportResult


class PaymentImportError(Exception):
    """Base class for payment import failures."""


class FileLoadError(PaymentImportError):
    """An uploaded CSV could not be read (encoding, missing header, no rows)."""


class SessionStateError(PaymentImportError):
    """An operation was invoked before its prerequisites (business, file)."""


class ImportBlockedError(PaymentImportError):
    """A precondition failed before any write; nothing was persisted."""


class ImportFailedError(PaymentImportError):
    """A write failed mid-run; the run halted.

    ``result`` describes the payments committed before the failure. They are
    not rolled back.
    """

    def __init__(self, message: str, *, result: ImportResult, supplier_name: str) -> None:
        super().__init__(message)
        self.result = result
        self.supplier_name = supplier_name


__all__ = [
    "PaymentImportError",
    "FileLoadError",
    "SessionStateError",
    "ImportBlockedError",
    "ImportFailedError",
]
