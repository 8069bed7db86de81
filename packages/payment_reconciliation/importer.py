"""Write reconciled payments and their splits to the back-office tables.

Behavior
--------
- Preconditions are checked before any write; a failed precondition raises
  :class:`ImportBlockedError` and the session is left untouched.
- Payments are written strictly one after another. Each payment and its
  splits share one transaction, committed before the next payment starts.
- The first failed write rolls back that payment only and halts the run with
  :class:`ImportFailedError`. Payments committed earlier in the run stay.
- A split's ``credit_card_id`` is written only when it is shaped like a UUID.
- Amounts are rounded to agorot per split; the payment total stored is the
  sum of the rounded split amounts.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from decimal import Decimal

from db.models.backoffice import Payment, PaymentSplit
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ImportBlockedError, ImportFailedError
from .logging_setup import get_logger
from .models import ImportResult, MergedPayment, ParsedSplit, PaymentInsert, PaymentSplitInsert, to_cents
from .suppliers import SupplierRoster

logger = get_logger("payment_reconciliation.importer")

type ProgressFn = Callable[[str], None]

NO_BUSINESS_MESSAGE = "יש לבחור עסק לפני הייבוא"
NO_PAYMENTS_MESSAGE = "אין תשלומים לייבוא"


def unmatched_block_message(count: int) -> str:
    return f"יש {count} ספקים שלא נמצאו בעסק. יש לייבא ספקים קודם."


def progress_message(position: int, total: int, supplier_name: str) -> str:
    return f"מייבא... {position}/{total} - {supplier_name}"


def success_message(result: ImportResult) -> str:
    msg = f"יובאו {result.inserted} תשלומים בהצלחה"
    if result.skipped > 0:
        msg += f" ({result.skipped} דולגו)"
    return msg


def _error_text(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        first = exc.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ()))
        return f"{loc}: {first['msg']}" if loc else first["msg"]
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def check_import_allowed(
    business_id: str | None,
    payments: Sequence[MergedPayment],
    roster: SupplierRoster | None,
) -> None:
    """Raise :class:`ImportBlockedError` unless an import may start."""

    if not business_id or roster is None:
        raise ImportBlockedError(NO_BUSINESS_MESSAGE)
    if not payments:
        raise ImportBlockedError(NO_PAYMENTS_MESSAGE)
    unmatched = roster.unmatched(p.supplier_name for p in payments)
    if unmatched:
        raise ImportBlockedError(unmatched_block_message(len(unmatched)))


def stored_total(payment: MergedPayment) -> Decimal:
    """Total written for ``payment``: the sum of its splits rounded one by one.

    Rounding each split first keeps the stored total equal to the sum of the
    stored split amounts.
    """

    if payment.splits:
        return sum((to_cents(s.amount) for s in payment.splits), Decimal("0.00"))
    return to_cents(payment.total_amount)


def _split_insert(payment_id: str, split: ParsedSplit) -> PaymentSplitInsert:
    return PaymentSplitInsert(
        payment_id=payment_id,
        payment_method=split.payment_method,
        amount=split.amount,
        installments_count=split.installments_count,
        installment_number=split.installment_number,
        due_date=split.due_date or None,
        reference_number=split.reference_number,
        check_number=split.check_number,
        credit_card_id=split.credit_card_id,
    )


def import_payments(
    session: Session,
    *,
    business_id: str | None,
    payments: Sequence[MergedPayment],
    roster: SupplierRoster | None,
    created_by: str | None = None,
    on_progress: ProgressFn | None = None,
) -> ImportResult:
    """Persist ``payments`` for ``business_id``; see the module docstring.

    Parameters
    ----------
    session:
        Open SQLAlchemy session. It is committed once per imported payment.
    roster:
        Roster of ``business_id``; supplier ids are taken from it.
    created_by:
        Operator identifier stored on each payment, if known.
    on_progress:
        Called with a Hebrew progress line before each payment is written.
    """

    check_import_allowed(business_id, payments, roster)
    assert business_id is not None and roster is not None

    result = ImportResult()
    total = len(payments)
    for payment in payments:
        supplier = roster.find(payment.supplier_name)
        if supplier is None:
            # Roster changed after the precondition check
            logger.warning("skipping payment of unknown supplier %r", payment.supplier_name)
            result.skipped += 1
            continue

        if on_progress is not None:
            on_progress(progress_message(result.inserted + 1, total, payment.supplier_name))

        try:
            record = Payment(
                **PaymentInsert(
                    business_id=business_id,
                    supplier_id=supplier.id,
                    payment_date=payment.payment_date,
                    total_amount=stored_total(payment),
                    notes=payment.notes,
                    receipt_url=payment.receipt_url,
                    created_by=created_by,
                ).model_dump()
            )
            session.add(record)
            session.flush()
        except (SQLAlchemyError, ValidationError) as exc:
            session.rollback()
            logger.error("payment insert failed for %r: %s", payment.supplier_name, exc)
            raise ImportFailedError(
                f'שגיאה בייבוא תשלום לספק "{payment.supplier_name}": {_error_text(exc)}',
                result=result,
                supplier_name=payment.supplier_name,
            ) from exc

        try:
            for split in payment.splits:
                data = _split_insert(record.id, split).model_dump(exclude_none=True)
                session.add(PaymentSplit(**data))
                session.flush()
            session.commit()
        except (SQLAlchemyError, ValidationError) as exc:
            session.rollback()
            logger.error("split insert failed for %r: %s", payment.supplier_name, exc)
            raise ImportFailedError(
                f"שגיאה ביצירת פיצול תשלום: {_error_text(exc)}",
                result=result,
                supplier_name=payment.supplier_name,
            ) from exc

        result.inserted += 1
        result.payment_ids.append(record.id)
        logger.debug(
            "imported payment %s (%s, %d split(s))", record.id, payment.supplier_name, len(payment.splits)
        )

    logger.info("import finished: %d inserted, %d skipped", result.inserted, result.skipped)
    return result


__all__ = [
    "ProgressFn",
    "NO_BUSINESS_MESSAGE",
    "NO_PAYMENTS_MESSAGE",
    "unmatched_block_message",
    "progress_message",
    "success_message",
    "check_import_allowed",
    "stored_total",
    "import_payments",
]
