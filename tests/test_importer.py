from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from db.client import session_scope
from db.models.backoffice import Payment, PaymentSplit
from sqlalchemy import select

from payment_reconciliation.errors import ImportBlockedError, ImportFailedError
from payment_reconciliation.importer import import_payments, stored_total, success_message
from payment_reconciliation.models import ImportResult, MergedPayment, ParsedSplit, SupplierRecord
from payment_reconciliation.suppliers import SupplierRoster, load_roster
from tests.helpers.db import bootstrap_sqlite_db, count_rows, seed_business

CARD_ID = "123e4567-e89b-12d3-a456-426614174000"


@pytest.fixture()
def db(tmp_path: Path) -> tuple[str, str, SupplierRoster]:
    url = bootstrap_sqlite_db(tmp_path / "import.sqlite")
    business_id, _ids = seed_business(database_url=url, suppliers=["ACME", "Bazaar Ltd"])
    with session_scope(database_url=url) as s:
        roster = load_roster(s, business_id)
    return url, business_id, roster


def _payment(supplier: str = "ACME", **overrides) -> MergedPayment:
    fields = {
        "supplier_name": supplier,
        "payment_date": "2025-01-10",
        "total_amount": 1000.0,
        "notes": "",
        "receipt_url": "https://files.example/r.jpg",
        "splits": [
            ParsedSplit(payment_method="check", amount=500.0, installment_number=1, installments_count=2,
                        due_date="2025-01-10", check_number="1001", credit_card_id=CARD_ID),
            ParsedSplit(payment_method="credit_card", amount=500.0, installment_number=2, installments_count=2,
                        due_date="", reference_number="  ", credit_card_id="visa 1234"),
        ],
    }
    fields.update(overrides)
    return MergedPayment(**fields)


def test_import_writes_payment_and_splits(db):
    url, business_id, roster = db
    progress: list[str] = []

    with session_scope(database_url=url) as s:
        result = import_payments(
            s,
            business_id=business_id,
            payments=[_payment(" acme ")],
            roster=roster,
            created_by="op-7",
            on_progress=progress.append,
        )

    assert result.inserted == 1
    assert result.skipped == 0
    assert progress == ["מייבא... 1/1 -  acme "]

    with session_scope(database_url=url) as s:
        payment = s.execute(select(Payment)).scalar_one()
        splits = s.execute(select(PaymentSplit).order_by(PaymentSplit.installment_number)).scalars().all()

    assert payment.id == result.payment_ids[0]
    assert payment.supplier_id == roster.find("ACME").id
    assert payment.payment_date == date(2025, 1, 10)
    assert payment.total_amount == Decimal("1000.00")
    assert payment.notes is None
    assert payment.receipt_url == "https://files.example/r.jpg"
    assert payment.created_by == "op-7"

    assert [s.payment_method for s in splits] == ["check", "credit_card"]
    assert splits[0].credit_card_id == CARD_ID
    assert splits[0].check_number == "1001"
    assert splits[0].due_date == date(2025, 1, 10)
    # Non-UUID card references and blank optional fields are not written
    assert splits[1].credit_card_id is None
    assert splits[1].due_date is None
    assert splits[1].reference_number is None


def test_unmatched_supplier_blocks_with_zero_writes(db):
    url, business_id, roster = db

    with session_scope(database_url=url) as s:
        with pytest.raises(ImportBlockedError) as err:
            import_payments(
                s,
                business_id=business_id,
                payments=[_payment("ACME"), _payment("Nobody"), _payment("Ghost")],
                roster=roster,
            )

    assert str(err.value) == "יש 2 ספקים שלא נמצאו בעסק. יש לייבא ספקים קודם."
    assert count_rows(url) == (0, 0)


def test_missing_business_and_empty_list_block(db):
    url, business_id, roster = db

    with session_scope(database_url=url) as s:
        with pytest.raises(ImportBlockedError, match="יש לבחור עסק לפני הייבוא"):
            import_payments(s, business_id=None, payments=[_payment()], roster=roster)
        with pytest.raises(ImportBlockedError, match="אין תשלומים לייבוא"):
            import_payments(s, business_id=business_id, payments=[], roster=roster)


def test_split_failure_halts_and_keeps_earlier_payments(db):
    url, business_id, roster = db
    bad = _payment("Bazaar Ltd", splits=[ParsedSplit(payment_method="barter", amount=10.0)])
    never = _payment("ACME")

    with session_scope(database_url=url) as s:
        with pytest.raises(ImportFailedError) as err:
            import_payments(s, business_id=business_id, payments=[_payment(), bad, never], roster=roster)

    assert str(err.value).startswith("שגיאה ביצירת פיצול תשלום: ")
    assert err.value.supplier_name == "Bazaar Ltd"
    assert err.value.result.inserted == 1
    # First payment committed; the failed payment and the one after it are absent
    assert count_rows(url) == (1, 2)


def test_payment_failure_reports_supplier(db):
    url, business_id, roster = db
    undated = _payment("Bazaar Ltd", payment_date="")

    with session_scope(database_url=url) as s:
        with pytest.raises(ImportFailedError) as err:
            import_payments(s, business_id=business_id, payments=[undated], roster=roster)

    assert str(err.value).startswith('שגיאה בייבוא תשלום לספק "Bazaar Ltd": ')
    assert err.value.result.inserted == 0
    assert count_rows(url) == (0, 0)


def test_supplier_missing_at_write_time_is_skipped(db):
    url, business_id, roster = db

    class _Shrinking(SupplierRoster):
        """Knows every name up front, then forgets Bazaar when asked for its id."""

        __slots__ = ()

        def find(self, name: str) -> SupplierRecord | None:
            if name == "Bazaar Ltd":
                return None
            return super().find(name)

        def unmatched(self, names):
            return []

    shrinking = _Shrinking(business_id, roster.suppliers)

    with session_scope(database_url=url) as s:
        result = import_payments(
            s, business_id=business_id, payments=[_payment("Bazaar Ltd"), _payment()], roster=shrinking
        )

    assert (result.inserted, result.skipped) == (1, 1)
    assert success_message(result) == "יובאו 1 תשלומים בהצלחה (1 דולגו)"


def test_success_message_without_skips():
    assert success_message(ImportResult(inserted=3)) == "יובאו 3 תשלומים בהצלחה"


def test_stored_total_matches_rounded_splits(db):
    url, business_id, roster = db
    thirds = _payment(
        total_amount=999.999,
        splits=[
            ParsedSplit(payment_method="check", amount=333.333, installment_number=n, installments_count=3)
            for n in (1, 2, 3)
        ],
    )

    with session_scope(database_url=url) as s:
        import_payments(s, business_id=business_id, payments=[thirds], roster=roster)

    with session_scope(database_url=url) as s:
        payment = s.execute(select(Payment)).scalar_one()
        amounts = s.execute(select(PaymentSplit.amount)).scalars().all()

    assert [Decimal(a) for a in amounts] == [Decimal("333.33")] * 3
    assert payment.total_amount == Decimal("999.99")
    assert payment.total_amount == sum(Decimal(a) for a in amounts)


def test_stored_total_of_payment_without_splits():
    assert stored_total(_payment(total_amount=12.345, splits=[])) == Decimal("12.35")
