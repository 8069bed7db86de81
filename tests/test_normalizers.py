import pytest

from payment_reconciliation.normalizers import (
    PAYMENT_METHOD_ALIASES,
    PAYMENT_METHODS,
    is_uuid,
    method_label,
    parse_amount,
    parse_date,
    parse_int,
    resolve_method,
)


@pytest.mark.parametrize(
    "raw",
    ["15/01/2025", "15-01-2025", "15.01.2025", "2025-01-15", "2025/01/15", "2025.1.15", "15/1/2025"],
)
def test_parse_date_separator_styles_agree(raw):
    assert parse_date(raw) == "2025-01-15"


@pytest.mark.parametrize("raw", ["2025-01-15 22:12", "15/01/2025 22:12:05", " 15.01.2025  7:05 "])
def test_parse_date_strips_time_of_day(raw):
    assert parse_date(raw) == "2025-01-15"


def test_parse_date_pads_single_digits():
    assert parse_date("5/3/2024") == "2024-03-05"
    assert parse_date("2024-3-5") == "2024-03-05"


@pytest.mark.parametrize("raw", [None, "", "   ", "2025", "15/01/25", "Jan 15 2025", "abc", "15/01/2025T10:00"])
def test_parse_date_rejects_other_shapes(raw):
    assert parse_date(raw) is None


def test_parse_amount_examples():
    assert parse_amount("₪1,180.50") == 1180.5
    assert parse_amount("") == 0
    assert parse_amount(None) == 0
    assert parse_amount("abc") == 0


def test_parse_amount_strips_currency_and_spaces():
    assert parse_amount(" $ 2,000 ") == 2000.0
    assert parse_amount("€12.5") == 12.5
    assert parse_amount("-40") == -40.0
    assert parse_amount("300 ש\"ח") == 300.0


def test_parse_amount_non_finite_is_zero():
    assert parse_amount("1e999") == 0.0


def test_resolve_method_canonical_names_are_fixed_points():
    for method in PAYMENT_METHODS:
        assert resolve_method(method) == method
        assert resolve_method(resolve_method(method)) == method


def test_resolve_method_is_case_insensitive_for_every_entry():
    for alias, method in PAYMENT_METHOD_ALIASES.items():
        assert resolve_method(alias.upper()) == method
        assert resolve_method(alias.lower()) == method


def test_resolve_method_hebrew_and_fallback():
    assert resolve_method("העברה בנקאית") == "bank_transfer"
    assert resolve_method("צ'ק") == "check"
    assert resolve_method("Credit") == "credit_card"
    assert resolve_method("barter") == "other"
    assert resolve_method("") == "other"
    assert resolve_method(None) == "other"


def test_resolve_method_accepts_custom_table():
    table = {"wire": "bank_transfer"}
    assert resolve_method("WIRE", table) == "bank_transfer"
    assert resolve_method("cash", table) == "other"


def test_method_label():
    assert method_label("cash") == "מזומן"
    assert method_label("unknown") == "unknown"


def test_parse_int_prefix_and_default():
    assert parse_int("3", 1) == 3
    assert parse_int("2 of 4", 1) == 2
    assert parse_int("", 5) == 5
    assert parse_int("x", 5) == 5
    assert parse_int("0", 5) == 5
    assert parse_int("-2", 5) == 5


def test_is_uuid():
    assert is_uuid("123e4567-e89b-12d3-a456-426614174000")
    assert is_uuid("123E4567-E89B-12D3-A456-426614174000")
    assert not is_uuid("visa 1234")
    assert not is_uuid("")
    assert not is_uuid(None)


@pytest.mark.parametrize("raw", ["31/02/2025", "29/02/2025", "2025-13-01", "00/01/2025", "2025-04-31"])
def test_parse_date_rejects_days_missing_from_the_calendar(raw):
    assert parse_date(raw) is None


def test_parse_date_accepts_leap_day():
    assert parse_date("29/02/2024") == "2024-02-29"
