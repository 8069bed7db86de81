"""Header alias tables and the per-file field accessor.

Exports differ between operators: Hebrew or English headers, with or without
trailing punctuation. Each file's headers are mapped once to a fixed set of
canonical field names, and the rest of the pipeline reads cells only through
the accessor returned by :func:`make_field_getter`.

Rules
-----
- A header is looked up verbatim first, then case-insensitively.
- The first header mapping to a canonical field wins; later ones are ignored.
- Headers matching no alias are ignored (exports carry extra operator columns).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType

from ..models import Row

type FieldGetter = Callable[[Row, str], str]

MAIN_FIELDS: tuple[str, ...] = (
    "supplier_name",
    "business_name",
    "unique_id",
    "payment_date",
    "received_date",
    "expense_type",
    "payment_method",
    "split_amount",
    "installments_count",
    "installment_number",
    "check_number",
    "reference_number",
    "notes",
    "images",
    "is_paid",
)

SUBS_FIELDS: tuple[str, ...] = (
    "supplier_name",
    "business_name",
    "parent_id",
    "payment_date",
    "payment_method",
    "amount",
    "installment_number",
    "reference_number",
    "check_number",
    "credit_card_id",
    "bank",
    "notes",
)


def _with_canonical(aliases: dict[str, str]) -> Mapping[str, str]:
    # Canonical names double as headers so pre-normalized exports map too.
    for canonical in set(aliases.values()):
        aliases.setdefault(canonical, canonical)
    return MappingProxyType(aliases)


MAIN_HEADER_ALIASES: Mapping[str, str] = _with_canonical(
    {
        "Supplier name": "supplier_name",
        "שם ספק": "supplier_name",
        "ספק": "supplier_name",
        "Business name": "business_name",
        "שם העסק": "business_name",
        "עסק": "business_name",
        "unique id": "unique_id",
        "תאריך התשלום": "payment_date",
        "תאריך תשלום": "payment_date",
        "Payment date": "payment_date",
        "תאריך קבלה": "received_date",
        "Received date": "received_date",
        "סוג הוצאה": "expense_type",
        "סוג הוצאות": "expense_type",
        "Expense type": "expense_type",
        "סוג אמצעי תשלום": "payment_method",
        "Payment method": "payment_method",
        'סכום לכל תשלום אחרי מע"מ)': "split_amount",
        'סכום לכל תשלום אחרי מע"מ': "split_amount",
        "Split amount": "split_amount",
        "כמות תשלומים": "installments_count",
        "Installments count": "installments_count",
        "מספר תשלום": "installment_number",
        "Installment number": "installment_number",
        "מס' צ'ק": "check_number",
        "מספר צק": "check_number",
        "Check number": "check_number",
        "אסמכתא": "reference_number",
        "מספר אסמכתא": "reference_number",
        "Reference number": "reference_number",
        "הערות": "notes",
        "Notes": "notes",
        "כל התמונות": "images",
        "Images": "images",
        "שולם": "is_paid",
        "Paid": "is_paid",
    }
)

SUBS_HEADER_ALIASES: Mapping[str, str] = _with_canonical(
    {
        "ספק": "supplier_name",
        "Supplier name": "supplier_name",
        "עסק": "business_name",
        "Business name": "business_name",
        "תשלום ראשי": "parent_id",
        "Parent payment": "parent_id",
        "תאריך תשלום": "payment_date",
        "Payment date": "payment_date",
        "סוג אמצעי תשלום": "payment_method",
        "Payment method": "payment_method",
        'סכום תשלום אחרי מע"מ': "amount",
        'סכום תשלום אחרי מע"מ)': "amount",
        "Amount": "amount",
        "מספר תשלום": "installment_number",
        "Installment number": "installment_number",
        "מספר אסמכתא": "reference_number",
        "Reference number": "reference_number",
        "מספר צ'ק": "check_number",
        "מספר צק": "check_number",
        "Check number": "check_number",
        "כרטיס אשראי (אם יש)": "credit_card_id",
        "Credit card": "credit_card_id",
        "בנק": "bank",
        "Bank": "bank",
        "הערות": "notes",
        "Notes": "notes",
    }
)


def resolve_headers(headers: Iterable[str], aliases: Mapping[str, str]) -> dict[str, str]:
    """Return ``canonical field → original header`` for one file."""

    lowered: dict[str, str] = {}
    for alias, canonical in aliases.items():
        lowered.setdefault(alias.lower(), canonical)

    field_map: dict[str, str] = {}
    for header in headers:
        canonical = aliases.get(header) or lowered.get(header.lower())
        if canonical and canonical not in field_map:
            field_map[canonical] = header
    return field_map


def make_field_getter(headers: Iterable[str], aliases: Mapping[str, str]) -> FieldGetter:
    """Build ``get(row, canonical) -> str`` for a file with ``headers``.

    The accessor returns the trimmed cell, or ``""`` when the field is not
    mapped or the cell is missing. Rebuild it whenever the header set changes.
    """

    field_map = resolve_headers(headers, aliases)

    def get(row: Row, canonical: str) -> str:
        header = field_map.get(canonical)
        if header is None:
            return ""
        return (row.get(header) or "").strip()

    return get


__all__ = [
    "FieldGetter",
    "MAIN_FIELDS",
    "SUBS_FIELDS",
    "MAIN_HEADER_ALIASES",
    "SUBS_HEADER_ALIASES",
    "resolve_headers",
    "make_field_getter",
]
