"""Value normalizers for payment CSV cells.

Pure functions that turn loosely formatted spreadsheet cells into the values
the reconciliation engine works with:

- ``parse_date``: ``D/M/YYYY``, ``D-M-YYYY``, ``D.M.YYYY`` or ``YYYY-M-D``
  (any of ``/ - .`` as separator), optionally followed by a time of day,
  to an ISO ``YYYY-MM-DD`` string. Calendar dates only; no timezones.
- ``parse_amount``: currency/thousands-separator stripping to ``float`` with
  a "missing means zero" policy.
- ``resolve_method``: free-text payment method (Hebrew or English) to one of
  the nine canonical methods, ``"other"`` as the universal fallback.

Lookup tables are read-only mappings and are passed into the resolvers
explicitly where a caller wants a different table.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date
from types import MappingProxyType

# ---------------------------------------------------------------------------
# Payment methods
# ---------------------------------------------------------------------------

PAYMENT_METHODS: tuple[str, ...] = (
    "bank_transfer",
    "cash",
    "check",
    "bit",
    "paybox",
    "credit_card",
    "credit_company",
    "standing_order",
    "other",
)

FALLBACK_METHOD = "other"

# Free text → canonical method. Canonical names are included so resolution is
# idempotent; English keys are lower-case because lookup retries lower-cased.
PAYMENT_METHOD_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "העברה בנקאית": "bank_transfer",
        "העברה": "bank_transfer",
        "bank_transfer": "bank_transfer",
        "מזומן": "cash",
        "cash": "cash",
        "צ'ק": "check",
        "צק": "check",
        "שיק": "check",
        "check": "check",
        "ביט": "bit",
        "bit": "bit",
        "פייבוקס": "paybox",
        "paybox": "paybox",
        "כרטיס אשראי": "credit_card",
        "אשראי": "credit_card",
        "credit_card": "credit_card",
        "credit": "credit_card",
        "חברות הקפה": "credit_company",
        "הקפה": "credit_company",
        "credit_companies": "credit_company",
        "credit_company": "credit_company",
        "הוראת קבע": "standing_order",
        'הו"ק': "standing_order",
        "הוק": "standing_order",
        "standing_order": "standing_order",
        "אחר": "other",
        "other": "other",
    }
)

# Operator-facing labels used in summaries and previews.
PAYMENT_METHOD_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "bank_transfer": "העברה בנקאית",
        "cash": "מזומן",
        "check": "צ'ק",
        "bit": "ביט",
        "paybox": "פייבוקס",
        "credit_card": "כרטיס אשראי",
        "credit_company": "חברות הקפה",
        "standing_order": "הוראת קבע",
        "other": "אחר",
    }
)


def resolve_method(raw: str | None, aliases: Mapping[str, str] = PAYMENT_METHOD_ALIASES) -> str:
    """Resolve free text to a canonical payment method.

    Tries the raw string, then its lower-cased form; anything unrecognized
    (including empty input) resolves to ``"other"``.
    """

    if not raw:
        return FALLBACK_METHOD
    return aliases.get(raw) or aliases.get(raw.lower()) or FALLBACK_METHOD


def method_label(method: str) -> str:
    return PAYMENT_METHOD_NAMES.get(method, method)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_TIME_SUFFIX_RE = re.compile(r"\s+\d{1,2}:\d{2}(:\d{2})?$", re.ASCII)
_DAY_FIRST_RE = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$", re.ASCII)
_YEAR_FIRST_RE = re.compile(r"^(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})$", re.ASCII)


def _iso_date(year: str, month: str, day: str) -> str | None:
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def parse_date(raw: str | None) -> str | None:
    """Normalize a spreadsheet date cell to ``YYYY-MM-DD``.

    Returns ``None`` when the value is empty, matches none of the accepted
    shapes, or names a day the calendar does not have (``31/02/2025``).

    >>> parse_date("15.01.2025")
    '2025-01-15'
    >>> parse_date("2025-1-5 22:12")
    '2025-01-05'
    """

    if not raw:
        return None
    date_only = _TIME_SUFFIX_RE.sub("", raw.strip()).strip()

    m = _DAY_FIRST_RE.match(date_only)
    if m:
        day, month, year = m.groups()
        return _iso_date(year, month, day)
    m = _YEAR_FIRST_RE.match(date_only)
    if m:
        year, month, day = m.groups()
        return _iso_date(year, month, day)
    return None


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

_AMOUNT_NOISE_RE = re.compile(r"[₪$€,\s]")
# Leading numeric prefix; trailing text such as a currency word is ignored.
_FLOAT_PREFIX_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)", re.ASCII)


def parse_amount(raw: str | None) -> float:
    """Parse a money cell such as ``"₪1,180.50"`` to ``1180.5``.

    Empty or unparseable input yields ``0.0``; callers decide whether a
    non-positive amount disqualifies the row.
    """

    if not raw:
        return 0.0
    cleaned = _AMOUNT_NOISE_RE.sub("", raw)
    m = _FLOAT_PREFIX_RE.match(cleaned)
    if not m:
        return 0.0
    value = float(m.group(0))
    if not math.isfinite(value):
        return 0.0
    return value


def parse_int(raw: str | None, default: int) -> int:
    """Parse the leading integer of ``raw``; ``default`` when absent or < 1."""

    if not raw:
        return default
    m = _INT_PREFIX_RE.match(raw)
    if not m:
        return default
    value = int(m.group(1))
    return value if value >= 1 else default


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_uuid(value: str | None) -> bool:
    """Syntactic UUID check (format only, not existence)."""

    return bool(value) and _UUID_RE.match(value) is not None


__all__ = [
    "PAYMENT_METHODS",
    "FALLBACK_METHOD",
    "PAYMENT_METHOD_ALIASES",
    "PAYMENT_METHOD_NAMES",
    "resolve_method",
    "method_label",
    "parse_date",
    "parse_amount",
    "parse_int",
    "is_uuid",
]
