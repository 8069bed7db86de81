"""CSV ingest: file adapter and header alias resolution."""

from .csv_reader import parse_csv_text, read_payments_csv
from .headers import (
    MAIN_HEADER_ALIASES,
    SUBS_HEADER_ALIASES,
    FieldGetter,
    make_field_getter,
)

__all__ = [
    "parse_csv_text",
    "read_payments_csv",
    "MAIN_HEADER_ALIASES",
    "SUBS_HEADER_ALIASES",
    "FieldGetter",
    "make_field_getter",
]
