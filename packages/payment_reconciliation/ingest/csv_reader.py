"""Adapter that reads an uploaded payments CSV into header + row views.

Contract
--------
- Input is UTF-8 (a leading byte-order mark is dropped), comma- or
  tab-delimited. The delimiter is taken from the header line: tab when it
  holds more tabs than commas, otherwise comma.
- The first non-blank line is the header row. Header cells are trimmed and
  stripped of any stray BOM. Blank lines anywhere are skipped.
- Each data line becomes a ``dict`` keyed by header. Short lines are padded
  with ``""``; cells beyond the header width are dropped. When a header
  repeats, the first column's value is kept.

Failure mode
------------
Undecodable bytes, a missing header row, or a file with no data rows raise
``csv.Error`` with a short description. Per-row content problems never raise
here; the reconciliation engine decides what to do with odd values.
"""

from __future__ import annotations

import csv
import io
from os import PathLike
from pathlib import Path

from ..logging_setup import get_logger
from ..models import ParsedCsv

logger = get_logger("payment_reconciliation.ingest.csv_reader")

_BOM = "﻿"


def _detect_delimiter(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return "\t" if line.count("\t") > line.count(",") else ","
    return ","


def _is_blank(cells: list[str]) -> bool:
    return all(not c.strip() for c in cells)


def parse_csv_text(text: str, *, name: str = "") -> ParsedCsv:
    """Parse already-decoded CSV text. See the module docstring for rules."""

    label = name or "CSV"
    text = text.lstrip(_BOM)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=_detect_delimiter(text))

    headers: list[str] | None = None
    rows: list[dict[str, str]] = []
    for cells in reader:
        if _is_blank(cells):
            continue
        if headers is None:
            headers = [c.replace(_BOM, "").strip() for c in cells]
            continue
        row: dict[str, str] = {}
        for i, header in enumerate(headers):
            if header in row:
                continue
            row[header] = cells[i] if i < len(cells) else ""
        rows.append(row)

    if headers is None:
        raise csv.Error(f"{label}: file appears to have no header row")
    if not rows:
        raise csv.Error(f"{label}: file has a header row but no data rows")

    logger.debug("parsed %s: %d header(s), %d row(s)", label, len(headers), len(rows))
    return ParsedCsv(headers=tuple(headers), rows=tuple(rows), name=name)


def read_payments_csv(source: str | PathLike[str] | bytes, *, name: str | None = None) -> ParsedCsv:
    """Read a CSV from a filesystem path or raw uploaded bytes.

    Parameters
    ----------
    source:
        Path to the file, or its bytes as received from an upload.
    name:
        Display name used in messages; defaults to the file name.
    """

    if isinstance(source, bytes):
        data = source
        label = name or ""
    else:
        path = Path(source)
        data = path.read_bytes()
        label = name or path.name

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise csv.Error(
            f"{label or 'CSV'}: not valid UTF-8 (byte {exc.start}: {exc.reason})"
        ) from exc
    return parse_csv_text(text, name=label)


__all__ = ["parse_csv_text", "read_payments_csv"]
