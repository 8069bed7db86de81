"""Pytest configuration for test isolation.

The workspace is not necessarily installed, so the package and library
sources are put on ``sys.path`` here. The shared SQLAlchemy engine in
``db.client`` is process-wide and bound to the first URL it sees; each test
gets a fresh one (and no inherited ``DATABASE_URL``) so tests can use their
own SQLite files.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in (str(_ROOT / "packages"), str(_ROOT / "libs" / "db" / "src"), str(_ROOT))
    if p not in sys.path
]

from db.client import reset_engine  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_db(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("PAYMENT_RECON_BUSINESS_ID", raising=False)
    monkeypatch.delenv("PAYMENT_RECON_CREATED_BY", raising=False)
    reset_engine()
    yield
    reset_engine()
