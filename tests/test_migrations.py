from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

_ROOT = Path(__file__).resolve().parents[1]

_TABLES = {"businesses", "suppliers", "invoices", "payments", "payment_splits"}


def _alembic_config(url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(_ROOT / "libs/db/alembic"))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


def _tables(url: str) -> set[str]:
    engine = create_engine(url)
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_upgrade_creates_tables_and_downgrade_drops_them(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    url = f"sqlite:///{tmp_path / 'migrate.sqlite'}"
    cfg = _alembic_config(url)

    command.upgrade(cfg, "head")
    assert _TABLES <= _tables(url)

    engine = create_engine(url)
    try:
        cols = {c["name"] for c in inspect(engine).get_columns("payment_splits")}
    finally:
        engine.dispose()
    assert {"payment_id", "payment_method", "amount", "installment_number", "due_date"} <= cols

    command.downgrade(cfg, "base")
    assert not (_TABLES & _tables(url))
