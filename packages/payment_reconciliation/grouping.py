"""Pass 1: group main-file rows into logical payment groups.

Main-file rows are first grouped by ``unique_id``. An id referenced as a
``parent_id`` by any sub-payments row ("claimed") always stands alone; its
money movements come from the sub-payments file. Unclaimed ids that declare
more than one installment and carry a receipt image are merged with other
unclaimed ids sharing the same receipt group key, since exports write one
main-file line per installment of the same receipt.

The receipt group key is a policy: callers may pass a different
``group_key`` function (returning ``None`` disables merging for a row).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from .ingest.headers import FieldGetter
from .models import Row
from .normalizers import parse_int

type GroupKeyFn = Callable[[Row, FieldGetter], str | None]


def receipt_group_key(row: Row, get: FieldGetter) -> str | None:
    """``supplier||images||reference`` for installment rows with a receipt.

    Returns ``None`` when the row does not declare more than one installment
    or has no image reference; such rows are never merged.
    """

    images = get(row, "images")
    if not images or parse_int(get(row, "installments_count"), 0) <= 1:
        return None
    return f"{get(row, 'supplier_name')}||{images}||{get(row, 'reference_number')}"


def claimed_parent_ids(subs_rows: Iterable[Row], get: FieldGetter) -> set[str]:
    """Every non-empty ``parent_id`` in the sub-payments file."""

    return {pid for pid in (get(r, "parent_id") for r in subs_rows) if pid}


@dataclass(slots=True)
class MainGroup:
    rows: list[Row] = field(default_factory=list)
    unique_ids: list[str] = field(default_factory=list)

    @property
    def first(self) -> Row:
        return self.rows[0]


def group_main_rows(
    main_rows: Iterable[Row],
    get: FieldGetter,
    claimed: set[str],
    *,
    group_key: GroupKeyFn = receipt_group_key,
) -> list[MainGroup]:
    """Return main-file groups in first-seen order.

    Rows without a ``unique_id`` are dropped.
    """

    by_uid: dict[str, list[Row]] = {}
    for row in main_rows:
        uid = get(row, "unique_id")
        if uid:
            by_uid.setdefault(uid, []).append(row)

    groups: dict[tuple[str, str], MainGroup] = {}
    for uid, rows in by_uid.items():
        key: tuple[str, str] = ("id", uid)
        if uid not in claimed:
            receipt = group_key(rows[0], get)
            if receipt is not None:
                key = ("receipt", receipt)
        group = groups.setdefault(key, MainGroup())
        group.rows.extend(rows)
        group.unique_ids.append(uid)
    return list(groups.values())


__all__ = [
    "GroupKeyFn",
    "receipt_group_key",
    "claimed_parent_ids",
    "MainGroup",
    "group_main_rows",
]
