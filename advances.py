"""
advances.py
Cash advances and their settlement (recovered flag).
"""

from __future__ import annotations

import logging

import db
from models import Advance

logger = logging.getLogger(__name__)

_ORDER = " ORDER BY advance_date DESC, id DESC"


def insert_advance(store: db.Store, advance: Advance) -> int:
    return db.insert_record(store, "advances", advance)


def update_advance(store: db.Store, advance: Advance) -> None:
    db.update_record(store, "advances", advance)


def delete_advance(store: db.Store, advance_id: int) -> None:
    store.execute("DELETE FROM advances WHERE id=?", (advance_id,), tables=("advances",))


def get_advance(store: db.Store, advance_id: int) -> Advance | None:
    return Advance.from_row(store.fetch_one("SELECT * FROM advances WHERE id=?", (advance_id,)))


def settle_advances(store: db.Store, advance_ids: list[int]) -> int:
    """Mark advances as recovered. Settlement only goes one way."""
    if not advance_ids:
        return 0
    marks = ", ".join("?" for _ in advance_ids)
    count = store.execute_rowcount(
        f"UPDATE advances SET is_recovered = 1 WHERE id IN ({marks}) AND is_recovered = 0",
        tuple(advance_ids),
        tables=("advances",),
    )
    logger.info("settled %s advance(s)", count)
    return count


def _query(store: db.Store, where: str = "", params: tuple = (), conn=None) -> list[Advance]:
    sql = "SELECT * FROM advances" + (f" WHERE {where}" if where else "") + _ORDER
    return [Advance.from_row(r) for r in store.fetch_all(sql, params, conn=conn)]


def list_advances(store: db.Store, conn=None) -> list[Advance]:
    return _query(store, conn=conn)


def advances_for_worker(store: db.Store, worker_id: int) -> list[Advance]:
    return _query(store, "worker_id=?", (worker_id,))


def unsettled_advances_for_worker(store: db.Store, worker_id: int) -> list[Advance]:
    return _query(store, "worker_id=? AND is_recovered = 0", (worker_id,))


def advances_between(store: db.Store, start_date: str, end_date: str) -> list[Advance]:
    return _query(store, "advance_date BETWEEN ? AND ?", (start_date, end_date))
