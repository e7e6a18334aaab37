"""
workers.py
Worker records: CRUD and list queries.
"""

from __future__ import annotations

import logging

import db
from models import Worker

logger = logging.getLogger(__name__)

# Tables whose rows go away with a worker (ON DELETE CASCADE)
_DELETE_TOUCHES = ("workers", "payments", "advances", "attendance", "worker_site_assignments")


def insert_worker(store: db.Store, worker: Worker) -> int:
    worker_id = db.insert_record(store, "workers", worker)
    logger.info("worker %s added (%s)", worker_id, worker.name)
    return worker_id


def update_worker(store: db.Store, worker: Worker) -> None:
    db.update_record(store, "workers", worker)


def set_worker_active(store: db.Store, worker_id: int, active: bool) -> None:
    store.execute("UPDATE workers SET is_active=? WHERE id=?", (int(active), worker_id), tables=("workers",))


def delete_worker(store: db.Store, worker_id: int) -> None:
    store.execute("DELETE FROM workers WHERE id=?", (worker_id,), tables=_DELETE_TOUCHES)
    logger.info("worker %s deleted", worker_id)


def get_worker(store: db.Store, worker_id: int) -> Worker | None:
    return Worker.from_row(store.fetch_one("SELECT * FROM workers WHERE id=?", (worker_id,)))


def list_workers(store: db.Store, active_only: bool = False, conn=None) -> list[Worker]:
    sql = "SELECT * FROM workers"
    if active_only:
        sql += " WHERE is_active = 1"
    sql += " ORDER BY name ASC"
    return [Worker.from_row(r) for r in store.fetch_all(sql, conn=conn)]


def search_workers(store: db.Store, query: str) -> list[Worker]:
    like = f"%{query.strip()}%"
    rows = store.fetch_all(
        "SELECT * FROM workers WHERE name LIKE ? OR phone LIKE ? ORDER BY name ASC",
        (like, like),
    )
    return [Worker.from_row(r) for r in rows]
