"""
summary.py
Dashboard aggregates, computed from the store on every read, plus LiveQuery
wrappers for screens that want to be told when they change.
"""

from __future__ import annotations

import db
from live import LiveQuery


def active_worker_count(store: db.Store) -> int:
    return int(store.fetch_scalar("SELECT COUNT(*) FROM workers WHERE is_active = 1"))


def active_site_count(store: db.Store) -> int:
    return int(store.fetch_scalar("SELECT COUNT(*) FROM sites WHERE status = 'ACTIVE'"))


def total_unsettled_advances(store: db.Store, worker_id: int) -> float:
    return float(store.fetch_scalar(
        "SELECT SUM(amount) FROM advances WHERE worker_id = ? AND is_recovered = 0",
        (worker_id,),
    ))


def worker_count_for_site(store: db.Store, site_id: int) -> int:
    return int(store.fetch_scalar(
        "SELECT COUNT(*) FROM worker_site_assignments WHERE site_id = ? AND is_active = 1",
        (site_id,),
    ))


def total_payments_for_worker(store: db.Store, worker_id: int) -> float:
    return float(store.fetch_scalar("SELECT SUM(amount) FROM payments WHERE worker_id = ?", (worker_id,)))


def total_payments_for_site(store: db.Store, site_id: int) -> float:
    return float(store.fetch_scalar("SELECT SUM(amount) FROM payments WHERE site_id = ?", (site_id,)))


def total_payments_for_month(store: db.Store, month: int, year: int) -> float:
    return float(store.fetch_scalar(
        "SELECT SUM(amount) FROM payments WHERE for_month = ? AND for_year = ?",
        (month, year),
    ))


def attendance_count_by_status(store: db.Store, worker_id: int, status: str, start_date: str, end_date: str) -> int:
    return int(store.fetch_scalar(
        "SELECT COUNT(*) FROM attendance WHERE worker_id = ? AND status = ? AND date BETWEEN ? AND ?",
        (worker_id, status, start_date, end_date),
    ))


def dashboard_counts(store: db.Store) -> dict[str, float]:
    with store.snapshot() as conn:
        row = conn.execute(
            """
            SELECT
                (SELECT COUNT(*) FROM workers WHERE is_active = 1) AS active_workers,
                (SELECT COUNT(*) FROM sites WHERE status = 'ACTIVE') AS active_sites,
                (SELECT COALESCE(SUM(amount), 0) FROM advances WHERE is_recovered = 0) AS unsettled_advances,
                (SELECT COALESCE(SUM(amount), 0) FROM payments) AS total_paid
            """
        ).fetchone()
    return dict(row)


# ---------- live views ----------

def live_active_worker_count(store: db.Store) -> LiveQuery:
    return LiveQuery(store, ("workers",), active_worker_count)


def live_active_site_count(store: db.Store) -> LiveQuery:
    return LiveQuery(store, ("sites",), active_site_count)


def live_unsettled_advances(store: db.Store, worker_id: int) -> LiveQuery:
    return LiveQuery(store, ("advances",), lambda s: total_unsettled_advances(s, worker_id))


def live_worker_count_for_site(store: db.Store, site_id: int) -> LiveQuery:
    return LiveQuery(store, ("worker_site_assignments",), lambda s: worker_count_for_site(s, site_id))
