"""
payments.py
Payment records. Lists come back newest first (payment_date DESC, id DESC).
"""

from __future__ import annotations

import db
from models import Payment

_ORDER = " ORDER BY payment_date DESC, id DESC"


def insert_payment(store: db.Store, payment: Payment) -> int:
    return db.insert_record(store, "payments", payment)


def update_payment(store: db.Store, payment: Payment) -> None:
    db.update_record(store, "payments", payment)


def delete_payment(store: db.Store, payment_id: int) -> None:
    store.execute("DELETE FROM payments WHERE id=?", (payment_id,), tables=("payments",))


def get_payment(store: db.Store, payment_id: int) -> Payment | None:
    return Payment.from_row(store.fetch_one("SELECT * FROM payments WHERE id=?", (payment_id,)))


def _query(store: db.Store, where: str = "", params: tuple = (), conn=None) -> list[Payment]:
    sql = "SELECT * FROM payments" + (f" WHERE {where}" if where else "") + _ORDER
    return [Payment.from_row(r) for r in store.fetch_all(sql, params, conn=conn)]


def list_payments(store: db.Store, conn=None) -> list[Payment]:
    return _query(store, conn=conn)


def payments_for_worker(store: db.Store, worker_id: int) -> list[Payment]:
    return _query(store, "worker_id=?", (worker_id,))


def payments_for_site(store: db.Store, site_id: int) -> list[Payment]:
    return _query(store, "site_id=?", (site_id,))


def payments_for_month(store: db.Store, month: int, year: int) -> list[Payment]:
    return _query(store, "for_month=? AND for_year=?", (month, year))


def payments_between(store: db.Store, start_date: str, end_date: str) -> list[Payment]:
    return _query(store, "payment_date BETWEEN ? AND ?", (start_date, end_date))
