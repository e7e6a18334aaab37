"""
attendance.py
Daily attendance records per worker and site.
"""

from __future__ import annotations

import db
from models import Attendance

_ORDER = " ORDER BY date DESC, id DESC"


def insert_attendance(store: db.Store, record: Attendance) -> int:
    return db.insert_record(store, "attendance", record)


def update_attendance(store: db.Store, record: Attendance) -> None:
    db.update_record(store, "attendance", record)


def delete_attendance(store: db.Store, attendance_id: int) -> None:
    store.execute("DELETE FROM attendance WHERE id=?", (attendance_id,), tables=("attendance",))


def get_attendance(store: db.Store, attendance_id: int) -> Attendance | None:
    return Attendance.from_row(store.fetch_one("SELECT * FROM attendance WHERE id=?", (attendance_id,)))


def _query(store: db.Store, where: str = "", params: tuple = (), conn=None) -> list[Attendance]:
    sql = "SELECT * FROM attendance" + (f" WHERE {where}" if where else "") + _ORDER
    return [Attendance.from_row(r) for r in store.fetch_all(sql, params, conn=conn)]


def list_attendance(store: db.Store, conn=None) -> list[Attendance]:
    return _query(store, conn=conn)


def attendance_for_worker(store: db.Store, worker_id: int) -> list[Attendance]:
    return _query(store, "worker_id=?", (worker_id,))


def attendance_for_site(store: db.Store, site_id: int) -> list[Attendance]:
    return _query(store, "site_id=?", (site_id,))


def attendance_on(store: db.Store, att_date: str) -> list[Attendance]:
    return _query(store, "date=?", (att_date,))


def attendance_for_worker_between(store: db.Store, worker_id: int, start_date: str, end_date: str) -> list[Attendance]:
    return _query(store, "worker_id=? AND date BETWEEN ? AND ?", (worker_id, start_date, end_date))
