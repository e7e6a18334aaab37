"""
models.py
Domain records (dataclasses) and the fixed value sets used across the app.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, fields

DATE_FORMAT = "%Y-%m-%d"

SITE_STATUSES = ("ACTIVE", "COMPLETED", "ON_HOLD")
PAYMENT_MODES = ("CASH", "BANK_TRANSFER", "OTHER")
ATTENDANCE_STATUSES = ("PRESENT", "ABSENT", "HALF_DAY", "LEAVE")


class _Record:
    """Row <-> dataclass mapping shared by all entities."""

    _bool_fields: tuple[str, ...] = ()

    @classmethod
    def from_row(cls, row: sqlite3.Row | None):
        if row is None:
            return None
        data = {f.name: row[f.name] for f in fields(cls)}
        for name in cls._bool_fields:
            data[name] = bool(data[name])
        return cls(**data)

    def values(self) -> tuple:
        """Column values in declaration order, without the id."""
        out = []
        for f in fields(self):
            if f.name == "id":
                continue
            v = getattr(self, f.name)
            out.append(int(v) if f.name in self._bool_fields else v)
        return tuple(out)

    @classmethod
    def columns(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name != "id")


@dataclass(frozen=True)
class Worker(_Record):
    id: int | None
    name: str
    phone: str
    address: str
    role: str
    national_id: str
    join_date: str
    is_active: bool = True
    profile_image_path: str | None = None

    _bool_fields = ("is_active",)


@dataclass(frozen=True)
class Site(_Record):
    id: int | None
    name: str
    address: str
    client_name: str
    client_contact: str
    start_date: str
    expected_end_date: str | None
    status: str  # ACTIVE / COMPLETED / ON_HOLD
    notes: str | None = None


@dataclass(frozen=True)
class WorkerSiteAssignment(_Record):
    id: int | None
    worker_id: int
    site_id: int
    assignment_date: str
    end_date: str | None = None
    is_active: bool = True

    _bool_fields = ("is_active",)


@dataclass(frozen=True)
class Payment(_Record):
    id: int | None
    worker_id: int
    site_id: int | None
    payment_date: str
    amount: float
    description: str
    payment_mode: str  # CASH / BANK_TRANSFER / OTHER
    reference_number: str | None = None
    for_month: int = 0  # 1-12, 0 when not tied to a payroll month
    for_year: int = 0
    notes: str | None = None


@dataclass(frozen=True)
class Advance(_Record):
    id: int | None
    worker_id: int
    amount: float
    advance_date: str
    reason: str
    notes: str | None
    payment_mode: str
    reference_number: str | None = None
    is_recovered: bool = False

    _bool_fields = ("is_recovered",)


@dataclass(frozen=True)
class Attendance(_Record):
    id: int | None
    worker_id: int
    site_id: int
    date: str
    status: str  # PRESENT / ABSENT / HALF_DAY / LEAVE
    hours_worked: float | None = None
    notes: str | None = None
