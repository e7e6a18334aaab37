"""
sample_data.py
Demo rows for trying the app out (adds new rows each time it runs).
"""

from __future__ import annotations

from datetime import date, timedelta

import advances
import assignments
import attendance
import db
import payments
import sites
import workers
from models import Advance, Attendance, Payment, Site, Worker


def insert_sample_data(store: db.Store) -> None:
    """
    Insert 3 workers, 2 sites, assignments and a few payments/advances/attendance rows.
    """
    today = date.today()
    iso = lambda d: d.isoformat()

    w_ids = [
        workers.insert_worker(store, Worker(None, "Ramesh Kumar", "9800000001", "Ward 4, Nagpur", "Mason",
                                            "1234 5678 9012", iso(today - timedelta(days=400)))),
        workers.insert_worker(store, Worker(None, "Suresh Patil", "9800000002", "Sitabuldi, Nagpur", "Helper",
                                            "2345 6789 0123", iso(today - timedelta(days=120)))),
        workers.insert_worker(store, Worker(None, "Anil Yadav", "9800000003", "Hingna, Nagpur", "Carpenter",
                                            "3456 7890 1234", iso(today - timedelta(days=30)), is_active=False)),
    ]

    s1 = sites.insert_site(store, Site(None, "Green Valley Villas", "Plot 12, Wardha Road", "Mehta Builders",
                                       "9811111111", iso(today - timedelta(days=90)),
                                       iso(today + timedelta(days=180)), "ACTIVE", "Phase 1 foundations"))
    s2 = sites.insert_site(store, Site(None, "Lake View Office", "Ambazari", "Joshi Infra",
                                       "9822222222", iso(today - timedelta(days=200)), None, "ON_HOLD", None))

    assignments.assign_worker_to_site(store, w_ids[0], s2, iso(today - timedelta(days=60)))
    assignments.assign_worker_to_site(store, w_ids[0], s1, iso(today - timedelta(days=20)))
    assignments.assign_worker_to_site(store, w_ids[1], s1, iso(today - timedelta(days=20)))

    payments.insert_payment(store, Payment(None, w_ids[0], s1, iso(today - timedelta(days=5)), 15000.0,
                                           "Monthly wages", "BANK_TRANSFER", "UTR0001",
                                           for_month=today.month, for_year=today.year))
    payments.insert_payment(store, Payment(None, w_ids[1], s1, iso(today - timedelta(days=3)), 9000.0,
                                           "Monthly wages", "CASH", for_month=today.month, for_year=today.year))

    advances.insert_advance(store, Advance(None, w_ids[0], 2000.0, iso(today - timedelta(days=10)),
                                           "Medical", None, "CASH"))
    advances.insert_advance(store, Advance(None, w_ids[1], 500.0, iso(today - timedelta(days=40)),
                                           "Travel", "Recovered from wages", "CASH", is_recovered=True))

    for back in range(3):
        day = iso(today - timedelta(days=back))
        attendance.insert_attendance(store, Attendance(None, w_ids[0], s1, day, "PRESENT", 8.0, None))
        attendance.insert_attendance(store, Attendance(None, w_ids[1], s1, day,
                                                       "HALF_DAY" if back == 1 else "PRESENT", None, None))
