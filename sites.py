"""
sites.py
Site records: CRUD, status and search queries.
"""

from __future__ import annotations

import logging

import db
from models import SITE_STATUSES, Site

logger = logging.getLogger(__name__)

# attendance/assignments cascade, payments.site_id is set to NULL
_DELETE_TOUCHES = ("sites", "payments", "attendance", "worker_site_assignments")


def insert_site(store: db.Store, site: Site) -> int:
    site_id = db.insert_record(store, "sites", site)
    logger.info("site %s added (%s)", site_id, site.name)
    return site_id


def update_site(store: db.Store, site: Site) -> None:
    db.update_record(store, "sites", site)


def set_site_status(store: db.Store, site_id: int, status: str) -> None:
    if status not in SITE_STATUSES:
        raise ValueError(f"Unknown site status: {status}")
    store.execute("UPDATE sites SET status=? WHERE id=?", (status, site_id), tables=("sites",))


def delete_site(store: db.Store, site_id: int) -> None:
    store.execute("DELETE FROM sites WHERE id=?", (site_id,), tables=_DELETE_TOUCHES)
    logger.info("site %s deleted", site_id)


def get_site(store: db.Store, site_id: int) -> Site | None:
    return Site.from_row(store.fetch_one("SELECT * FROM sites WHERE id=?", (site_id,)))


def list_sites(store: db.Store, status: str | None = None, conn=None) -> list[Site]:
    if status is not None:
        rows = store.fetch_all("SELECT * FROM sites WHERE status=? ORDER BY name ASC", (status,), conn=conn)
    else:
        rows = store.fetch_all("SELECT * FROM sites ORDER BY name ASC", conn=conn)
    return [Site.from_row(r) for r in rows]


def search_sites(store: db.Store, query: str) -> list[Site]:
    like = f"%{query.strip()}%"
    rows = store.fetch_all(
        """
        SELECT * FROM sites
        WHERE name LIKE ? OR address LIKE ? OR client_name LIKE ?
        ORDER BY name ASC
        """,
        (like, like, like),
    )
    return [Site.from_row(r) for r in rows]


def sites_started_between(store: db.Store, start_date: str, end_date: str) -> list[Site]:
    rows = store.fetch_all(
        "SELECT * FROM sites WHERE start_date BETWEEN ? AND ? ORDER BY start_date ASC",
        (start_date, end_date),
    )
    return [Site.from_row(r) for r in rows]
