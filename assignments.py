"""
assignments.py
Worker <-> site assignment lifecycle.

A worker has at most one active assignment. Moving a worker closes the
current row (is_active=0, end_date stamped) and opens a new one in the same
transaction, so nobody ever sees zero or two active rows mid-move.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

import db
import utils
from models import Worker, WorkerSiteAssignment

logger = logging.getLogger(__name__)

_TABLE = "worker_site_assignments"


@dataclass(frozen=True)
class AssignmentRequest:
    worker_id: int
    site_id: int
    date: str


@dataclass(frozen=True)
class BulkAssignResult:
    request: AssignmentRequest
    assignment_id: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _deactivate(conn: sqlite3.Connection, worker_id: int, end_date: str) -> int:
    cur = conn.execute(
        f"UPDATE {_TABLE} SET is_active = 0, end_date = ? WHERE worker_id = ? AND is_active = 1",
        (end_date, worker_id),
    )
    return cur.rowcount


def assign_worker_to_site(store: db.Store, worker_id: int, site_id: int, assignment_date: str) -> int:
    """
    Close the worker's current assignment (if any) and open a new one.
    Re-assigning to the same site still opens a fresh row dated `assignment_date`.
    Returns the new assignment id.
    """
    utils.require_date(assignment_date, "assignment date")
    with store.transaction(_TABLE) as conn:
        closed = _deactivate(conn, worker_id, assignment_date)
        cur = conn.execute(
            f"INSERT INTO {_TABLE}(worker_id, site_id, assignment_date, end_date, is_active) VALUES(?,?,?,NULL,1)",
            (worker_id, site_id, assignment_date),
        )
        assignment_id = cur.lastrowid
    logger.info(
        "worker %s assigned to site %s on %s (assignment %s, closed %s)",
        worker_id, site_id, assignment_date, assignment_id, closed,
    )
    return assignment_id


def deactivate_current_assignment(store: db.Store, worker_id: int, end_date: str) -> int:
    """End the worker's active assignment. No-op (returns 0) when there is none."""
    utils.require_date(end_date, "end date")
    with store.transaction(_TABLE) as conn:
        closed = _deactivate(conn, worker_id, end_date)
    if closed:
        logger.info("worker %s unassigned on %s", worker_id, end_date)
    return closed


def bulk_assign(store: db.Store, requests: list[AssignmentRequest]) -> list[BulkAssignResult]:
    """
    Apply requests in order, each in its own transaction. A failed request is
    reported in its result and does not stop the rest of the batch.
    """
    results: list[BulkAssignResult] = []
    for req in requests:
        try:
            assignment_id = assign_worker_to_site(store, req.worker_id, req.site_id, req.date)
        except (sqlite3.Error, ValueError) as e:
            logger.error("bulk assign failed for worker %s -> site %s: %s", req.worker_id, req.site_id, e)
            results.append(BulkAssignResult(req, error=str(e)))
        else:
            results.append(BulkAssignResult(req, assignment_id=assignment_id))
    return results


def get_active_assignment(store: db.Store, worker_id: int, conn=None) -> WorkerSiteAssignment | None:
    row = store.fetch_one(
        f"SELECT * FROM {_TABLE} WHERE worker_id = ? AND is_active = 1 LIMIT 1",
        (worker_id,),
        conn=conn,
    )
    return WorkerSiteAssignment.from_row(row)


def get_workers_for_site(store: db.Store, site_id: int, conn=None) -> list[Worker]:
    rows = store.fetch_all(
        f"""
        SELECT w.* FROM workers w
        INNER JOIN {_TABLE} a ON w.id = a.worker_id
        WHERE a.site_id = ? AND a.is_active = 1
        """,
        (site_id,),
        conn=conn,
    )
    return [Worker.from_row(r) for r in rows]


def get_assignment(store: db.Store, assignment_id: int) -> WorkerSiteAssignment | None:
    return WorkerSiteAssignment.from_row(store.fetch_one(f"SELECT * FROM {_TABLE} WHERE id = ?", (assignment_id,)))


def assignments_for_worker(store: db.Store, worker_id: int) -> list[WorkerSiteAssignment]:
    rows = store.fetch_all(
        f"SELECT * FROM {_TABLE} WHERE worker_id = ? ORDER BY assignment_date DESC, id DESC",
        (worker_id,),
    )
    return [WorkerSiteAssignment.from_row(r) for r in rows]


def assignments_for_site(store: db.Store, site_id: int) -> list[WorkerSiteAssignment]:
    rows = store.fetch_all(
        f"SELECT * FROM {_TABLE} WHERE site_id = ? ORDER BY assignment_date DESC, id DESC",
        (site_id,),
    )
    return [WorkerSiteAssignment.from_row(r) for r in rows]


def update_assignment(store: db.Store, assignment: WorkerSiteAssignment) -> None:
    # the partial unique index rejects a second active row for the worker
    db.update_record(store, _TABLE, assignment)


def delete_assignment(store: db.Store, assignment_id: int) -> None:
    store.execute(f"DELETE FROM {_TABLE} WHERE id = ?", (assignment_id,), tables=(_TABLE,))
