"""
db.py
SQLite entity store: connection handling, transactions, schema creation and
table-change notifications.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections import defaultdict
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

TABLES = (
    "workers",
    "sites",
    "worker_site_assignments",
    "payments",
    "advances",
    "attendance",
)


class Store:
    """
    Explicit handle on the application database.

    Writes go through transaction(), which serializes writers, commits or
    rolls back as one unit and then notifies subscribers of the touched
    tables. Reads open their own connection (WAL mode keeps them off the
    writer's back).
    """

    def __init__(self, path: str | Path, timeout: float = 10.0):
        self.path = Path(path)
        self.timeout = timeout
        self._write_lock = threading.RLock()
        self._subscribers: dict[str, list[Callable[[str], None]]] = defaultdict(list)
        self._subscribers_lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path, timeout=self.timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    # ---------- connections ----------

    @contextmanager
    def get_conn(self):
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    @contextmanager
    def transaction(self, *tables: str):
        """
        One atomic write unit. Everything executed on the yielded connection
        is committed together or not at all. Subscribers of `tables` are
        notified after a successful commit.
        """
        with self._write_lock:
            conn = self._connect()
            try:
                conn.execute("BEGIN IMMEDIATE")
                yield conn
                conn.commit()
                logger.debug("committed transaction on %s", ", ".join(tables) or "-")
            except BaseException:
                conn.rollback()
                logger.debug("rolled back transaction on %s", ", ".join(tables) or "-")
                raise
            finally:
                conn.close()
        self._notify(tables)

    @contextmanager
    def snapshot(self):
        """Read connection pinned to a single read transaction."""
        conn = self._connect()
        try:
            conn.execute("BEGIN")
            yield conn
        finally:
            conn.rollback()
            conn.close()

    # ---------- helpers ----------

    def execute(self, sql: str, params: tuple = (), tables: Iterable[str] = ()) -> int:
        with self.transaction(*tables) as conn:
            cur = conn.execute(sql, params)
            return cur.lastrowid

    def execute_rowcount(self, sql: str, params: tuple = (), tables: Iterable[str] = ()) -> int:
        with self.transaction(*tables) as conn:
            cur = conn.execute(sql, params)
            return cur.rowcount

    def executemany(self, sql: str, seq_of_params: list[tuple], tables: Iterable[str] = ()) -> None:
        with self.transaction(*tables) as conn:
            conn.executemany(sql, seq_of_params)

    def fetch_one(self, sql: str, params: tuple = (), conn: sqlite3.Connection | None = None):
        if conn is not None:
            return conn.execute(sql, params).fetchone()
        with self.get_conn() as c:
            return c.execute(sql, params).fetchone()

    def fetch_all(self, sql: str, params: tuple = (), conn: sqlite3.Connection | None = None) -> list[sqlite3.Row]:
        if conn is not None:
            return conn.execute(sql, params).fetchall()
        with self.get_conn() as c:
            return c.execute(sql, params).fetchall()

    def fetch_scalar(self, sql: str, params: tuple = (), default=0):
        row = self.fetch_one(sql, params)
        if row is None or row[0] is None:
            return default
        return row[0]

    # ---------- change notifications ----------

    def subscribe(self, table: str, callback: Callable[[str], None]) -> Callable[[], None]:
        """Register callback(table) for committed writes; returns an unsubscribe callable."""
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        with self._subscribers_lock:
            self._subscribers[table].append(callback)

        def unsubscribe() -> None:
            with self._subscribers_lock:
                if callback in self._subscribers[table]:
                    self._subscribers[table].remove(callback)

        return unsubscribe

    def _notify(self, tables: Iterable[str]) -> None:
        for table in dict.fromkeys(tables):
            with self._subscribers_lock:
                callbacks = list(self._subscribers.get(table, ()))
            for cb in callbacks:
                try:
                    cb(table)
                except Exception:
                    logger.exception("subscriber %r failed for %s", cb, table)


def insert_record(store: Store, table: str, record) -> int:
    cols = record.columns()
    sql = f"INSERT INTO {table}({', '.join(cols)}) VALUES({', '.join('?' for _ in cols)})"
    return store.execute(sql, record.values(), tables=(table,))


def update_record(store: Store, table: str, record) -> int:
    if record.id is None:
        raise ValueError(f"Cannot update a {table} row without an id")
    assignments = ", ".join(f"{c}=?" for c in record.columns())
    return store.execute_rowcount(
        f"UPDATE {table} SET {assignments} WHERE id=?",
        record.values() + (record.id,),
        tables=(table,),
    )


def _create_tables(store: Store) -> None:
    with store.transaction() as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS workers (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                phone TEXT NOT NULL,
                address TEXT NOT NULL DEFAULT '',
                role TEXT NOT NULL DEFAULT '',
                national_id TEXT NOT NULL DEFAULT '',
                join_date TEXT NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1,
                profile_image_path TEXT
            )
            """
        )

        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS sites (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                address TEXT NOT NULL DEFAULT '',
                client_name TEXT NOT NULL DEFAULT '',
                client_contact TEXT NOT NULL DEFAULT '',
                start_date TEXT NOT NULL,
                expected_end_date TEXT,
                status TEXT NOT NULL CHECK(status IN ('ACTIVE','COMPLETED','ON_HOLD')),
                notes TEXT
            )
            """
        )

        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS worker_site_assignments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                worker_id INTEGER NOT NULL,
                site_id INTEGER NOT NULL,
                assignment_date TEXT NOT NULL,
                end_date TEXT,
                is_active INTEGER NOT NULL DEFAULT 1,
                FOREIGN KEY(worker_id) REFERENCES workers(id) ON DELETE CASCADE,
                FOREIGN KEY(site_id) REFERENCES sites(id) ON DELETE CASCADE
            )
            """
        )
        # At most one active assignment per worker
        conn.execute(
            """
            CREATE UNIQUE INDEX IF NOT EXISTS uq_active_assignment
            ON worker_site_assignments(worker_id) WHERE is_active = 1
            """
        )

        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS payments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                worker_id INTEGER NOT NULL,
                site_id INTEGER,
                payment_date TEXT NOT NULL,
                amount REAL NOT NULL CHECK(amount >= 0),
                description TEXT NOT NULL DEFAULT '',
                payment_mode TEXT NOT NULL CHECK(payment_mode IN ('CASH','BANK_TRANSFER','OTHER')),
                reference_number TEXT,
                for_month INTEGER NOT NULL DEFAULT 0,
                for_year INTEGER NOT NULL DEFAULT 0,
                notes TEXT,
                FOREIGN KEY(worker_id) REFERENCES workers(id) ON DELETE CASCADE,
                FOREIGN KEY(site_id) REFERENCES sites(id) ON DELETE SET NULL
            )
            """
        )

        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS advances (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                worker_id INTEGER NOT NULL,
                amount REAL NOT NULL CHECK(amount >= 0),
                advance_date TEXT NOT NULL,
                reason TEXT NOT NULL DEFAULT '',
                notes TEXT,
                payment_mode TEXT NOT NULL CHECK(payment_mode IN ('CASH','BANK_TRANSFER','OTHER')),
                reference_number TEXT,
                is_recovered INTEGER NOT NULL DEFAULT 0,
                FOREIGN KEY(worker_id) REFERENCES workers(id) ON DELETE CASCADE
            )
            """
        )

        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS attendance (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                worker_id INTEGER NOT NULL,
                site_id INTEGER NOT NULL,
                date TEXT NOT NULL,
                status TEXT NOT NULL CHECK(status IN ('PRESENT','ABSENT','HALF_DAY','LEAVE')),
                hours_worked REAL,
                notes TEXT,
                FOREIGN KEY(worker_id) REFERENCES workers(id) ON DELETE CASCADE,
                FOREIGN KEY(site_id) REFERENCES sites(id) ON DELETE CASCADE
            )
            """
        )

        for table, column in (
            ("worker_site_assignments", "worker_id"),
            ("worker_site_assignments", "site_id"),
            ("payments", "worker_id"),
            ("payments", "site_id"),
            ("advances", "worker_id"),
            ("attendance", "worker_id"),
            ("attendance", "site_id"),
        ):
            conn.execute(f"CREATE INDEX IF NOT EXISTS ix_{table}_{column} ON {table}({column})")


def init_db(path: str | Path) -> Store:
    """
    Open (and create if needed) the database at `path`.
    - WAL journal so readers see committed snapshots while a write runs
    - Create tables and indexes
    """
    store = Store(path)
    with store.get_conn() as conn:
        conn.execute("PRAGMA journal_mode=WAL")
    _create_tables(store)
    logger.info("database ready at %s", store.path)
    return store
