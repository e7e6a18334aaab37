"""
live.py
Observable queries: a query that can be evaluated on demand and that pushes a
fresh value to its observers after every committed write on its tables.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

import db

logger = logging.getLogger(__name__)


class LiveQuery:
    """
    Usage:
        q = LiveQuery(store, ("workers",), lambda s: summary.active_worker_count(s))
        q.value()                       # evaluate now
        stop = q.observe(print)         # print new value after each write
        stop()                          # unsubscribe
    """

    def __init__(self, store: db.Store, tables: tuple[str, ...], compute: Callable[[db.Store], Any]):
        self._store = store
        self._tables = tuple(tables)
        self._compute = compute
        self._observers: list[Callable[[Any], None]] = []
        self._unsubscribers: list[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def tables(self) -> tuple[str, ...]:
        return self._tables

    def value(self) -> Any:
        return self._compute(self._store)

    def observe(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        with self._lock:
            if not self._observers:
                self._unsubscribers = [self._store.subscribe(t, self._on_change) for t in self._tables]
            self._observers.append(callback)

        def cancel() -> None:
            self._remove(callback)

        return cancel

    def _remove(self, callback: Callable[[Any], None]) -> None:
        with self._lock:
            if callback not in self._observers:
                return
            self._observers.remove(callback)
            if not self._observers:
                for unsubscribe in self._unsubscribers:
                    unsubscribe()
                self._unsubscribers = []

    def _on_change(self, table: str) -> None:
        with self._lock:
            observers = list(self._observers)
        if not observers:
            return
        value = self.value()
        logger.debug("live query on %s refreshed after write to %s", ", ".join(self._tables), table)
        for cb in observers:
            cb(value)
