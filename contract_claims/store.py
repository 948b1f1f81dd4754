"""
In-Memory Entity Store.

Holds one insertion-ordered collection per entity type (lecturers,
statuses, claims, hours, documents) behind a single re-entrant write lock.

Identity is sequential per collection: the next id is one past the highest
id ever handed out, so ids increase monotonically and are never reused,
even for records removed by a rolled-back transaction.

Data access is performed through the Repository layer.  This module only
manages collections, identity, and atomicity; it contains no business rules.

Usage (dependency injection at container startup)::

    from contract_claims.store import EntityStore
    from contract_claims.logger import StructuredLogger

    store = EntityStore(logger=StructuredLogger(name="store"))
    with store.transaction():
        claim_id = store.next_id("claims")
        store.insert("claims", claim_id, claim)
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Generator, Optional, TypeVar

from pydantic import BaseModel

from contract_claims.logger import StructuredLogger

RecordT = TypeVar("RecordT", bound=BaseModel)


class EntityStore:
    """Process-local store for all claim-core records.

    Parameters
    ----------
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger
        self._write_lock: threading.RLock = threading.RLock()
        self._collections: dict[str, dict[int, BaseModel]] = {}
        self._high_water: dict[str, int] = {}
        self._pending_inserts: Optional[list[tuple[str, int]]] = None

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def write_lock(self) -> threading.RLock:
        """Return the lock guarding every collection.

        Code that reads several collections and must see them consistently
        (e.g. a claim's hours together with its lecturer's rate) should
        hold this lock for the duration of the read::

            with store.write_lock:
                hours = store.select("hours_worked", lambda h: h.claim_id == 1)
                lecturer = store.get("lecturers", 1)
        """
        return self._write_lock

    @property
    def in_transaction(self) -> bool:
        """``True`` while a :meth:`transaction` block is active."""
        return self._pending_inserts is not None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def next_id(self, collection: str) -> int:
        """Reserve and return the next id for *collection*.

        ``max(existing ids) + 1``, or ``1`` for an empty collection.
        The reservation is permanent: a rolled-back insert still consumes
        its id.
        """
        with self._write_lock:
            current = self._high_water.get(collection, 0)
            existing = self._collections.get(collection)
            if existing:
                current = max(current, max(existing))
            new_id = current + 1
            self._high_water[collection] = new_id
            return new_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, collection: str, record_id: int) -> Optional[BaseModel]:
        with self._write_lock:
            return self._collections.get(collection, {}).get(record_id)

    def all(self, collection: str) -> list[BaseModel]:
        """Full scan of *collection* in insertion order."""
        with self._write_lock:
            return list(self._collections.get(collection, {}).values())

    def select(
        self,
        collection: str,
        predicate: Callable[[BaseModel], bool],
    ) -> list[BaseModel]:
        with self._write_lock:
            return [
                record
                for record in self._collections.get(collection, {}).values()
                if predicate(record)
            ]

    def count(self, collection: str) -> int:
        with self._write_lock:
            return len(self._collections.get(collection, {}))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, collection: str, record_id: int, record: RecordT) -> RecordT:
        """Insert *record* under *record_id*.

        Raises
        ------
        ValueError
            If *record_id* is already present in *collection*.
        """
        with self._write_lock:
            records = self._collections.setdefault(collection, {})
            if record_id in records:
                raise ValueError(
                    f"Duplicate id {record_id} in collection '{collection}'."
                )
            records[record_id] = record
            if record_id > self._high_water.get(collection, 0):
                self._high_water[collection] = record_id
            if self._pending_inserts is not None:
                self._pending_inserts.append((collection, record_id))
            return record

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """Hold the write lock and undo every insert on exception.

        While the block is active no other thread can read or write the
        store.  On normal exit the inserts stay; on exception each insert
        made inside the block is removed and the error re-raised.
        Re-entrant: a nested block joins the outer one.

        Example::

            with store.transaction():
                store.insert("claims", claim_id, claim)
                for entry in hours:
                    store.insert("hours_worked", entry.id, entry)
            # all three record sets are visible, or none are
        """
        with self._write_lock:
            if self._pending_inserts is not None:
                yield
                return

            self._pending_inserts = []
            try:
                yield
                self._logger.debug(
                    "Store transaction committed (%d inserts).",
                    len(self._pending_inserts),
                )
            except Exception:
                for collection, record_id in reversed(self._pending_inserts):
                    self._collections.get(collection, {}).pop(record_id, None)
                self._logger.error(
                    "Store transaction rolled back (%d inserts undone).",
                    len(self._pending_inserts),
                    exc_info=True,
                )
                raise
            finally:
                self._pending_inserts = None
