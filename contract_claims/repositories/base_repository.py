"""
Base Repository.

Provides shared infrastructure for all repositories:
- EntityStore reference
- Logger reference
- Typed lookup / scan helpers over the repository's collection
"""

from __future__ import annotations

from typing import Callable, Generic, Optional, TypeVar

from pydantic import BaseModel

from contract_claims.logger import StructuredLogger
from contract_claims.store import EntityStore

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseRepository(Generic[ModelT]):
    """Base class for all repositories. Receives dependencies via __init__."""

    COLLECTION: str = ""

    def __init__(self, store: EntityStore, logger: StructuredLogger) -> None:
        self._store = store
        self._logger = logger

    @property
    def store(self) -> EntityStore:
        return self._store

    def get_by_id(self, record_id: int) -> Optional[ModelT]:
        """Return the stored record with *record_id*, or ``None``."""
        return self._store.get(self.COLLECTION, record_id)  # type: ignore[return-value]

    def get_all(self) -> list[ModelT]:
        """Return every record in insertion order."""
        return self._store.all(self.COLLECTION)  # type: ignore[return-value]

    def exists(self, record_id: int) -> bool:
        return self.get_by_id(record_id) is not None

    def count(self) -> int:
        return self._store.count(self.COLLECTION)

    def add(self, record: ModelT) -> ModelT:
        """Insert a record that already carries its id (seeding, imports)."""
        inserted = self._store.insert(self.COLLECTION, record.id, record)  # type: ignore[attr-defined]
        self._logger.debug("Inserted %s/%s", self.COLLECTION, record.id)  # type: ignore[attr-defined]
        return inserted

    def _select(self, predicate: Callable[[ModelT], bool]) -> list[ModelT]:
        return self._store.select(self.COLLECTION, predicate)  # type: ignore[arg-type, return-value]
