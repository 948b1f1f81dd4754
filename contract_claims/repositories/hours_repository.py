"""
Hours Worked Repository.

Hours lines exist only attached to a claim and are created only during
claim submission (or seeding).
"""

from __future__ import annotations

from contract_claims.models.claim import HoursWorked
from contract_claims.models.service_models import HoursEntryInput
from contract_claims.repositories.base_repository import BaseRepository


class HoursWorkedRepository(BaseRepository[HoursWorked]):
    """Data access layer for HoursWorked entries."""

    COLLECTION = "hours_worked"

    def create_for_claim(
        self,
        claim_id: int,
        entries: list[HoursEntryInput],
    ) -> list[HoursWorked]:
        """Assign fresh ids to *entries* and link them to *claim_id*."""
        created: list[HoursWorked] = []
        with self._store.write_lock:
            for entry in entries:
                record = HoursWorked(
                    id=self._store.next_id(self.COLLECTION),
                    claim_id=claim_id,
                    date_worked=entry.date_worked,
                    hours=entry.hours,
                    description=entry.description.strip(),
                )
                created.append(self.add(record))
        return created

    def get_by_claim(self, claim_id: int) -> list[HoursWorked]:
        return self._select(lambda h: h.claim_id == claim_id)
