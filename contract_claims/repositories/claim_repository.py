"""
Claim Repository.

Handles claim header records.  Children (hours, documents) live in their
own repositories and are linked through ``claim_id``.

Records held by the store never carry display projections; those are
filled on copies by the lifecycle service.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from contract_claims.models.claim import Claim
from contract_claims.repositories.base_repository import BaseRepository


class ClaimRepository(BaseRepository[Claim]):
    """Data access layer for Claim entities.

    **No ``delete()`` method.**  A claim and its children are created
    together by submission and then only change status or verification.
    """

    COLLECTION = "claims"

    def create(
        self,
        lecturer_id: int,
        month: int,
        year: int,
        submission_date: datetime,
        total_amount: Decimal,
        status_id: int,
    ) -> Claim:
        """Assign the next claim id and insert a new header record."""
        with self._store.write_lock:
            claim = Claim(
                id=self._store.next_id(self.COLLECTION),
                lecturer_id=lecturer_id,
                month=month,
                year=year,
                submission_date=submission_date,
                total_amount=total_amount,
                status_id=status_id,
            )
            return self.add(claim)

    def get_by_lecturer(self, lecturer_id: int) -> list[Claim]:
        return self._select(lambda c: c.lecturer_id == lecturer_id)

    def get_by_status(self, status_id: int) -> list[Claim]:
        return self._select(lambda c: c.status_id == status_id)

    def set_status(self, claim_id: int, status_id: int) -> Optional[Claim]:
        """Overwrite the status of the stored claim. ``None`` if absent."""
        with self._store.write_lock:
            claim = self.get_by_id(claim_id)
            if claim is None:
                return None
            claim.status_id = status_id
            return claim

    def set_verification(
        self,
        claim_id: int,
        is_verified: bool,
        notes: Optional[str],
    ) -> Optional[Claim]:
        """Overwrite the verification flag and notes. ``None`` if absent."""
        with self._store.write_lock:
            claim = self.get_by_id(claim_id)
            if claim is None:
                return None
            claim.is_verified = is_verified
            claim.verification_notes = notes
            return claim
