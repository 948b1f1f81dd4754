"""
Lecturer Repository.

Read access to staff records.  Lecturers are seeded (or injected) at
container start and never edited through the claim core.

**No ``delete()`` or ``update()`` method.**  Claims reference lecturers by
id and derive their totals from the lecturer's current rate.
"""

from __future__ import annotations

from typing import Optional

from contract_claims.models.enums import LecturerRole
from contract_claims.models.lecturer import Lecturer
from contract_claims.repositories.base_repository import BaseRepository


class LecturerRepository(BaseRepository[Lecturer]):
    """Data access layer for Lecturer entities."""

    COLLECTION = "lecturers"

    def get_by_email(self, email: str) -> Optional[Lecturer]:
        """Case-insensitive lookup by email address."""
        normalized_email = email.strip().lower()
        matches = self._select(lambda l: l.email.lower() == normalized_email)
        return matches[0] if matches else None

    def get_by_role(self, role: LecturerRole) -> list[Lecturer]:
        return self._select(lambda l: l.role == role)
