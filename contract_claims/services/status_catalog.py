"""
Claim Status Catalog.

The fixed enumeration of claim states with id <-> name lookup.  Exactly
one catalog exists per service container; ids are stable for the
lifetime of the process.

``ADVISORY_TRANSITIONS`` describes the conventional workflow graph.  It is
a pure lookup for callers deciding which action to offer; the lifecycle
service never enforces it and ``update_status`` accepts any catalog status
from any other.
"""

from __future__ import annotations

from typing import Optional

from contract_claims.logger import StructuredLogger
from contract_claims.models.claim import ClaimStatus
from contract_claims.models.enums import StatusId
from contract_claims.repositories.status_repository import StatusRepository
from contract_claims.services.base_service import BaseService

DEFAULT_STATUSES: tuple[ClaimStatus, ...] = (
    ClaimStatus(id=StatusId.SUBMITTED, name="Submitted"),
    ClaimStatus(id=StatusId.REJECTED, name="Rejected"),
    ClaimStatus(id=StatusId.PENDING_REVIEW, name="Pending Review"),
    ClaimStatus(id=StatusId.APPROVED, name="Approved"),
    ClaimStatus(id=StatusId.COMPLETED_PAID, name="Completed/Paid"),
)

ADVISORY_TRANSITIONS: dict[int, frozenset[int]] = {
    StatusId.SUBMITTED: frozenset({StatusId.PENDING_REVIEW}),
    StatusId.PENDING_REVIEW: frozenset({StatusId.APPROVED, StatusId.REJECTED}),
    StatusId.APPROVED: frozenset({StatusId.PENDING_REVIEW, StatusId.COMPLETED_PAID}),
    StatusId.REJECTED: frozenset({StatusId.PENDING_REVIEW, StatusId.COMPLETED_PAID}),
    StatusId.COMPLETED_PAID: frozenset({StatusId.APPROVED, StatusId.REJECTED}),
}


class StatusCatalog(BaseService):
    """Lookup service over the seeded status entries."""

    def __init__(self, repo: StatusRepository, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._repo = repo

    def seed(self, statuses: tuple[ClaimStatus, ...] = DEFAULT_STATUSES) -> None:
        """Insert the catalog once.  A second call is a no-op."""
        if self._repo.count() > 0:
            self._logger.debug("Status catalog already seeded.")
            return
        for status in statuses:
            self._repo.add(status)
        self._logger.info("Status catalog seeded with %d entries.", len(statuses))

    def all(self) -> list[ClaimStatus]:
        return sorted(self._repo.get_all(), key=lambda s: s.id)

    def exists(self, status_id: int) -> bool:
        return self._repo.exists(status_id)

    def get_name(self, status_id: int) -> Optional[str]:
        status = self._repo.get_by_id(status_id)
        return status.name if status else None

    def resolve_id(self, name: str) -> Optional[int]:
        """Case-insensitive name lookup.  ``None`` when the name is unknown."""
        wanted = name.strip().casefold()
        for status in self._repo.get_all():
            if status.name.casefold() == wanted:
                return status.id
        return None

    @staticmethod
    def is_conventional_transition(current_id: int, new_id: int) -> bool:
        """Advisory only: ``True`` if the move follows the usual workflow."""
        return new_id in ADVISORY_TRANSITIONS.get(current_id, frozenset())
