"""
Claim Status Repository.

Storage for the fixed status catalog.  Entries are inserted once by
``StatusCatalog`` and only read afterwards.
"""

from __future__ import annotations

from contract_claims.models.claim import ClaimStatus
from contract_claims.repositories.base_repository import BaseRepository


class StatusRepository(BaseRepository[ClaimStatus]):
    """Data access layer for ClaimStatus entries."""

    COLLECTION = "claim_statuses"
