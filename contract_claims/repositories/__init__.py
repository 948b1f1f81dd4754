"""
Repository Layer Package.

Provides data-access abstractions over the in-memory ``EntityStore``.
All store operations flow through repositories; services never touch
store collections directly.

Usage:
    from contract_claims.repositories.claim_repository import ClaimRepository
    from contract_claims.repositories.lecturer_repository import LecturerRepository
"""

from contract_claims.repositories.base_repository import BaseRepository
from contract_claims.repositories.claim_repository import ClaimRepository
from contract_claims.repositories.document_repository import SupportingDocumentRepository
from contract_claims.repositories.hours_repository import HoursWorkedRepository
from contract_claims.repositories.lecturer_repository import LecturerRepository
from contract_claims.repositories.status_repository import StatusRepository

__all__ = [
    "BaseRepository",
    "ClaimRepository",
    "HoursWorkedRepository",
    "LecturerRepository",
    "StatusRepository",
    "SupportingDocumentRepository",
]
