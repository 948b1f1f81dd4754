from __future__ import annotations

"""
Data Models Package.

Re-exports all Pydantic models:
    from contract_claims.models import Claim, HoursWorked, SupportingDocument
    from contract_claims.models import Lecturer, LecturerRole, StatusId
    from contract_claims.models import ClaimDraft, HoursEntryInput, ServiceResult
"""

from contract_claims.models.enums import LecturerRole, StatusId
from contract_claims.models.lecturer import Lecturer
from contract_claims.models.claim import (
    Claim,
    ClaimStatus,
    HoursWorked,
    SupportingDocument,
)
from contract_claims.models.service_models import (
    ClaimDraft,
    ClaimFilter,
    ClaimPatch,
    DocumentUpload,
    HoursEntryInput,
    ServiceResult,
)

__all__ = [
    "LecturerRole",
    "StatusId",
    "Lecturer",
    "Claim",
    "ClaimStatus",
    "HoursWorked",
    "SupportingDocument",
    "ClaimDraft",
    "ClaimFilter",
    "ClaimPatch",
    "DocumentUpload",
    "HoursEntryInput",
    "ServiceResult",
]
