"""
Shared Enumerations for Claim Models.

``LecturerRole`` is a StrEnum, so ``role == "HR"`` keeps working.
``StatusId`` names the canonical catalog ids; the catalog itself lives in
``StatusCatalog`` and is the only source of status names.
"""

from __future__ import annotations
from enum import IntEnum, StrEnum


class LecturerRole(StrEnum):
    """Role tag carried on every staff record."""

    LECTURER = "Lecturer"
    COORDINATOR = "Coordinator"
    HR = "HR"
    MANAGER = "Manager"


class StatusId(IntEnum):
    """Stable ids of the claim status catalog."""

    SUBMITTED = 1
    REJECTED = 2
    PENDING_REVIEW = 3
    APPROVED = 4
    COMPLETED_PAID = 5
