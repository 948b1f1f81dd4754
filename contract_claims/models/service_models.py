"""
Service Layer Data Transfer Objects.

Pydantic models for validated input/output at service boundaries:
submission drafts, explicit claim patches, list filters, and the
``ServiceResult`` envelope returned by the role desks.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Generic, Optional, TypeVar, Union

from pydantic import BaseModel, Field

T = TypeVar("T")

__all__ = [
    "ClaimDraft",
    "ClaimFilter",
    "ClaimPatch",
    "DocumentUpload",
    "HoursEntryInput",
    "ServiceResult",
]


# ---------------------------------------------------------------------------
# Submission inputs
# ---------------------------------------------------------------------------

class ClaimDraft(BaseModel):
    """Header fields a lecturer fills in before submitting.

    Identity, timestamp, status, and total are always assigned by the
    lifecycle service; the draft cannot supply them.
    """

    lecturer_id: int
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1)


class HoursEntryInput(BaseModel):
    """A single hours line as entered by the lecturer.

    Bounds are deliberately not enforced here: the lifecycle service
    validates every entry together and reports all failures at once.
    """

    date_worked: date
    hours: Decimal
    description: str = ""


class DocumentUpload(BaseModel):
    """Metadata for a file the lecturer wants to attach."""

    file_name: str
    file_path: str = ""
    size_bytes: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Updates and queries
# ---------------------------------------------------------------------------

class ClaimPatch(BaseModel):
    """Explicit partial update applied by ``apply_claim_patch``.

    ``None`` means "leave unchanged".  ``verification_notes`` can only be
    replaced, not cleared, through a patch; pass ``""`` to blank it.
    """

    status: Optional[Union[int, str]] = None
    is_verified: Optional[bool] = None
    verification_notes: Optional[str] = None


class ClaimFilter(BaseModel):
    """Status and free-text filter applied over a materialised claim list."""

    status_id: Optional[int] = None
    search_text: Optional[str] = None


# ---------------------------------------------------------------------------
# Generic service models
# ---------------------------------------------------------------------------

class ServiceResult(BaseModel, Generic[T]):
    """
    Standard desk return envelope.

    All desk methods return this, providing a consistent contract for
    whatever UI layer sits on top.  Unparameterised ``ServiceResult(...)``
    is treated as ``ServiceResult[Any]``.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200
