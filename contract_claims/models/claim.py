"""
Claim Models.

The claim aggregate and its children.  ``Claim`` carries a handful of
display-only fields that the lifecycle service fills on every enrichment
pass; they are never stored and never part of a claim's identity.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ClaimStatus(BaseModel):
    """A fixed catalog entry."""

    id: int = Field(ge=1)
    name: str = Field(min_length=1)

    model_config = {"frozen": True}


class HoursWorked(BaseModel):
    """One line of worked hours, attached to exactly one claim."""

    id: int
    claim_id: int
    date_worked: date
    hours: Decimal = Field(gt=0)
    description: str = Field(min_length=1)

    model_config = {"from_attributes": True}


class SupportingDocument(BaseModel):
    """Metadata for a document attached to a claim at submission."""

    id: int
    claim_id: int
    file_name: str = Field(min_length=1)
    file_path: str

    model_config = {"from_attributes": True}


class Claim(BaseModel):
    """A lecturer's monthly request for payment for worked hours."""

    id: int
    lecturer_id: int
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1)
    submission_date: datetime
    total_amount: Decimal = Decimal("0")
    status_id: int
    is_verified: bool = False
    verification_notes: Optional[str] = None

    # Transient projections (recomputed on every enrichment pass)
    lecturer_name: Optional[str] = None
    lecturer_email: Optional[str] = None
    month_year_display: Optional[str] = None
    status_name: Optional[str] = None

    model_config = {"from_attributes": True, "validate_assignment": True}

