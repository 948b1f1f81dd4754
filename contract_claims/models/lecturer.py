"""
Lecturer Model.

Staff record referenced by claims through ``lecturer_id``.  Frozen: a
lecturer is seeded once and never edited through the claim core.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from contract_claims.models.enums import LecturerRole


class Lecturer(BaseModel):
    """Represents a lecturer (or other staff member) who can own claims."""

    id: int = Field(ge=1)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    hourly_rate: Decimal = Field(ge=0)
    role: LecturerRole = LecturerRole.LECTURER
    email: str

    model_config = {"frozen": True, "from_attributes": True}

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
