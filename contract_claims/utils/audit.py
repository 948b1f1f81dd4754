"""
Structured Audit Logging Utility.

Each claim state change is written as one ``AUDIT: {...}`` JSON line:

    SUBMIT               a lecturer submitted a claim
    UPDATE_STATUS        a claim moved between catalog statuses
    UPDATE_VERIFICATION  a manager recorded the verification flag/notes

The payload is validated by ``AuditEvent`` before it reaches the logger.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional, Union

from pydantic import BaseModel, Field

from contract_claims.logger import StructuredLogger

__all__ = ["AuditAction", "AuditEvent", "log_audit_event"]

# Flat values only; a detail that needs structure deserves its own field.
DetailValue = Union[str, int, float, bool, None]


class AuditAction(StrEnum):
    SUBMIT = "SUBMIT"
    UPDATE_STATUS = "UPDATE_STATUS"
    UPDATE_VERIFICATION = "UPDATE_VERIFICATION"


class AuditEvent(BaseModel):
    """One audit trail entry, as serialised after the ``AUDIT:`` prefix."""

    timestamp: str
    action: AuditAction
    entity_type: str
    entity_id: str
    details: dict[str, DetailValue] = Field(default_factory=dict)


def log_audit_event(
    logger: StructuredLogger,
    action: Union[AuditAction, str],
    entity_type: str,
    entity_id: Union[int, str],
    details: Optional[dict[str, DetailValue]] = None,
) -> AuditEvent:
    """Validate, log and return an audit event.

    Args:
        logger: Destination logger (INFO level).
        action: One of :class:`AuditAction`; plain strings are accepted
            if they name a member.
        entity_type: Kind of record affected, e.g. ``"Claim"``.
        entity_id: Id of the affected record; stored as a string.
        details: Flat before/after values or counts.

    Raises:
        pydantic.ValidationError: If *action* is not a known audit action.
    """
    event = AuditEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        details=details or {},
    )
    logger.info("AUDIT: %s", event.model_dump_json())
    return event
