"""Shared utility functions for the contract_claims package.

Convenience re-exports so consumers can import directly from
``contract_claims.utils``; full module imports remain supported.
"""

from contract_claims.utils.audit import AuditAction, AuditEvent, log_audit_event
from contract_claims.utils.general import convert_to_json_safe

__all__ = [
    "AuditAction",
    "AuditEvent",
    "convert_to_json_safe",
    "log_audit_event",
]
