"""
Typed Exceptions for the Claim Lifecycle Core.

Every error carries a machine-readable ``code`` so the desk layer can map
it to a ``ServiceResult`` status code without parsing messages.

    ClaimSystemError (base)
    |
    +-- NotFoundError           referenced lecturer or claim does not exist
    +-- InvalidArgumentError    unresolvable status, rejected document
    +-- ValidationFailedError   bad hours entry or empty submission
    +-- StatusConflictError     claim is not in the status an action requires
"""

from __future__ import annotations

from typing import Optional


class ClaimSystemError(Exception):
    """Base class for all claim-core errors."""

    code: str = "CLAIM_SYSTEM_ERROR"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ClaimSystemError):
    """A referenced entity does not exist in the store."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity_type: str, entity_id: object) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} ID {entity_id} not found.")


class InvalidArgumentError(ClaimSystemError):
    """An argument is well-formed but cannot be resolved or accepted."""

    code = "INVALID_ARGUMENT"
    status_code = 400

    def __init__(self, message: str, argument: Optional[str] = None) -> None:
        self.argument = argument
        super().__init__(message)


class ValidationFailedError(ClaimSystemError):
    """Submission content failed business validation.

    ``errors`` lists one human-readable message per offending entry.
    """

    code = "VALIDATION_FAILED"
    status_code = 400

    def __init__(self, message: str, errors: Optional[list[str]] = None) -> None:
        self.errors: list[str] = list(errors or [])
        super().__init__(message)


class StatusConflictError(ClaimSystemError):
    """A guarded status change found the claim in a different status.

    Raised with the store lock held, so no change was applied.
    """

    code = "STATUS_CONFLICT"
    status_code = 400

    def __init__(
        self,
        claim_id: int,
        current_status: Optional[str],
        expected_status: Optional[str],
    ) -> None:
        self.claim_id = claim_id
        self.current_status = current_status
        self.expected_status = expected_status
        super().__init__(
            f"Claim {claim_id} is '{current_status}', not '{expected_status}'."
        )
