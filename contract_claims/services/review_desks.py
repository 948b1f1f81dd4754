"""
Role Desks.

Thin request/response façades, one per role, that a UI layer calls in
response to user actions.  Each desk method returns a ``ServiceResult``
with plain JSON-safe data, mapping core errors to status codes:

    NotFoundError          -> 404
    InvalidArgumentError   -> 400
    ValidationFailedError  -> 400
    StatusConflictError    -> 400 (worded by the desk action)
    anything else          -> 500 (logged with traceback)

Desks are where action gating lives (e.g. only Approved claims can be
paid).  The gate is passed to the lifecycle as ``expected_status`` so the
check and the change happen under one store lock.
"""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Awaitable, Callable, Optional, TypeVar, Union

from contract_claims.exceptions import (
    ClaimSystemError,
    StatusConflictError,
    ValidationFailedError,
)
from contract_claims.logger import StructuredLogger
from contract_claims.models.claim import Claim
from contract_claims.models.enums import StatusId
from contract_claims.models.service_models import (
    ClaimFilter,
    DocumentUpload,
    HoursEntryInput,
    ServiceResult,
)
from contract_claims.services.base_service import BaseService
from contract_claims.services.claim_lifecycle import ClaimLifecycleService
from contract_claims.services.claim_notifier import ClaimNotifier, Subscription
from contract_claims.services.claim_query import ClaimQueryService, filter_claims
from contract_claims.utils.general import convert_to_json_safe

T = TypeVar("T")

HoursPayload = list[Union[HoursEntryInput, dict[str, object]]]
DocumentPayload = list[Union[DocumentUpload, dict[str, object]]]


class _Desk(BaseService):
    """Shared envelope handling for all desks."""

    def __init__(self, lifecycle: ClaimLifecycleService, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._lifecycle = lifecycle

    async def _run(
        self,
        operation_name: str,
        operation: Callable[[], Awaitable[T]],
        on_conflict: Optional[Callable[[StatusConflictError], str]] = None,
    ) -> ServiceResult:
        try:
            data = await operation()
            return ServiceResult(success=True, data=convert_to_json_safe(data))
        except StatusConflictError as exc:
            error = on_conflict(exc) if on_conflict is not None else exc.message
            self._logger.warning("%s rejected: %s", operation_name, error)
            return ServiceResult(success=False, error=error, status_code=exc.status_code)
        except ValidationFailedError as exc:
            self._logger.warning("%s rejected: %s %s", operation_name, exc.message, exc.errors)
            detail = f"{exc.message} {' '.join(exc.errors)}".strip()
            return ServiceResult(success=False, error=detail, status_code=exc.status_code)
        except ClaimSystemError as exc:
            self._logger.warning("%s rejected: %s", operation_name, exc.message)
            return ServiceResult(success=False, error=exc.message, status_code=exc.status_code)
        except Exception as exc:
            self._logger.error(
                "Unexpected error during %s: %s", operation_name, exc, exc_info=True
            )
            return ServiceResult(
                success=False,
                error=f"An unexpected error occurred: {exc}",
                status_code=500,
            )

    @staticmethod
    def _not_found(what: str) -> ServiceResult:
        return ServiceResult(success=False, error=f"{what} not found.", status_code=404)

    async def claim_detail(self, claim_id: int) -> ServiceResult:
        """Enriched claim with its hours and documents, for a detail pane."""
        claim = await self._lifecycle.get_claim(claim_id)
        if claim is None:
            return self._not_found("Claim")

        async def _load() -> dict[str, object]:
            return {
                "claim": claim,
                "hours": await self._lifecycle.get_hours_for_claim(claim_id),
                "documents": await self._lifecycle.get_documents_for_claim(claim_id),
            }

        return await self._run("claim_detail", _load)


# ----------------------------------------------------------------------
# Lecturer
# ----------------------------------------------------------------------


class LecturerDesk(_Desk):
    """Submission and own-claim history for lecturers."""

    async def submit(
        self,
        lecturer_id: int,
        month: int,
        year: int,
        hours: HoursPayload,
        documents: Optional[DocumentPayload] = None,
    ) -> ServiceResult:
        """Submit a claim; ``data`` is ``{"claim_id": <new id>}``."""

        async def _submit() -> dict[str, int]:
            claim_id = await self._lifecycle.submit_claim(
                {"lecturer_id": lecturer_id, "month": month, "year": year},
                hours,
                documents or [],
            )
            return {"claim_id": claim_id}

        return await self._run("submit", _submit)

    async def my_claims(self, lecturer_id: int) -> ServiceResult:
        """The lecturer's claims, newest first."""
        return await self._run(
            "my_claims",
            lambda: self._lifecycle.list_claims_for_lecturer(lecturer_id),
        )

    async def preview_total(self, lecturer_id: int, hours: HoursPayload) -> ServiceResult:
        """Running total shown while the lecturer is still entering hours."""

        async def _preview() -> dict[str, Decimal]:
            return {"total_amount": await self._lifecycle.calculate_total(lecturer_id, hours)}

        return await self._run("preview_total", _preview)


# ----------------------------------------------------------------------
# Programme coordinator (admin)
# ----------------------------------------------------------------------


class CoordinatorDesk(_Desk):
    """
    Live queue of claims awaiting review, with approve/reject actions.

    ``open()`` loads the current Pending Review claims and subscribes to
    submissions so new claims join the queue without a reload.  The queue
    keeps arrival order; ``pending_queue()`` shows only entries that are
    still Pending Review, however their status changed.  Call ``close()``
    when the desk goes away.
    """

    def __init__(
        self,
        lifecycle: ClaimLifecycleService,
        notifier: ClaimNotifier,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(lifecycle, logger)
        self._notifier = notifier
        self._subscription: Optional[Subscription] = None
        self._queue_lock = threading.Lock()
        self._queue: dict[int, Claim] = {}

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def open(self) -> ServiceResult:
        if self.is_open:
            return ServiceResult(success=True, data=await self.pending_queue())

        pending = await self._lifecycle.list_pending_claims()
        with self._queue_lock:
            self._queue = {claim.id: claim for claim in pending}
        self._subscription = self._notifier.subscribe(self._on_claim_submitted)
        self._logger.info("Coordinator desk opened with %d pending claims.", len(pending))
        return ServiceResult(success=True, data=await self.pending_queue())

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def pending_queue(self) -> list[dict[str, object]]:
        """Queued claims currently in Pending Review, freshly enriched."""
        current = {claim.id: claim for claim in await self._lifecycle.list_pending_claims()}
        with self._queue_lock:
            visible = [current[claim_id] for claim_id in self._queue if claim_id in current]
        return convert_to_json_safe(visible)

    def _on_claim_submitted(self, claim: Claim) -> None:
        if claim.status_id != StatusId.PENDING_REVIEW:
            return
        with self._queue_lock:
            self._queue[claim.id] = claim

    async def _decide(self, claim_id: int, status_name: str, verb: str) -> ServiceResult:
        async def _update() -> dict[str, object]:
            await self._lifecycle.update_status(
                claim_id, status_name, expected_status=StatusId.PENDING_REVIEW
            )
            with self._queue_lock:
                self._queue.pop(claim_id, None)
            return {"claim_id": claim_id, "status_name": status_name}

        def _refusal(exc: StatusConflictError) -> str:
            return (
                f"Cannot {verb} claim {claim_id}. Current status is "
                f"'{exc.current_status}'. Only 'Pending Review' claims "
                f"can be {verb}d."
            )

        return await self._run(verb, _update, on_conflict=_refusal)

    async def approve(self, claim_id: int) -> ServiceResult:
        return await self._decide(claim_id, "Approved", "approve")

    async def reject(self, claim_id: int) -> ServiceResult:
        return await self._decide(claim_id, "Rejected", "reject")


# ----------------------------------------------------------------------
# Academic manager
# ----------------------------------------------------------------------


class ManagerDesk(_Desk):
    """Full claim overview with verification and free status control."""

    def __init__(
        self,
        lifecycle: ClaimLifecycleService,
        query: ClaimQueryService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(lifecycle, logger)
        self._query = query

    async def all_claims(self, claim_filter: Optional[ClaimFilter] = None) -> ServiceResult:
        return await self._run("all_claims", lambda: self._query.search(claim_filter))

    async def verify(
        self,
        claim_id: int,
        is_verified: bool,
        notes: Optional[str] = None,
    ) -> ServiceResult:
        """Record verification; ``data`` is the updated claim.

        Flag and notes are both overwritten, so ``notes=None`` clears them.
        """

        async def _verify() -> Optional[Claim]:
            await self._lifecycle.update_verification(claim_id, is_verified, notes)
            return await self._lifecycle.get_claim(claim_id)

        return await self._run("verify", _verify)

    async def set_status(self, claim_id: int, status: Union[int, str]) -> ServiceResult:
        """Set any catalog status; ``data`` is the updated claim."""
        return await self._run(
            "set_status",
            lambda: self._lifecycle.apply_claim_patch(claim_id, {"status": status}),
        )

    async def summary(self) -> ServiceResult:
        return await self._run("summary", self._query.status_summary)


# ----------------------------------------------------------------------
# HR
# ----------------------------------------------------------------------


class HRDesk(_Desk):
    """Payment processing for approved claims."""

    DEFAULT_STATUS_FILTER: int = StatusId.APPROVED

    def __init__(
        self,
        lifecycle: ClaimLifecycleService,
        query: ClaimQueryService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(lifecycle, logger)
        self._query = query

    async def payable_claims(
        self,
        search_text: Optional[str] = None,
        status_id: Optional[int] = DEFAULT_STATUS_FILTER,
    ) -> ServiceResult:
        """Claims for the HR grid; Approved only unless *status_id* says otherwise.

        Pass ``status_id=0`` (or ``None``) to see every status.
        """

        async def _load() -> list[Claim]:
            claims = await self._lifecycle.list_all_claims()
            return filter_claims(
                claims, ClaimFilter(status_id=status_id, search_text=search_text)
            )

        return await self._run("payable_claims", _load)

    async def process_payment(self, claim_id: int) -> ServiceResult:
        """Mark an Approved claim as Completed/Paid."""

        async def _pay() -> dict[str, object]:
            await self._lifecycle.update_status(
                claim_id, StatusId.COMPLETED_PAID, expected_status=StatusId.APPROVED
            )
            claim = await self._lifecycle.get_claim(claim_id)
            return {
                "claim_id": claim_id,
                "status_name": claim.status_name,
                "total_amount": claim.total_amount,
            }

        def _refusal(exc: StatusConflictError) -> str:
            return (
                f"Cannot process payment for claim {claim_id}. Current "
                f"status is '{exc.current_status}'. Only 'Approved' claims "
                f"can be paid."
            )

        return await self._run("process_payment", _pay, on_conflict=_refusal)
