"""
Claim Lifecycle Service.

The state machine and business rules for lecturer claims: submission,
enrichment, status transitions, verification, and derived amounts.

Rules enforced here:

- ``total_amount == sum(hours) * lecturer.hourly_rate``.  Computed on
  submission and re-derived on every read path, so a stale stored total
  heals itself the next time the claim is read.
- A submission writes the claim, its hours, and its documents together or
  not at all.
- ``status_id`` always references a catalog entry.
- Status transitions are NOT guarded: any catalog status can be set from
  any other.  Which action to offer is the caller's decision (see
  ``StatusCatalog.is_conventional_transition``).  A caller that gates an
  action passes ``expected_status`` to have it checked atomically.
- Every claim handed out is a copy; the store only changes through the
  update operations below.

All public methods are ``async`` so consumers can treat the core as a
request/response service, but none of them suspend while holding the
store lock.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Union

from pydantic import ValidationError

from contract_claims.config import AppConfig
from contract_claims.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    StatusConflictError,
    ValidationFailedError,
)
from contract_claims.logger import StructuredLogger
from contract_claims.models.claim import (
    Claim,
    ClaimStatus,
    HoursWorked,
    SupportingDocument,
)
from contract_claims.models.enums import StatusId
from contract_claims.models.lecturer import Lecturer
from contract_claims.models.service_models import (
    ClaimDraft,
    ClaimPatch,
    DocumentUpload,
    HoursEntryInput,
)
from contract_claims.repositories.claim_repository import ClaimRepository
from contract_claims.repositories.document_repository import SupportingDocumentRepository
from contract_claims.repositories.hours_repository import HoursWorkedRepository
from contract_claims.repositories.lecturer_repository import LecturerRepository
from contract_claims.services.base_service import BaseService
from contract_claims.services.claim_notifier import ClaimNotifier
from contract_claims.services.document_guards import DocumentGuardsService
from contract_claims.services.status_catalog import StatusCatalog
from contract_claims.store import EntityStore
from contract_claims.utils.audit import AuditAction, log_audit_event

StatusRef = Union[int, str]

_ZERO: Decimal = Decimal("0")


def compute_total(hours: Iterable[Decimal], hourly_rate: Decimal) -> Decimal:
    """``sum(hours) * hourly_rate`` in exact decimal arithmetic."""
    return sum(hours, _ZERO) * hourly_rate


def month_year_label(month: int, year: int) -> str:
    """``(10, 2025)`` -> ``"October 2025"``."""
    return f"{calendar.month_name[month]} {year}"


class ClaimLifecycleService(BaseService):
    """
    Service owning every claim mutation and the enriched read views.

    Dependencies are injected via __init__ -- no global state.
    """

    def __init__(
        self,
        store: EntityStore,
        lecturer_repo: LecturerRepository,
        claim_repo: ClaimRepository,
        hours_repo: HoursWorkedRepository,
        document_repo: SupportingDocumentRepository,
        status_catalog: StatusCatalog,
        document_guards: DocumentGuardsService,
        notifier: ClaimNotifier,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._store = store
        self._lecturer_repo = lecturer_repo
        self._claim_repo = claim_repo
        self._hours_repo = hours_repo
        self._document_repo = document_repo
        self._catalog = status_catalog
        self._guards = document_guards
        self._notifier = notifier
        self._config = config

    # ------------------------------------------------------------------
    # Private helpers: input validation
    # ------------------------------------------------------------------

    def _coerce_draft(self, draft: Union[ClaimDraft, dict[str, object]]) -> ClaimDraft:
        if isinstance(draft, ClaimDraft):
            return draft
        try:
            return ClaimDraft.model_validate(draft)
        except ValidationError as exc:
            raise ValidationFailedError(
                "Invalid claim header.",
                errors=[f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()],
            ) from exc

    def _validate_hours(
        self,
        entries: list[Union[HoursEntryInput, dict[str, object]]],
    ) -> list[HoursEntryInput]:
        """Check every hours line and report all failures together.

        Raises:
            ValidationFailedError: If any entry is invalid or the list is empty.
        """
        if not entries:
            raise ValidationFailedError(
                "A claim must contain at least one valid hours entry."
            )

        low = self._config.MIN_HOURS_PER_ENTRY
        high = self._config.MAX_HOURS_PER_ENTRY
        validated: list[HoursEntryInput] = []
        errors: list[str] = []

        for position, raw in enumerate(entries, start=1):
            try:
                entry = (
                    raw if isinstance(raw, HoursEntryInput)
                    else HoursEntryInput.model_validate(raw)
                )
            except ValidationError as exc:
                errors.append(f"Entry {position}: {exc.errors()[0]['msg']}")
                continue

            if not entry.hours.is_finite() or entry.hours <= 0:
                errors.append(f"Entry {position}: hours must be greater than zero.")
            elif entry.hours < low or entry.hours > high:
                errors.append(
                    f"Entry {position}: hours must be between {low} and {high}."
                )
            if not entry.description.strip():
                errors.append(f"Entry {position}: a description is required.")
            validated.append(entry)

        if errors:
            raise ValidationFailedError("Invalid hours entries.", errors=errors)
        return validated

    def _require_lecturer(self, lecturer_id: int) -> Lecturer:
        lecturer = self._lecturer_repo.get_by_id(lecturer_id)
        if lecturer is None:
            raise NotFoundError("Lecturer", lecturer_id)
        return lecturer

    def _require_claim(self, claim_id: int) -> Claim:
        claim = self._claim_repo.get_by_id(claim_id)
        if claim is None:
            raise NotFoundError("Claim", claim_id)
        return claim

    def resolve_status(self, status: StatusRef) -> int:
        """Map a status id or name onto a catalog id.

        Raises:
            InvalidArgumentError: For an unknown name, an id outside the
                catalog, or a value that is neither ``int`` nor ``str``.
        """
        if isinstance(status, bool) or not isinstance(status, (int, str)):
            raise InvalidArgumentError(
                f"Status must be a catalog id or name, got {status!r}.",
                argument="status",
            )
        if isinstance(status, str):
            status_id = self._catalog.resolve_id(status)
            if status_id is None:
                raise InvalidArgumentError(
                    f"Invalid status name: {status}.", argument="status"
                )
            return status_id
        if not self._catalog.exists(status):
            raise InvalidArgumentError(
                f"Invalid status id: {status}.", argument="status"
            )
        return int(status)

    # ------------------------------------------------------------------
    # Private helpers: derivation and enrichment
    # ------------------------------------------------------------------

    def _derive_total(self, claim: Claim, lecturer: Optional[Lecturer]) -> Decimal:
        rate = lecturer.hourly_rate if lecturer is not None else _ZERO
        return compute_total(
            (h.hours for h in self._hours_repo.get_by_claim(claim.id)), rate
        )

    def _enrich(self, claim: Claim) -> Claim:
        """Return a copy of *claim* with fresh display fields and total.

        Must be called with the store lock held so the hours and the
        lecturer's rate are read from the same snapshot.  A stored total
        that disagrees with the derived one is corrected in place.
        """
        lecturer = self._lecturer_repo.get_by_id(claim.lecturer_id)
        total = self._derive_total(claim, lecturer)
        if claim.total_amount != total:
            self._logger.warning(
                "Claim %s total was stale (%s); re-derived as %s.",
                claim.id,
                claim.total_amount,
                total,
            )
            claim.total_amount = total

        enriched = claim.model_copy(deep=True)
        enriched.lecturer_name = lecturer.full_name if lecturer else None
        enriched.lecturer_email = lecturer.email if lecturer else None
        enriched.month_year_display = month_year_label(claim.month, claim.year)
        enriched.status_name = self._catalog.get_name(claim.status_id)
        return enriched

    def _enrich_all(self, claims: Iterable[Claim]) -> list[Claim]:
        with self._store.write_lock:
            return [self._enrich(claim) for claim in claims]

    # ------------------------------------------------------------------
    # Public: submission
    # ------------------------------------------------------------------

    async def submit_claim(
        self,
        draft: Union[ClaimDraft, dict[str, object]],
        hours_entries: list[Union[HoursEntryInput, dict[str, object]]],
        documents: Optional[list[Union[DocumentUpload, dict[str, object]]]] = None,
    ) -> int:
        """
        Submit a new claim with its hours and supporting documents.

        The submission is forced to "Pending Review", stamped with the
        current time, and totalled from the lecturer's current rate.
        Nothing is written unless every check passes.

        Args:
            draft: Header fields (lecturer, month, year).
            hours_entries: At least one hours line.
            documents: Optional document metadata, each checked by the
                intake guards.

        Returns:
            The new claim id.

        Raises:
            NotFoundError: If the lecturer does not exist.
            ValidationFailedError: For a bad header or hours entry, or
                when no hours are supplied.
            InvalidArgumentError: If a document fails intake checks.
        """
        claim_draft = self._coerce_draft(draft)
        lecturer = self._require_lecturer(claim_draft.lecturer_id)
        entries = self._validate_hours(hours_entries)
        uploads = self._guards.check_documents(list(documents or []))

        with self._store.transaction():
            # Re-read under the lock so the rate used is the current one.
            lecturer = self._require_lecturer(claim_draft.lecturer_id)
            claim = self._claim_repo.create(
                lecturer_id=lecturer.id,
                month=claim_draft.month,
                year=claim_draft.year,
                submission_date=datetime.now(timezone.utc),
                total_amount=compute_total((e.hours for e in entries), lecturer.hourly_rate),
                status_id=StatusId.PENDING_REVIEW,
            )
            hours = self._hours_repo.create_for_claim(claim.id, entries)
            attached = self._document_repo.create_for_claim(claim.id, uploads)
            finalized = self._enrich(claim)

        log_audit_event(
            logger=self._logger,
            action=AuditAction.SUBMIT,
            entity_type="Claim",
            entity_id=claim.id,
            details={
                "lecturer_id": lecturer.id,
                "period": finalized.month_year_display,
                "hours_entries": len(hours),
                "documents": len(attached),
                "total_amount": str(finalized.total_amount),
            },
        )

        self._notifier.publish(finalized)
        return claim.id

    async def calculate_total(
        self,
        lecturer_id: int,
        hours_entries: list[Union[HoursEntryInput, dict[str, object]]],
    ) -> Decimal:
        """Running total for a draft, before it is submitted.

        Entries that do not parse are ignored so a half-filled form can
        still show a figure.
        """
        lecturer = self._require_lecturer(lecturer_id)
        hours: list[Decimal] = []
        for raw in hours_entries:
            try:
                entry = (
                    raw if isinstance(raw, HoursEntryInput)
                    else HoursEntryInput.model_validate(raw)
                )
            except ValidationError:
                continue
            if entry.hours.is_finite() and entry.hours > 0:
                hours.append(entry.hours)
        return compute_total(hours, lecturer.hourly_rate)

    # ------------------------------------------------------------------
    # Public: enriched read views
    # ------------------------------------------------------------------

    async def list_claims_for_lecturer(self, lecturer_id: int) -> list[Claim]:
        """Claims owned by *lecturer_id*, newest submission first."""
        with self._store.write_lock:
            claims = self._enrich_all(self._claim_repo.get_by_lecturer(lecturer_id))
        return sorted(
            claims,
            key=lambda c: (c.submission_date, c.id),
            reverse=True,
        )

    async def list_pending_claims(self) -> list[Claim]:
        """Claims whose status is exactly Pending Review, insertion order."""
        with self._store.write_lock:
            return self._enrich_all(
                self._claim_repo.get_by_status(StatusId.PENDING_REVIEW)
            )

    async def list_all_claims(self) -> list[Claim]:
        """Every claim, insertion order, totals re-derived from current data."""
        with self._store.write_lock:
            return self._enrich_all(self._claim_repo.get_all())

    async def get_claim(self, claim_id: int) -> Optional[Claim]:
        with self._store.write_lock:
            claim = self._claim_repo.get_by_id(claim_id)
            return self._enrich(claim) if claim is not None else None

    # ------------------------------------------------------------------
    # Public: pure lookups
    # ------------------------------------------------------------------

    async def get_lecturer(self, lecturer_id: int) -> Optional[Lecturer]:
        return self._lecturer_repo.get_by_id(lecturer_id)

    async def get_hours_for_claim(self, claim_id: int) -> list[HoursWorked]:
        return [h.model_copy() for h in self._hours_repo.get_by_claim(claim_id)]

    async def get_documents_for_claim(self, claim_id: int) -> list[SupportingDocument]:
        return [d.model_copy() for d in self._document_repo.get_by_claim(claim_id)]

    async def get_status_name(self, status_id: int) -> Optional[str]:
        return self._catalog.get_name(status_id)

    async def list_statuses(self) -> list[ClaimStatus]:
        return self._catalog.all()

    # ------------------------------------------------------------------
    # Private helpers: updates (store lock held by the caller)
    # ------------------------------------------------------------------

    def _apply_status(self, claim: Claim, status_id: int) -> int:
        previous_id = claim.status_id
        self._claim_repo.set_status(claim.id, status_id)

        if not self._catalog.is_conventional_transition(previous_id, status_id):
            self._logger.info(
                "Claim %s moved %s -> %s outside the usual workflow.",
                claim.id,
                previous_id,
                status_id,
            )
        log_audit_event(
            logger=self._logger,
            action=AuditAction.UPDATE_STATUS,
            entity_type="Claim",
            entity_id=claim.id,
            details={
                "old_status": self._catalog.get_name(previous_id),
                "new_status": self._catalog.get_name(status_id),
            },
        )
        return previous_id

    @staticmethod
    def _check_verification(is_verified: object, notes: object) -> Optional[str]:
        """Return the cleaned notes, or raise before anything is written."""
        if not isinstance(is_verified, bool):
            raise InvalidArgumentError(
                f"is_verified must be True or False, got {is_verified!r}.",
                argument="is_verified",
            )
        if notes is not None and not isinstance(notes, str):
            raise InvalidArgumentError(
                f"Verification notes must be text, got {type(notes).__name__}.",
                argument="notes",
            )
        return notes.strip() if notes is not None else None

    def _apply_verification(
        self,
        claim: Claim,
        is_verified: bool,
        notes: Optional[str],
    ) -> None:
        self._claim_repo.set_verification(claim.id, is_verified, notes)
        log_audit_event(
            logger=self._logger,
            action=AuditAction.UPDATE_VERIFICATION,
            entity_type="Claim",
            entity_id=claim.id,
            details={
                "is_verified": is_verified,
                "notes": notes or "",
            },
        )

    # ------------------------------------------------------------------
    # Public: updates
    # ------------------------------------------------------------------

    async def update_status(
        self,
        claim_id: int,
        status: StatusRef,
        expected_status: Optional[StatusRef] = None,
    ) -> bool:
        """
        Overwrite a claim's status.  No transition graph is enforced.

        Args:
            claim_id: The claim to update.
            status: A catalog id or a status name (case-insensitive).
            expected_status: When given, the change is applied only if the
                claim is currently in this status.  The check and the
                write happen under one store lock.

        Returns:
            ``True`` on success.

        Raises:
            NotFoundError: If the claim does not exist.
            InvalidArgumentError: If the status does not resolve to a
                catalog entry.  The claim is left unchanged.
            StatusConflictError: If *expected_status* does not match.
        """
        with self._store.write_lock:
            claim = self._require_claim(claim_id)
            status_id = self.resolve_status(status)
            if expected_status is not None:
                expected_id = self.resolve_status(expected_status)
                if claim.status_id != expected_id:
                    raise StatusConflictError(
                        claim_id,
                        self._catalog.get_name(claim.status_id),
                        self._catalog.get_name(expected_id),
                    )
            self._apply_status(claim, status_id)
        return True

    async def update_verification(
        self,
        claim_id: int,
        is_verified: bool,
        notes: Optional[str] = None,
    ) -> bool:
        """
        Record a manager's verification flag and notes, independent of status.

        Both values are overwritten; ``notes=None`` clears earlier notes.

        Raises:
            NotFoundError: If the claim does not exist.
            InvalidArgumentError: If *is_verified* is not a ``bool`` or
                *notes* is neither text nor ``None``.
        """
        cleaned_notes = self._check_verification(is_verified, notes)
        with self._store.write_lock:
            claim = self._require_claim(claim_id)
            self._apply_verification(claim, is_verified, cleaned_notes)
        return True

    async def apply_claim_patch(
        self,
        claim_id: int,
        patch: Union[ClaimPatch, dict[str, object]],
    ) -> Claim:
        """
        Apply an explicit partial update and return the updated claim.

        Every field in the patch is validated before any of them is
        applied, so a rejected patch leaves the claim untouched.

        Raises:
            NotFoundError: If the claim does not exist.
            InvalidArgumentError: If the patch is malformed or its status
                does not resolve.
        """
        if not isinstance(patch, ClaimPatch):
            try:
                patch = ClaimPatch.model_validate(patch)
            except ValidationError as exc:
                raise InvalidArgumentError(
                    f"Invalid claim patch: {exc.errors()[0]['msg']}",
                    argument="patch",
                ) from exc

        with self._store.write_lock:
            claim = self._require_claim(claim_id)
            status_id = (
                self.resolve_status(patch.status) if patch.status is not None else None
            )
            if status_id is not None:
                self._apply_status(claim, status_id)
            if patch.is_verified is not None or patch.verification_notes is not None:
                self._apply_verification(
                    claim,
                    claim.is_verified if patch.is_verified is None else patch.is_verified,
                    (
                        claim.verification_notes
                        if patch.verification_notes is None
                        else patch.verification_notes.strip()
                    ),
                )
            return self._enrich(claim)
