"""
Demo Seed Data.

Populates a fresh store with a small, self-consistent data set so the
role desks have something to show on first start:

- four staff records (two lecturers, a coordinator, an HR manager);
- three claims, one in each of Pending Review, Approved and Rejected,
  with hours lines whose totals match the owner's hourly rate;
- two supporting documents on the pending claim.

Seeding goes through the repositories with explicit ids, never through
``submit_claim``, so no audit events or notifications are emitted.  It
runs in a single store transaction and is a no-op when any lecturer
already exists, so it is safe to call on every startup.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from contract_claims.logger import StructuredLogger
from contract_claims.models.claim import Claim, HoursWorked, SupportingDocument
from contract_claims.models.enums import LecturerRole, StatusId
from contract_claims.models.lecturer import Lecturer
from contract_claims.repositories.claim_repository import ClaimRepository
from contract_claims.repositories.document_repository import SupportingDocumentRepository
from contract_claims.repositories.hours_repository import HoursWorkedRepository
from contract_claims.repositories.lecturer_repository import LecturerRepository
from contract_claims.services.claim_lifecycle import compute_total

DEMO_LECTURERS: tuple[Lecturer, ...] = (
    Lecturer(
        id=1,
        first_name="Steven",
        last_name="Pro",
        hourly_rate=Decimal("500.00"),
        role=LecturerRole.LECTURER,
        email="steven.pro@uni.ac.za",
    ),
    Lecturer(
        id=2,
        first_name="Alice",
        last_name="Smith",
        hourly_rate=Decimal("450.00"),
        role=LecturerRole.LECTURER,
        email="alice.smith@uni.ac.za",
    ),
    Lecturer(
        id=10,
        first_name="Admin",
        last_name="User",
        hourly_rate=Decimal("0.00"),
        role=LecturerRole.COORDINATOR,
        email="pc.coord@uni.ac.za",
    ),
    Lecturer(
        id=11,
        first_name="HR",
        last_name="Manager",
        hourly_rate=Decimal("0.00"),
        role=LecturerRole.HR,
        email="hr.manager@uni.ac.za",
    ),
)

# (claim id, lecturer id, month, year, status, days before now)
_DEMO_CLAIMS: tuple[tuple[int, int, int, int, int, int], ...] = (
    (1, 1, 10, 2025, StatusId.PENDING_REVIEW, 5),
    (2, 2, 9, 2025, StatusId.APPROVED, 30),
    (3, 1, 8, 2025, StatusId.REJECTED, 60),
)

_DEMO_HOURS: tuple[HoursWorked, ...] = (
    HoursWorked(id=101, claim_id=1, date_worked=date(2025, 10, 1),
                hours=Decimal("10"), description="Lecture - C# Programming"),
    HoursWorked(id=102, claim_id=1, date_worked=date(2025, 10, 2),
                hours=Decimal("5"), description="Marking - Exam Papers"),
    HoursWorked(id=103, claim_id=2, date_worked=date(2025, 9, 15),
                hours=Decimal("15"), description="Seminar Prep"),
    HoursWorked(id=104, claim_id=2, date_worked=date(2025, 9, 20),
                hours=Decimal("5"), description="Student Consultation"),
    HoursWorked(id=105, claim_id=3, date_worked=date(2025, 8, 12),
                hours=Decimal("8"), description="Tutorial Sessions"),
)

_DEMO_DOCUMENTS: tuple[SupportingDocument, ...] = (
    SupportingDocument(id=1, claim_id=1, file_name="Attendance_Oct_1.pdf",
                       file_path="fake/path"),
    SupportingDocument(id=2, claim_id=1, file_name="Teaching_Log_Oct.docx",
                       file_path="fake/path"),
)


def seed_demo_data(
    lecturer_repo: LecturerRepository,
    claim_repo: ClaimRepository,
    hours_repo: HoursWorkedRepository,
    document_repo: SupportingDocumentRepository,
    logger: StructuredLogger,
    now: Optional[datetime] = None,
) -> bool:
    """Insert the demo data set.

    Args:
        now: Reference time for submission dates (defaults to UTC now).

    Returns:
        ``True`` if data was inserted, ``False`` if the store already
        held lecturers and seeding was skipped.
    """
    store = lecturer_repo.store
    now = now or datetime.now(timezone.utc)

    with store.transaction():
        if lecturer_repo.count() > 0:
            logger.info("Store already populated; demo seed skipped.")
            return False

        rates: dict[int, Decimal] = {}
        for lecturer in DEMO_LECTURERS:
            lecturer_repo.add(lecturer)
            rates[lecturer.id] = lecturer.hourly_rate

        for claim_id, lecturer_id, month, year, status_id, age_days in _DEMO_CLAIMS:
            hours = [h for h in _DEMO_HOURS if h.claim_id == claim_id]
            claim_repo.add(
                Claim(
                    id=claim_id,
                    lecturer_id=lecturer_id,
                    month=month,
                    year=year,
                    submission_date=now - timedelta(days=age_days),
                    total_amount=compute_total((h.hours for h in hours), rates[lecturer_id]),
                    status_id=status_id,
                )
            )
            for entry in hours:
                hours_repo.add(entry.model_copy())

        for document in _DEMO_DOCUMENTS:
            document_repo.add(document.model_copy())

    logger.info(
        "Seeded demo data: %d lecturers, %d claims, %d hours lines, %d documents.",
        len(DEMO_LECTURERS),
        len(_DEMO_CLAIMS),
        len(_DEMO_HOURS),
        len(_DEMO_DOCUMENTS),
    )
    return True
