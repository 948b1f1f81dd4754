"""
Business Logic Services Package.

Contains the claim core (lifecycle, catalog, intake guards, notifier,
queries) and the role desks that wrap it for a UI layer.  Services depend
on the Repository layer for data access.

The ``create_services()`` factory wires the store, every repository and
every service together, returning a typed dict that the application layer
can consume without knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from contract_claims.config import AppConfig
from contract_claims.logger import StructuredLogger, get_logger
from contract_claims.repositories.claim_repository import ClaimRepository
from contract_claims.repositories.document_repository import SupportingDocumentRepository
from contract_claims.repositories.hours_repository import HoursWorkedRepository
from contract_claims.repositories.lecturer_repository import LecturerRepository
from contract_claims.repositories.status_repository import StatusRepository
from contract_claims.services.claim_lifecycle import ClaimLifecycleService
from contract_claims.services.claim_notifier import ClaimNotifier
from contract_claims.services.claim_query import ClaimQueryService
from contract_claims.services.document_guards import DocumentGuardsService
from contract_claims.services.review_desks import (
    CoordinatorDesk,
    HRDesk,
    LecturerDesk,
    ManagerDesk,
)
from contract_claims.services.seed_data import seed_demo_data
from contract_claims.services.status_catalog import StatusCatalog
from contract_claims.store import EntityStore


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    # --- Infrastructure ---
    store: EntityStore
    lecturer_repository: LecturerRepository

    # --- Claim core ---
    status_catalog: StatusCatalog
    document_guards_service: DocumentGuardsService
    claim_notifier: ClaimNotifier
    claim_lifecycle_service: ClaimLifecycleService
    claim_query_service: ClaimQueryService

    # --- Role desks ---
    lecturer_desk: LecturerDesk
    coordinator_desk: CoordinatorDesk
    manager_desk: ManagerDesk
    hr_desk: HRDesk


def create_services(
    config: AppConfig,
    logger: Optional[StructuredLogger] = None,
) -> ServiceContainer:
    """
    Wire the store, repositories and services together.

    This is the single composition root for the claim core.  Each call
    builds an independent store, so tests can create as many containers
    as they need.

    Args:
        config: Application configuration (injected into services that need it).
        logger: Logger shared by every component; defaults to ``services``.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = logger or get_logger("services")

    # ------------------------------------------------------------------
    # 1. Store and repositories (data-access layer)
    # ------------------------------------------------------------------
    store = EntityStore(logger=logger)
    lecturer_repo = LecturerRepository(store=store, logger=logger)
    status_repo = StatusRepository(store=store, logger=logger)
    claim_repo = ClaimRepository(store=store, logger=logger)
    hours_repo = HoursWorkedRepository(store=store, logger=logger)
    document_repo = SupportingDocumentRepository(store=store, logger=logger)

    # ------------------------------------------------------------------
    # 2. Leaf services (no service dependencies)
    # ------------------------------------------------------------------
    status_catalog = StatusCatalog(repo=status_repo, logger=logger)
    status_catalog.seed()

    document_guards_service = DocumentGuardsService(config=config, logger=logger)
    claim_notifier = ClaimNotifier(logger=logger, queue_size=config.NOTIFIER_QUEUE_SIZE)

    # ------------------------------------------------------------------
    # 3. Claim core (depends on the leaf services)
    # ------------------------------------------------------------------
    claim_lifecycle_service = ClaimLifecycleService(
        store=store,
        lecturer_repo=lecturer_repo,
        claim_repo=claim_repo,
        hours_repo=hours_repo,
        document_repo=document_repo,
        status_catalog=status_catalog,
        document_guards=document_guards_service,
        notifier=claim_notifier,
        config=config,
        logger=logger,
    )
    claim_query_service = ClaimQueryService(
        lifecycle=claim_lifecycle_service,
        status_catalog=status_catalog,
        logger=logger,
    )

    # ------------------------------------------------------------------
    # 4. Role desks
    # ------------------------------------------------------------------
    lecturer_desk = LecturerDesk(lifecycle=claim_lifecycle_service, logger=logger)
    coordinator_desk = CoordinatorDesk(
        lifecycle=claim_lifecycle_service,
        notifier=claim_notifier,
        logger=logger,
    )
    manager_desk = ManagerDesk(
        lifecycle=claim_lifecycle_service,
        query=claim_query_service,
        logger=logger,
    )
    hr_desk = HRDesk(
        lifecycle=claim_lifecycle_service,
        query=claim_query_service,
        logger=logger,
    )

    # ------------------------------------------------------------------
    # 5. Demo data
    # ------------------------------------------------------------------
    if config.SEED_DEMO_DATA:
        seed_demo_data(
            lecturer_repo=lecturer_repo,
            claim_repo=claim_repo,
            hours_repo=hours_repo,
            document_repo=document_repo,
            logger=logger,
        )

    return ServiceContainer(
        store=store,
        lecturer_repository=lecturer_repo,
        status_catalog=status_catalog,
        document_guards_service=document_guards_service,
        claim_notifier=claim_notifier,
        claim_lifecycle_service=claim_lifecycle_service,
        claim_query_service=claim_query_service,
        lecturer_desk=lecturer_desk,
        coordinator_desk=coordinator_desk,
        manager_desk=manager_desk,
        hr_desk=hr_desk,
    )
