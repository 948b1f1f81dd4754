"""
Tests for the claim status catalog (``contract_claims.services.status_catalog``).

Covers:
- The five fixed statuses and their ids
- Name <-> id lookups (case-insensitive names)
- Idempotent seeding
- The advisory transition table (informational, never enforced)
"""

import pytest

from contract_claims.models.enums import StatusId
from contract_claims.services.status_catalog import ADVISORY_TRANSITIONS, StatusCatalog


class TestCatalogContents:

    def test_five_statuses_in_id_order(self, catalog):
        assert [(s.id, s.name) for s in catalog.all()] == [
            (1, "Submitted"),
            (2, "Rejected"),
            (3, "Pending Review"),
            (4, "Approved"),
            (5, "Completed/Paid"),
        ]

    def test_seed_twice_is_noop(self, catalog):
        catalog.seed()
        assert len(catalog.all()) == 5

    @pytest.mark.parametrize("status_id", [0, 6, -1])
    def test_unknown_ids(self, catalog, status_id):
        assert not catalog.exists(status_id)
        assert catalog.get_name(status_id) is None


class TestNameResolution:

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Approved", StatusId.APPROVED),
            ("approved", StatusId.APPROVED),
            ("  PENDING REVIEW ", StatusId.PENDING_REVIEW),
            ("Completed/Paid", StatusId.COMPLETED_PAID),
        ],
    )
    def test_resolves_known_names(self, catalog, name, expected):
        assert catalog.resolve_id(name) == expected

    def test_unknown_name_resolves_to_none(self, catalog):
        assert catalog.resolve_id("Archived") is None


class TestAdvisoryTransitions:

    def test_every_status_has_an_entry(self):
        assert set(ADVISORY_TRANSITIONS) == set(StatusId)

    def test_conventional_moves(self):
        assert StatusCatalog.is_conventional_transition(
            StatusId.PENDING_REVIEW, StatusId.APPROVED
        )
        assert StatusCatalog.is_conventional_transition(
            StatusId.APPROVED, StatusId.COMPLETED_PAID
        )

    def test_unconventional_move(self):
        assert not StatusCatalog.is_conventional_transition(
            StatusId.SUBMITTED, StatusId.COMPLETED_PAID
        )
