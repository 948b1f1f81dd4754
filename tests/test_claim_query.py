"""
Tests for claim filtering and query views (``contract_claims.services.claim_query``).

Covers:
- filter_claims: status filter (unset / 0 means all), free-text match on
  id, month and year, AND-combination, input order preserved
- ClaimQueryService.search over live data
- claims_by_status by id and by name, unknown status rejected
- status_summary: every catalog status present, counts and totals
"""

import asyncio
from decimal import Decimal

import pytest

from contract_claims.exceptions import InvalidArgumentError
from contract_claims.models.enums import StatusId
from contract_claims.models.service_models import ClaimFilter
from contract_claims.services.claim_query import filter_claims


@pytest.fixture
def seeded_claims(lifecycle):
    """Claims 1, 2, 3 with statuses Pending Review, Approved, Rejected."""
    claims = asyncio.run(lifecycle.list_all_claims())
    assert [(c.id, c.status_id) for c in claims] == [(1, 3), (2, 4), (3, 2)]
    return claims


# =========================================================================
# filter_claims
# =========================================================================


class TestFilterClaims:

    def test_no_filter_returns_everything(self, seeded_claims):
        assert filter_claims(seeded_claims) == seeded_claims
        assert filter_claims(seeded_claims, ClaimFilter()) == seeded_claims

    def test_status_filter(self, seeded_claims):
        result = filter_claims(seeded_claims, ClaimFilter(status_id=3))
        assert [c.id for c in result] == [1]

    def test_status_zero_means_all(self, seeded_claims):
        result = filter_claims(seeded_claims, ClaimFilter(status_id=0))
        assert [c.id for c in result] == [1, 2, 3]

    def test_year_text_matches_all_statuses(self, seeded_claims):
        result = filter_claims(seeded_claims, ClaimFilter(search_text="2025"))
        assert [c.id for c in result] == [1, 2, 3]

    def test_text_matches_month(self, seeded_claims):
        result = filter_claims(seeded_claims, ClaimFilter(search_text="9"))
        assert [c.id for c in result] == [2]

    def test_text_matches_id(self, seeded_claims):
        result = filter_claims(seeded_claims, ClaimFilter(search_text=" 3 "))
        assert [c.id for c in result] == [3]

    def test_filters_are_and_combined(self, seeded_claims):
        result = filter_claims(
            seeded_claims, ClaimFilter(status_id=StatusId.APPROVED, search_text="2025")
        )
        assert [c.id for c in result] == [2]

    def test_blank_text_is_ignored(self, seeded_claims):
        assert filter_claims(seeded_claims, ClaimFilter(search_text="   ")) == seeded_claims

    def test_no_match(self, seeded_claims):
        assert filter_claims(seeded_claims, ClaimFilter(search_text="1999")) == []

    def test_input_order_is_preserved(self, seeded_claims):
        reversed_claims = list(reversed(seeded_claims))
        result = filter_claims(reversed_claims, ClaimFilter(search_text="2025"))
        assert [c.id for c in result] == [3, 2, 1]


# =========================================================================
# ClaimQueryService
# =========================================================================


class TestClaimQueryService:

    def test_search_sees_new_submissions(self, query, lifecycle, make_hours):
        new_id = asyncio.run(
            lifecycle.submit_claim({"lecturer_id": 2, "month": 12, "year": 2026}, make_hours(1))
        )
        result = asyncio.run(query.search(ClaimFilter(search_text="2026")))
        assert [c.id for c in result] == [new_id]

    def test_claims_by_status_id(self, query):
        result = asyncio.run(query.claims_by_status(StatusId.REJECTED))
        assert [c.id for c in result] == [3]

    def test_claims_by_status_name(self, query):
        result = asyncio.run(query.claims_by_status("approved"))
        assert [c.id for c in result] == [2]

    @pytest.mark.parametrize("status", ["Archived", 9, True, 4.0])
    def test_claims_by_unknown_status(self, query, status):
        with pytest.raises(InvalidArgumentError):
            asyncio.run(query.claims_by_status(status))

    def test_status_summary(self, query):
        summary = asyncio.run(query.status_summary())
        assert list(summary) == [
            "Submitted",
            "Rejected",
            "Pending Review",
            "Approved",
            "Completed/Paid",
        ]
        assert summary["Submitted"] == {"count": 0, "total_amount": Decimal("0")}
        assert summary["Pending Review"] == {"count": 1, "total_amount": Decimal("7500")}
        assert summary["Approved"] == {"count": 1, "total_amount": Decimal("9000")}
        assert summary["Rejected"] == {"count": 1, "total_amount": Decimal("4000")}

    def test_summary_of_empty_store(self, empty_services):
        summary = asyncio.run(empty_services["claim_query_service"].status_summary())
        assert all(bucket["count"] == 0 for bucket in summary.values())
