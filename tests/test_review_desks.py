"""
Tests for the role desks (``contract_claims.services.review_desks``).

Covers:
- ServiceResult envelope: 200 data is JSON-safe, 404 / 400 / 500 mapping
- LecturerDesk: submit, own claims, running total preview
- CoordinatorDesk: live pending queue fed by the notifier, entries that
  leave Pending Review elsewhere disappear, approve / reject gated to
  Pending Review, close() stops updates
- ManagerDesk: filtered overview, verification (notes can be cleared),
  free status changes
- HRDesk: Approved-only default view, payment gated to Approved claims,
  concurrent payments of one claim succeed once
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from contract_claims.models.service_models import ClaimFilter

MIB = 1024 * 1024


@pytest.fixture
def lecturer_desk(services):
    return services["lecturer_desk"]


@pytest.fixture
def coordinator_desk(services):
    desk = services["coordinator_desk"]
    yield desk
    desk.close()


@pytest.fixture
def manager_desk(services):
    return services["manager_desk"]


@pytest.fixture
def hr_desk(services):
    return services["hr_desk"]


# =========================================================================
# Lecturer
# =========================================================================


class TestLecturerDesk:

    def test_submit_returns_new_id(self, lecturer_desk, make_hours):
        result = asyncio.run(lecturer_desk.submit(1, 11, 2025, make_hours(10, 5)))
        assert result.success
        assert result.status_code == 200
        assert result.data == {"claim_id": 4}

    def test_submit_unknown_lecturer_is_404(self, lecturer_desk, make_hours):
        result = asyncio.run(lecturer_desk.submit(999, 11, 2025, make_hours(1)))
        assert not result.success
        assert result.status_code == 404
        assert result.error == "Lecturer ID 999 not found."

    def test_submit_invalid_hours_is_400(self, lecturer_desk, make_hours):
        result = asyncio.run(lecturer_desk.submit(1, 11, 2025, make_hours(0)))
        assert result.status_code == 400
        assert "Entry 1" in result.error

    def test_submit_rejected_document_is_400(self, lecturer_desk, make_hours):
        result = asyncio.run(
            lecturer_desk.submit(
                1, 11, 2025, make_hours(2),
                [{"file_name": "huge.pdf", "size_bytes": 6 * MIB}],
            )
        )
        assert result.status_code == 400
        assert "huge.pdf" in result.error

    def test_my_claims_are_json_safe(self, lecturer_desk):
        result = asyncio.run(lecturer_desk.my_claims(1))
        assert [c["id"] for c in result.data] == [1, 3]
        assert result.data[0]["total_amount"] == "7500.00"
        assert isinstance(result.data[0]["submission_date"], str)

    def test_preview_total(self, lecturer_desk, make_hours):
        result = asyncio.run(lecturer_desk.preview_total(2, make_hours(2, 1)))
        assert result.data == {"total_amount": "1350.00"}

    def test_unexpected_error_is_500(self, lecturer_desk, services, monkeypatch, captured_log):
        lifecycle = services["claim_lifecycle_service"]

        async def _broken(lecturer_id):
            raise RuntimeError("store offline")

        monkeypatch.setattr(lifecycle, "list_claims_for_lecturer", _broken)

        result = asyncio.run(lecturer_desk.my_claims(1))
        assert result.status_code == 500
        assert "store offline" in result.error
        assert any(r.get("exception") for r in captured_log.records())


# =========================================================================
# Coordinator
# =========================================================================


class TestCoordinatorDesk:

    def test_open_loads_pending_claims(self, coordinator_desk):
        result = asyncio.run(coordinator_desk.open())
        assert result.success
        assert [c["id"] for c in result.data] == [1]
        assert coordinator_desk.is_open

    def test_new_submission_joins_queue(
        self, coordinator_desk, lecturer_desk, notifier, make_hours
    ):
        asyncio.run(coordinator_desk.open())
        asyncio.run(lecturer_desk.submit(2, 11, 2025, make_hours(4)))
        assert notifier.flush(timeout=5)

        queue = asyncio.run(coordinator_desk.pending_queue())
        assert [c["id"] for c in queue] == [1, 4]
        assert queue[1]["lecturer_name"] == "Alice Smith"

    def test_closed_desk_ignores_submissions(
        self, coordinator_desk, lecturer_desk, notifier, make_hours
    ):
        asyncio.run(coordinator_desk.open())
        coordinator_desk.close()
        asyncio.run(lecturer_desk.submit(2, 11, 2025, make_hours(4)))
        assert notifier.flush(timeout=5)

        assert not coordinator_desk.is_open
        assert [c["id"] for c in asyncio.run(coordinator_desk.pending_queue())] == [1]

    def test_approve_removes_from_queue(self, coordinator_desk, services):
        asyncio.run(coordinator_desk.open())
        result = asyncio.run(coordinator_desk.approve(1))

        assert result.success
        assert result.data == {"claim_id": 1, "status_name": "Approved"}
        assert asyncio.run(coordinator_desk.pending_queue()) == []
        claim = asyncio.run(services["claim_lifecycle_service"].get_claim(1))
        assert claim.status_name == "Approved"

    def test_status_changed_elsewhere_leaves_queue(self, coordinator_desk, manager_desk):
        asyncio.run(coordinator_desk.open())
        asyncio.run(manager_desk.set_status(1, "Approved"))

        assert asyncio.run(coordinator_desk.pending_queue()) == []

    def test_claim_returned_to_review_reappears(self, coordinator_desk, lifecycle):
        asyncio.run(coordinator_desk.open())
        asyncio.run(lifecycle.update_status(1, "Submitted"))
        assert asyncio.run(coordinator_desk.pending_queue()) == []

        asyncio.run(lifecycle.update_status(1, "Pending Review"))
        assert [c["id"] for c in asyncio.run(coordinator_desk.pending_queue())] == [1]

    def test_approve_after_manager_approval_is_400(self, coordinator_desk, manager_desk):
        asyncio.run(coordinator_desk.open())
        asyncio.run(manager_desk.set_status(1, "Approved"))

        result = asyncio.run(coordinator_desk.approve(1))
        assert result.status_code == 400
        assert "Current status is 'Approved'" in result.error

    def test_reject(self, coordinator_desk):
        result = asyncio.run(coordinator_desk.reject(1))
        assert result.data["status_name"] == "Rejected"

    def test_approve_non_pending_is_400(self, coordinator_desk):
        result = asyncio.run(coordinator_desk.approve(2))
        assert result.status_code == 400
        assert "Only 'Pending Review' claims" in result.error

    def test_approve_unknown_is_404(self, coordinator_desk):
        result = asyncio.run(coordinator_desk.approve(999))
        assert result.status_code == 404

    def test_claim_detail(self, coordinator_desk):
        result = asyncio.run(coordinator_desk.claim_detail(1))
        assert result.data["claim"]["status_name"] == "Pending Review"
        assert [h["id"] for h in result.data["hours"]] == [101, 102]
        assert [d["file_name"] for d in result.data["documents"]] == [
            "Attendance_Oct_1.pdf",
            "Teaching_Log_Oct.docx",
        ]

    def test_claim_detail_unknown_is_404(self, coordinator_desk):
        assert asyncio.run(coordinator_desk.claim_detail(999)).status_code == 404


# =========================================================================
# Manager
# =========================================================================


class TestManagerDesk:

    def test_all_claims_with_filter(self, manager_desk):
        result = asyncio.run(manager_desk.all_claims(ClaimFilter(status_id=3)))
        assert [c["id"] for c in result.data] == [1]

    def test_all_claims_without_filter(self, manager_desk):
        result = asyncio.run(manager_desk.all_claims())
        assert [c["id"] for c in result.data] == [1, 2, 3]

    def test_verify(self, manager_desk):
        result = asyncio.run(manager_desk.verify(2, True, "Matches register."))
        assert result.data["is_verified"] is True
        assert result.data["verification_notes"] == "Matches register."
        assert result.data["status_name"] == "Approved"

    def test_unverify_clears_notes(self, manager_desk):
        asyncio.run(manager_desk.verify(1, True, "looks fine"))
        result = asyncio.run(manager_desk.verify(1, False))

        assert result.data["is_verified"] is False
        assert result.data["verification_notes"] is None

    def test_verify_rejects_non_bool_flag(self, manager_desk):
        result = asyncio.run(manager_desk.verify(1, "false", None))
        assert result.status_code == 400
        assert "is_verified" in result.error

    def test_verify_unknown_claim_is_404(self, manager_desk):
        assert asyncio.run(manager_desk.verify(999, True)).status_code == 404

    def test_set_status_any_direction(self, manager_desk):
        result = asyncio.run(manager_desk.set_status(3, "Pending Review"))
        assert result.data["status_id"] == 3

    def test_set_unknown_status_is_400(self, manager_desk):
        result = asyncio.run(manager_desk.set_status(1, "Archived"))
        assert result.status_code == 400
        assert "Archived" in result.error

    def test_set_status_unknown_claim_is_404(self, manager_desk):
        assert asyncio.run(manager_desk.set_status(999, 4)).status_code == 404

    def test_summary(self, manager_desk):
        result = asyncio.run(manager_desk.summary())
        assert result.data["Approved"] == {"count": 1, "total_amount": "9000.00"}


# =========================================================================
# HR
# =========================================================================


class TestHRDesk:

    def test_default_view_is_approved_only(self, hr_desk):
        result = asyncio.run(hr_desk.payable_claims())
        assert [c["id"] for c in result.data] == [2]

    def test_view_all_statuses(self, hr_desk):
        result = asyncio.run(hr_desk.payable_claims(status_id=0))
        assert [c["id"] for c in result.data] == [1, 2, 3]

    def test_search_text(self, hr_desk):
        result = asyncio.run(hr_desk.payable_claims(search_text="1999"))
        assert result.data == []

    def test_process_payment(self, hr_desk):
        result = asyncio.run(hr_desk.process_payment(2))
        assert result.success
        assert result.data == {
            "claim_id": 2,
            "status_name": "Completed/Paid",
            "total_amount": "9000.00",
        }
        assert asyncio.run(hr_desk.payable_claims()).data == []

    @pytest.mark.parametrize("claim_id", [1, 3])
    def test_payment_requires_approved(self, hr_desk, claim_id):
        result = asyncio.run(hr_desk.process_payment(claim_id))
        assert result.status_code == 400
        assert "Only 'Approved' claims can be paid." in result.error

    def test_payment_is_not_repeated(self, hr_desk):
        asyncio.run(hr_desk.process_payment(2))
        assert asyncio.run(hr_desk.process_payment(2)).status_code == 400

    def test_payment_unknown_claim_is_404(self, hr_desk):
        assert asyncio.run(hr_desk.process_payment(999)).status_code == 404

    def test_concurrent_payments_pay_once(self, hr_desk, captured_log):
        def _pay(_):
            return asyncio.run(hr_desk.process_payment(2))

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(_pay, range(8)))

        assert sum(r.success for r in results) == 1
        assert all(r.status_code == 400 for r in results if not r.success)
        paid = [
            e for e in captured_log.audit_events("UPDATE_STATUS")
            if e["details"]["new_status"] == "Completed/Paid"
        ]
        assert len(paid) == 1

    def test_full_workflow(self, lecturer_desk, coordinator_desk, hr_desk, make_hours):
        claim_id = asyncio.run(lecturer_desk.submit(1, 11, 2025, make_hours(3))).data["claim_id"]
        assert asyncio.run(hr_desk.process_payment(claim_id)).status_code == 400

        asyncio.run(coordinator_desk.approve(claim_id))
        paid = asyncio.run(hr_desk.process_payment(claim_id))

        assert paid.success
        assert paid.data["total_amount"] == "1500.00"
