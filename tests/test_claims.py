"""Tests for claim creation, decisions, edits and deletion."""

from datetime import date

import pytest

from conftest import TODAY
from insurance_backoffice.errors import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    PreconditionFailedError,
)
from insurance_backoffice.models.enums import ClaimStatus
from insurance_backoffice.rules.claims import check_amount, check_description


def _claim(office, client, product, **overrides):
    data = {
        "client_id": client.id,
        "product_id": product.id,
        "amount": 1500.0,
        "description": "Water damage in kitchen",
    }
    data.update(overrides)
    return office.claims.create_claim(data)


class TestClaimValueChecks:
    def test_check_amount_bounds(self):
        """Zero and negative amounts are refused; coverage itself is allowed."""
        check_amount(100.0, 100.0)
        with pytest.raises(InvalidArgumentError):
            check_amount(0, 100.0)
        with pytest.raises(InvalidArgumentError):
            check_amount(-5, 100.0)

    def test_check_amount_over_coverage_reports_max(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            check_amount(100.01, 100.0)
        assert exc_info.value.details["max_coverage"] == 100.0

    @pytest.mark.parametrize("amount", [float("nan"), float("inf")])
    def test_check_amount_rejects_non_finite(self, amount):
        with pytest.raises(InvalidArgumentError):
            check_amount(amount, 100.0)

    def test_check_description_strips(self):
        assert check_description("  dented door ") == "dented door"
        with pytest.raises(InvalidArgumentError):
            check_description("   ")


class TestCreateClaim:
    def test_creates_pending_claim(self, office, client, product, policy):
        """A valid claim is pending, dated today, with a generated number."""
        created = _claim(office, client, product)
        assert created.complete
        claim = created.record
        assert claim.status == ClaimStatus.PENDING
        assert claim.submitted_date == TODAY
        assert claim.claim_number.startswith("CLM-")
        assert claim.processed_date is None
        assert claim.product_name == "Auto Protection Plus"

    def test_unknown_client(self, office, product, policy):
        with pytest.raises(NotFoundError) as exc_info:
            office.claims.create_claim(
                {"client_id": 999, "product_id": product.id, "amount": 10, "description": "x"}
            )
        assert exc_info.value.details["entity"] == "client"

    def test_unknown_product(self, office, client):
        with pytest.raises(NotFoundError) as exc_info:
            office.claims.create_claim(
                {"client_id": client.id, "product_id": 999, "amount": 10, "description": "x"}
            )
        assert exc_info.value.details["entity"] == "product"

    def test_no_policy_is_precondition_failure(self, office, client, product):
        """Without a policy for the pair the claim is refused before field checks."""
        with pytest.raises(PreconditionFailedError):
            _claim(office, client, product, amount=-1, description="")

    def test_inactive_policy_is_precondition_failure(self, office, client, product, policy):
        office.policies.update_policy_status(policy.id, "suspended")
        with pytest.raises(PreconditionFailedError):
            _claim(office, client, product)

    def test_lazily_expired_policy_is_precondition_failure(self, office, client, product, policy):
        """A stored-active policy past its end date does not support claims."""
        office.policies.update_policy(policy.id, {"end_date": date(2025, 1, 14)})
        with pytest.raises(PreconditionFailedError):
            _claim(office, client, product)

    def test_amount_over_coverage(self, office, client, product, policy):
        with pytest.raises(InvalidArgumentError) as exc_info:
            _claim(office, client, product, amount=75000.01)
        assert exc_info.value.details["max_coverage"] == 75000.0

    def test_amount_equal_to_coverage_allowed(self, office, client, product, policy):
        assert _claim(office, client, product, amount=75000).record.amount == 75000

    @pytest.mark.parametrize("amount", [0, -10])
    def test_non_positive_amount(self, office, client, product, policy, amount):
        with pytest.raises(InvalidArgumentError):
            _claim(office, client, product, amount=amount)

    def test_blank_description(self, office, client, product, policy):
        with pytest.raises(InvalidArgumentError):
            _claim(office, client, product, description="   ")

    @pytest.mark.parametrize("amount", [float("nan"), "NaN", float("inf")])
    def test_non_finite_amount(self, office, client, product, policy, amount):
        """NaN and infinite amounts are refused before anything is stored."""
        with pytest.raises(InvalidArgumentError):
            _claim(office, client, product, amount=amount)
        assert office.claims.list_claims() == []

    def test_supplied_number_kept_and_duplicate_conflicts(self, office, client, product, policy):
        """A caller-supplied claim number is used; reusing it is a conflict."""
        first = _claim(office, client, product, claim_number="CLM-001")
        assert first.record.claim_number == "CLM-001"
        with pytest.raises(ConflictError):
            _claim(office, client, product, claim_number="CLM-001")

    def test_does_not_touch_policy(self, office, client, product, policy):
        _claim(office, client, product)
        after = office.policies.get_policy(policy.id)
        assert after.status == policy.status
        assert after.end_date == policy.end_date

    def test_incomplete_when_read_back_fails(self, office, client, product, policy, monkeypatch):
        """A failed follow-up read still reports the committed id."""
        import sqlite3

        def boom(claim_id):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(office.claims, "get_claim", boom)
        created = _claim(office, client, product)
        assert created.complete is False
        assert created.record is None
        assert created.message == "Claim created but failed to fetch"
        assert office.claims.list_claims()[0].id == created.id

    def test_incomplete_when_row_cannot_be_read_back(
        self, office, client, product, policy, monkeypatch
    ):
        """A committed claim that the read-back cannot find is still reported as created."""
        monkeypatch.setattr(office.claims._claims, "get_details", lambda claim_id: None)
        created = _claim(office, client, product)
        assert created.complete is False
        assert created.record is None
        assert created.message == "Claim created but failed to fetch"
        assert created.id > 0


class TestClaimStatus:
    def test_approve_stamps_processing(self, office, claim):
        """Deciding a claim records today's date, the processor and notes."""
        decided = office.claims.update_claim_status(
            claim.id, "approved", notes="Verified estimate", processor_id=7
        )
        assert decided.status == ClaimStatus.APPROVED
        assert decided.processed_date == TODAY
        assert decided.processed_by == "7"
        assert decided.notes == "Verified estimate"

    def test_reject_then_approve_refused(self, office, claim):
        office.claims.update_claim_status(claim.id, "rejected")
        with pytest.raises(InvalidStateError):
            office.claims.update_claim_status(claim.id, "approved")

    def test_reopen_clears_processing(self, office, claim):
        """Re-opening to pending clears processed date and processor."""
        office.claims.update_claim_status(claim.id, "approved", processor_id="adjuster-1")
        reopened = office.claims.update_claim_status(claim.id, "pending")
        assert reopened.status == ClaimStatus.PENDING
        assert reopened.processed_date is None
        assert reopened.processed_by is None

    def test_invalid_status(self, office, claim):
        with pytest.raises(InvalidArgumentError):
            office.claims.update_claim_status(claim.id, "closed")

    def test_missing_claim(self, office):
        with pytest.raises(NotFoundError):
            office.claims.update_claim_status(999, "approved")

    def test_notes_in_history(self, office, claim):
        office.claims.update_claim_status(claim.id, "rejected", notes="Duplicate submission")
        history = office.get_history("claim", claim.id)
        assert history[-1].action == "status_changed"
        assert history[-1].old_status == "pending"
        assert history[-1].new_status == "rejected"
        assert history[-1].details == "Duplicate submission"

    def test_blank_notes_keep_stored_notes(self, office, claim):
        office.claims.update_claim(claim.id, {"notes": "Awaiting photos"})
        decided = office.claims.update_claim_status(claim.id, "approved", notes="   ")
        assert decided.notes == "Awaiting photos"
        assert office.get_history("claim", claim.id)[-1].details == ""


class TestUpdateClaim:
    def test_edit_pending_amount_and_description(self, office, claim):
        updated = office.claims.update_claim(
            claim.id, {"amount": 5000, "description": "Revised estimate"}
        )
        assert updated.amount == 5000
        assert updated.description == "Revised estimate"

    def test_amount_revalidated_against_coverage(self, office, claim):
        with pytest.raises(InvalidArgumentError) as exc_info:
            office.claims.update_claim(claim.id, {"amount": 80000})
        assert exc_info.value.details["max_coverage"] == 75000.0

    def test_decided_claim_amount_frozen(self, office, claim):
        """Amount and description are immutable once decided."""
        office.claims.update_claim_status(claim.id, "approved")
        with pytest.raises(InvalidStateError):
            office.claims.update_claim(claim.id, {"amount": 10})
        with pytest.raises(InvalidStateError):
            office.claims.update_claim(claim.id, {"description": "changed"})

    def test_notes_editable_after_decision(self, office, claim):
        office.claims.update_claim_status(claim.id, "approved")
        updated = office.claims.update_claim(claim.id, {"notes": "Paid on 2025-01-20"})
        assert updated.notes == "Paid on 2025-01-20"

    def test_empty_update(self, office, claim):
        with pytest.raises(InvalidArgumentError):
            office.claims.update_claim(claim.id, {})

    @pytest.mark.parametrize("amount", ["NaN", float("nan"), float("-inf")])
    def test_non_finite_amount_edit(self, office, claim, amount):
        with pytest.raises(InvalidArgumentError):
            office.claims.update_claim(claim.id, {"amount": amount})
        assert office.claims.get_claim(claim.id).amount == 4200.0


class TestDeleteClaim:
    def test_delete_pending(self, office, claim):
        result = office.claims.delete_claim(claim.id)
        assert result.id == claim.id
        with pytest.raises(NotFoundError):
            office.claims.get_claim(claim.id)

    def test_delete_decided_refused(self, office, claim):
        office.claims.update_claim_status(claim.id, "rejected")
        with pytest.raises(InvalidStateError) as exc_info:
            office.claims.delete_claim(claim.id)
        assert exc_info.value.message == "Cannot delete processed claim"

    def test_delete_missing(self, office):
        with pytest.raises(NotFoundError):
            office.claims.delete_claim(12345)


def test_list_claims_and_stats(office, client, product, policy):
    """Listing filters by status; stats sum approved and pending amounts."""
    first = _claim(office, client, product, amount=100).record
    second = _claim(office, client, product, amount=200).record
    _claim(office, client, product, amount=300)
    office.claims.update_claim_status(first.id, "approved")
    office.claims.update_claim_status(second.id, "rejected")

    assert [c.id for c in office.claims.list_claims(status="approved")] == [first.id]
    assert len(office.claims.list_claims(client_id=client.id)) == 3

    stats = office.claims.claim_stats()
    assert stats.total_claims == 3
    assert stats.pending_claims == 1
    assert stats.approved_claims == 1
    assert stats.rejected_claims == 1
    assert stats.total_approved_amount == 100
    assert stats.total_pending_amount == 300
