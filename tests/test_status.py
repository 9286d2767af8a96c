"""Tests for status parsing, transitions and lazy policy expiry."""

from datetime import date

import pytest

from insurance_backoffice.errors import InvalidArgumentError, InvalidStateError
from insurance_backoffice.models.enums import ClaimStatus, ClientStatus, PolicyStatus
from insurance_backoffice.rules.status import (
    CLAIM_TRANSITIONS,
    POLICY_TRANSITIONS,
    check_transition,
    effective_policy_status,
    is_policy_in_force,
    parse_status,
)


class TestParseStatus:
    def test_accepts_member_and_string(self):
        """Enum members pass through; strings are trimmed and lower-cased."""
        assert parse_status(ClaimStatus, ClaimStatus.APPROVED, "claim") is ClaimStatus.APPROVED
        assert parse_status(ClaimStatus, " Approved ", "claim") is ClaimStatus.APPROVED

    def test_unknown_value_lists_allowed(self):
        """An unknown status raises InvalidArgumentError listing the legal values."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_status(ClaimStatus, "closed", "claim")
        assert exc_info.value.details["allowed"] == ["pending", "approved", "rejected"]
        assert "Invalid claim status" in exc_info.value.message

    def test_client_status_rejects_policy_values(self):
        """Clients only take active or inactive."""
        with pytest.raises(InvalidArgumentError):
            parse_status(ClientStatus, "suspended", "client")


class TestTransitions:
    def test_tables_cover_every_status(self):
        """Every status has an entry in its transition table."""
        assert set(CLAIM_TRANSITIONS) == set(ClaimStatus)
        assert set(POLICY_TRANSITIONS) == set(PolicyStatus)

    @pytest.mark.parametrize("target", list(ClaimStatus))
    def test_pending_claim_reaches_every_status(self, target):
        check_transition(ClaimStatus.PENDING, target, "claim")

    @pytest.mark.parametrize(
        "current,target",
        [
            (ClaimStatus.APPROVED, ClaimStatus.REJECTED),
            (ClaimStatus.REJECTED, ClaimStatus.APPROVED),
        ],
    )
    def test_decisions_do_not_flip_directly(self, current, target):
        """Approved and rejected cannot switch without re-opening first."""
        with pytest.raises(InvalidStateError) as exc_info:
            check_transition(current, target, "claim")
        assert exc_info.value.details["current_status"] == current.value

    def test_decided_claim_can_reopen(self):
        check_transition(ClaimStatus.APPROVED, ClaimStatus.PENDING, "claim")
        check_transition(ClaimStatus.REJECTED, ClaimStatus.PENDING, "claim")

    def test_policy_moves_between_any_statuses(self):
        """Administrative policy changes are unrestricted."""
        for current in PolicyStatus:
            for target in PolicyStatus:
                check_transition(current, target, "policy")


class TestEffectivePolicyStatus:
    def test_active_past_end_date_reads_expired(self):
        """Stored active with an end date before today reads as expired."""
        end = date(2024, 12, 31)
        assert effective_policy_status("active", end, date(2025, 1, 1)) == PolicyStatus.EXPIRED
        assert effective_policy_status("active", end, date(2023, 12, 1)) == PolicyStatus.ACTIVE

    def test_end_date_today_is_still_active(self):
        """A policy ending today is in force for the whole day."""
        today = date(2025, 1, 15)
        assert is_policy_in_force(PolicyStatus.ACTIVE, today, today)

    def test_no_end_date_never_expires(self):
        assert effective_policy_status(PolicyStatus.ACTIVE, None, date(2100, 1, 1)) == PolicyStatus.ACTIVE

    def test_other_statuses_unchanged(self):
        """Only stored active policies are subject to lazy expiry."""
        past = date(2020, 1, 1)
        today = date(2025, 1, 1)
        assert effective_policy_status("cancelled", past, today) == PolicyStatus.CANCELLED
        assert effective_policy_status("suspended", past, today) == PolicyStatus.SUSPENDED
        assert not is_policy_in_force("inactive", None, today)
