"""
Tests for the approval gate and status lifecycle (domain/approval.py).

Covers:
- requires_approval(): exempt module, strict threshold, every gated module
- initial_status(): gated -> Pending, ungated requests honoured, Pending
  collapsing to the default
- can_transition(): no edge back to Pending
"""

from decimal import Decimal

import pytest

from ledger_kernel.domain.approval import (
    APPROVAL_DECISIONS,
    APPROVAL_THRESHOLD,
    DEFAULT_UNGATED_STATUS,
    STATUS_TRANSITIONS,
    can_transition,
    initial_status,
    requires_approval,
)
from ledger_kernel.domain.transaction import Module, TransactionStatus

GATED_MODULES = [m for m in Module if m != Module.FINANCE]


class TestRequiresApproval:
    """Finance is exempt; every other module is gated strictly above 1000."""

    def test_threshold_value(self):
        assert APPROVAL_THRESHOLD == Decimal("1000")

    @pytest.mark.parametrize("module", GATED_MODULES)
    def test_above_threshold_is_gated(self, module):
        assert requires_approval(module, Decimal("1000.01")) is True

    @pytest.mark.parametrize("module", GATED_MODULES)
    def test_exactly_threshold_is_not_gated(self, module):
        assert requires_approval(module, Decimal("1000")) is False

    @pytest.mark.parametrize("module", GATED_MODULES)
    def test_below_threshold_is_not_gated(self, module):
        assert requires_approval(module, Decimal("999.99")) is False

    def test_finance_never_gated(self):
        assert requires_approval(Module.FINANCE, Decimal("10000000")) is False


class TestInitialStatus:

    def test_gated_always_pending(self):
        assert initial_status(True) == TransactionStatus.PENDING
        assert (
            initial_status(True, TransactionStatus.COMPLETED)
            == TransactionStatus.PENDING
        )

    def test_ungated_defaults_to_completed(self):
        assert initial_status(False) == DEFAULT_UNGATED_STATUS
        assert DEFAULT_UNGATED_STATUS == TransactionStatus.COMPLETED

    def test_ungated_honours_requested_status(self):
        assert (
            initial_status(False, TransactionStatus.APPROVED)
            == TransactionStatus.APPROVED
        )

    def test_ungated_pending_request_collapses(self):
        """Only the gate puts a record in the approval queue."""
        assert (
            initial_status(False, TransactionStatus.PENDING)
            == TransactionStatus.COMPLETED
        )


class TestStatusTransitions:

    @pytest.mark.parametrize("status", list(TransactionStatus))
    def test_no_transition_back_to_pending(self, status):
        assert can_transition(status, TransactionStatus.PENDING) is False
        assert TransactionStatus.PENDING not in STATUS_TRANSITIONS[status]

    @pytest.mark.parametrize(
        "target",
        [s for s in TransactionStatus if s != TransactionStatus.PENDING],
    )
    def test_pending_may_move_to_any_other_status(self, target):
        assert can_transition(TransactionStatus.PENDING, target) is True

    def test_completed_may_be_cancelled(self):
        assert can_transition(
            TransactionStatus.COMPLETED, TransactionStatus.CANCELLED
        )

    def test_decisions_are_approve_and_reject(self):
        assert APPROVAL_DECISIONS == {
            TransactionStatus.APPROVED,
            TransactionStatus.REJECTED,
        }
