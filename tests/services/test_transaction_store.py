"""
Tests for TransactionStore -- the centralized ledger.

Covers:
- add_transaction(): id sequence, gate classification, initial status,
  requested_by default, notifications on record
- approve_transaction() / reject_transaction(): Pending only, approver,
  rejection note, exactly-one-winner under concurrency
- set_status() / update_transaction_status(): nothing back to Pending,
  unknown ids
- append_note() / delete_transaction(): note joining, ids never reused
- add_offering(): one Income transaction per offering, latest offering
- read side: filters, pending queue, summary, categories, payment methods
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.notifications import NotificationType
from ledger_kernel.domain.offering import OfferingBreakdown
from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    TransactionStatus,
    TransactionType,
)
from ledger_kernel.exceptions import (
    InvalidStatusTransitionError,
    TransactionNotFoundError,
    ValidationError,
)


@pytest.fixture
def events(relay):
    """Record everything the relay delivers."""
    seen = {"lists": [], "pending": [], "notifications": []}
    relay.subscribe(seen["lists"].append)
    relay.subscribe_to_pending_count(seen["pending"].append)
    relay.subscribe_to_notifications(seen["notifications"].append)
    return seen


# ---------------------------------------------------------------------------
# add_transaction
# ---------------------------------------------------------------------------


class TestAddTransaction:

    def test_ids_are_sequential(self, store, make_draft):
        ids = [store.add_transaction(make_draft()).id for _ in range(3)]
        assert ids == ["FTX001", "FTX002", "FTX003"]

    def test_ungated_transaction_completes(self, store, make_draft):
        tx = store.add_transaction(make_draft(amount=Decimal("250000")))
        assert tx.requires_approval is False
        assert tx.status == TransactionStatus.COMPLETED
        assert store.get_pending_transactions() == []

    def test_gated_transaction_is_pending(self, store, gated_draft):
        tx = store.add_transaction(gated_draft)
        assert tx.requires_approval is True
        assert tx.status == TransactionStatus.PENDING
        assert store.get_pending_transactions() == [tx]

    def test_gate_overrides_requested_status(self, store, gated_draft):
        from dataclasses import replace

        tx = store.add_transaction(replace(gated_draft, status=TransactionStatus.COMPLETED))
        assert tx.status == TransactionStatus.PENDING

    def test_small_module_expense_not_gated(self, store, make_draft):
        tx = store.add_transaction(make_draft(module=Module.WELFARE, amount=Decimal("1000")))
        assert tx.requires_approval is False
        assert tx.status == TransactionStatus.COMPLETED

    def test_requested_by_defaults_to_created_by(self, store, make_draft):
        tx = store.add_transaction(make_draft(created_by="Treasurer"))
        assert tx.requested_by == "Treasurer"

    def test_timestamps_from_clock(self, store, make_draft, deterministic_clock):
        tx = store.add_transaction(make_draft())
        assert tx.created_at == deterministic_clock.now()
        assert tx.updated_at == tx.created_at

    def test_invalid_draft_stores_nothing(self, store, make_draft, events):
        with pytest.raises(ValidationError):
            store.add_transaction(make_draft(amount=Decimal("0")))
        assert store.get_transactions() == []
        assert events["lists"] == []

    def test_failed_validation_does_not_consume_an_id(self, store, make_draft):
        with pytest.raises(ValidationError):
            store.add_transaction(make_draft(amount=Decimal("-5")))
        assert store.add_transaction(make_draft()).id == "FTX001"

    def test_subscribers_see_list_and_pending_count(self, store, gated_draft, events):
        tx = store.add_transaction(gated_draft)
        assert events["lists"][-1] == [tx]
        assert events["pending"][-1] == 1

    def test_gated_transaction_raises_approval_required(self, store, gated_draft, events):
        tx = store.add_transaction(gated_draft)
        (notification,) = events["notifications"]
        assert notification.type == NotificationType.APPROVAL_REQUIRED
        assert notification.transaction_id == tx.id
        assert notification.amount == Decimal("150000")
        assert notification.module == Module.INVENTORY
        assert notification.title == "Transaction Approval Required"
        assert "Inventory module requests approval for expense" in notification.message

    def test_ungated_transaction_sends_no_notification(self, store, make_draft, events):
        store.add_transaction(make_draft())
        assert events["notifications"] == []

    def test_logs_recorded_transaction(self, store, gated_draft, captured_logs):
        tx = store.add_transaction(gated_draft)
        record = next(r for r in captured_logs() if r["message"] == "transaction_recorded")
        assert record["transaction_id"] == tx.id
        assert record["module"] == "Inventory"
        assert record["requires_approval"] is True


# ---------------------------------------------------------------------------
# approve / reject
# ---------------------------------------------------------------------------


class TestApproveReject:

    def test_approve_pending(self, store, gated_draft, events, deterministic_clock):
        tx = store.add_transaction(gated_draft)
        deterministic_clock.advance(60)

        assert store.approve_transaction(tx.id, "Finance Manager") is True

        approved = store.get_transaction(tx.id)
        assert approved.status == TransactionStatus.APPROVED
        assert approved.approved_by == "Finance Manager"
        assert approved.updated_at == deterministic_clock.now()
        assert approved.amount == tx.amount
        assert store.get_pending_transactions() == []
        assert events["pending"][-1] == 0

        notification = events["notifications"][-1]
        assert notification.type == NotificationType.TRANSACTION_APPROVED
        assert notification.message == (
            f"Transaction {tx.id} has been approved by Finance Manager"
        )

    def test_reject_pending_records_reason(self, store, gated_draft, events):
        tx = store.add_transaction(gated_draft)

        assert store.reject_transaction(tx.id, "Finance Manager", "over budget") is True

        rejected = store.get_transaction(tx.id)
        assert rejected.status == TransactionStatus.REJECTED
        assert rejected.approved_by == "Finance Manager"
        assert rejected.notes == "Rejected: over budget"
        notification = events["notifications"][-1]
        assert notification.type == NotificationType.TRANSACTION_REJECTED
        assert notification.message.endswith("by Finance Manager: over budget")

    def test_rejection_note_appends_to_existing_notes(self, store, gated_draft):
        from dataclasses import replace

        tx = store.add_transaction(replace(gated_draft, notes="quote attached"))
        store.reject_transaction(tx.id, "FM", "duplicate")
        assert store.get_transaction(tx.id).notes == "quote attached | Rejected: duplicate"

    def test_unknown_id_returns_false(self, store, events):
        assert store.approve_transaction("FTX999", "FM") is False
        assert store.reject_transaction("FTX999", "FM", "x") is False
        assert events["notifications"] == []

    def test_non_pending_is_refused(self, store, make_draft, events):
        tx = store.add_transaction(make_draft())
        assert store.approve_transaction(tx.id, "FM") is False
        assert store.get_transaction(tx.id).status == TransactionStatus.COMPLETED
        assert store.get_transaction(tx.id).approved_by is None

    def test_second_decision_refused(self, store, gated_draft):
        tx = store.add_transaction(gated_draft)
        assert store.approve_transaction(tx.id, "FM") is True
        assert store.reject_transaction(tx.id, "Pastor", "late") is False
        assert store.approve_transaction(tx.id, "Pastor") is False
        final = store.get_transaction(tx.id)
        assert final.status == TransactionStatus.APPROVED
        assert final.approved_by == "FM"

    def test_refusal_is_logged(self, store, captured_logs):
        store.approve_transaction("FTX404", "FM")
        record = next(
            r for r in captured_logs() if r["message"] == "approval_decision_refused"
        )
        assert record["current"] == "not_found"
        assert record["level"] == "WARNING"

    def test_concurrent_decisions_have_one_winner(self, store, gated_draft, events):
        tx = store.add_transaction(gated_draft)
        barrier = threading.Barrier(8)

        def decide(i):
            barrier.wait()
            if i % 2:
                return store.approve_transaction(tx.id, f"approver-{i}")
            return store.reject_transaction(tx.id, f"rejecter-{i}", "race")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(decide, range(8)))

        assert results.count(True) == 1
        decisions = [
            n for n in events["notifications"]
            if n.type != NotificationType.APPROVAL_REQUIRED
        ]
        assert len(decisions) == 1
        final = store.get_transaction(tx.id)
        assert final.status in (TransactionStatus.APPROVED, TransactionStatus.REJECTED)


# ---------------------------------------------------------------------------
# status updates
# ---------------------------------------------------------------------------


class TestStatusUpdates:

    def test_approved_to_completed(self, store, gated_draft):
        tx = store.add_transaction(gated_draft)
        store.approve_transaction(tx.id, "FM")
        assert store.update_transaction_status(tx.id, TransactionStatus.COMPLETED) is True
        updated = store.get_transaction(tx.id)
        assert updated.status == TransactionStatus.COMPLETED
        assert updated.approved_by == "FM"

    def test_nothing_returns_to_pending(self, store, make_draft):
        tx = store.add_transaction(make_draft())
        assert store.update_transaction_status(tx.id, "Pending") is False
        assert store.get_transaction(tx.id).status == TransactionStatus.COMPLETED

    def test_set_status_raises_on_pending(self, store, make_draft):
        tx = store.add_transaction(make_draft())
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            store.set_status(tx.id, TransactionStatus.PENDING)
        assert exc_info.value.from_status == "Completed"

    def test_set_status_raises_on_unknown(self, store):
        with pytest.raises(TransactionNotFoundError):
            store.set_status("FTX404", TransactionStatus.CANCELLED)

    def test_update_unknown_returns_false(self, store):
        assert store.update_transaction_status("FTX404", "Cancelled") is False

    def test_direct_update_out_of_pending_records_approver(self, store, gated_draft):
        tx = store.add_transaction(gated_draft)
        store.update_transaction_status(tx.id, TransactionStatus.CANCELLED, approved_by="Admin")
        updated = store.get_transaction(tx.id)
        assert updated.status == TransactionStatus.CANCELLED
        assert updated.approved_by == "Admin"
        assert store.get_pending_transactions() == []

    def test_update_does_not_overwrite_approver(self, store, gated_draft):
        tx = store.add_transaction(gated_draft)
        store.approve_transaction(tx.id, "FM")
        store.update_transaction_status(tx.id, "Completed", approved_by="Someone Else")
        assert store.get_transaction(tx.id).approved_by == "FM"

    def test_unknown_status_label_raises(self, store, make_draft):
        tx = store.add_transaction(make_draft())
        with pytest.raises(ValidationError):
            store.set_status(tx.id, "Archived")


# ---------------------------------------------------------------------------
# notes and deletion
# ---------------------------------------------------------------------------


class TestNotesAndDeletion:

    def test_append_note_joins(self, store, make_draft):
        tx = store.add_transaction(make_draft(notes="first"))
        assert store.append_note(tx.id, "second") is True
        assert store.get_transaction(tx.id).notes == "first | second"

    def test_append_note_to_empty(self, store, make_draft):
        tx = store.add_transaction(make_draft())
        store.append_note(tx.id, "only")
        assert store.get_transaction(tx.id).notes == "only"

    def test_append_blank_note_raises(self, store, make_draft):
        tx = store.add_transaction(make_draft())
        with pytest.raises(ValidationError):
            store.append_note(tx.id, "  ")

    def test_append_note_unknown(self, store):
        assert store.append_note("FTX404", "x") is False

    def test_delete(self, store, gated_draft, events):
        tx = store.add_transaction(gated_draft)
        assert store.delete_transaction(tx.id) is True
        assert store.get_transaction(tx.id) is None
        assert events["pending"][-1] == 0
        assert store.delete_transaction(tx.id) is False

    def test_ids_never_reused_after_delete(self, store, make_draft):
        first = store.add_transaction(make_draft())
        second = store.add_transaction(make_draft())
        store.delete_transaction(second.id)
        store.delete_transaction(first.id)
        assert store.add_transaction(make_draft()).id == "FTX003"


# ---------------------------------------------------------------------------
# offerings
# ---------------------------------------------------------------------------


class TestOfferings:

    def test_offering_creates_one_income_transaction(self, store, make_offering):
        offering = store.add_offering(make_offering())

        assert offering.id == "OFF001"
        assert offering.total_amount == Decimal("65000")
        (tx,) = store.get_transactions()
        assert tx.type == TransactionType.INCOME
        assert tx.category == "Offerings"
        assert tx.amount == offering.total_amount
        assert tx.module_reference == offering.id
        assert tx.status == TransactionStatus.COMPLETED
        assert tx.currency == "KSh"

    def test_offering_ids_independent_of_transaction_ids(self, store, make_draft, make_offering):
        store.add_transaction(make_draft())
        offering = store.add_offering(make_offering())
        assert offering.id == "OFF001"
        assert store.get_transactions()[-1].id == "FTX002"

    def test_zero_total_rejected(self, store, make_offering):
        with pytest.raises(ValidationError):
            store.add_offering(make_offering(offerings=OfferingBreakdown()))
        assert store.get_offerings() == []
        assert store.get_transactions() == []

    def test_negative_bucket_rejected(self, store, make_offering):
        with pytest.raises(ValidationError) as exc_info:
            store.add_offering(make_offering(
                offerings=OfferingBreakdown(tithe=Decimal("100"), youth=Decimal("-1"))
            ))
        assert exc_info.value.field == "offerings.youth"

    def test_latest_offering_by_date(self, store, make_offering):
        assert store.get_latest_offering() is None
        store.add_offering(make_offering(date=date(2024, 1, 28)))
        store.add_offering(make_offering(date=date(2024, 1, 21)))
        assert store.get_latest_offering().date == date(2024, 1, 28)

    def test_latest_offering_tie_takes_last_recorded(self, store, make_offering):
        store.add_offering(make_offering(service_type="First Service"))
        store.add_offering(make_offering(service_type="Second Service"))
        assert store.get_latest_offering().service_type == "Second Service"

    def test_offering_counts_in_summary(self, store, make_offering):
        store.add_offering(make_offering())
        summary = store.get_financial_summary()
        assert summary.offering_total == Decimal("65000")
        assert summary.total_income == Decimal("65000")


# ---------------------------------------------------------------------------
# read side
# ---------------------------------------------------------------------------


class TestQueries:

    @pytest.fixture
    def populated(self, store, make_draft):
        store.add_transaction(make_draft(
            type=TransactionType.INCOME, category="Tithe", amount=Decimal("250000"),
            date=date(2024, 1, 15),
        ))
        store.add_transaction(make_draft(
            module=Module.INVENTORY, category="Equipment", amount=Decimal("150000"),
            payment_method=PaymentMethod.BANK_TRANSFER, date=date(2024, 1, 16),
        ))
        store.add_transaction(make_draft(
            category="Utilities", amount=Decimal("45000"),
            payment_method=PaymentMethod.MOBILE_MONEY, date=date(2024, 2, 1),
        ))
        return store

    def test_by_module(self, populated):
        assert [t.id for t in populated.get_transactions_by_module("Inventory")] == ["FTX002"]

    def test_by_type(self, populated):
        assert [t.id for t in populated.get_transactions_by_type(TransactionType.EXPENSE)] == [
            "FTX002", "FTX003",
        ]

    def test_by_date_range_inclusive(self, populated):
        result = populated.get_transactions_by_date_range(date(2024, 1, 15), date(2024, 1, 16))
        assert [t.id for t in result] == ["FTX001", "FTX002"]

    def test_summary_counts_pending(self, populated):
        summary = populated.get_financial_summary()
        assert summary.total_income == Decimal("250000")
        assert summary.total_expenses == Decimal("195000")
        assert summary.net_income == Decimal("55000")
        assert summary.transaction_count == 3

    def test_summary_range(self, populated):
        summary = populated.get_financial_summary(date(2024, 1, 1), date(2024, 1, 31))
        assert summary.total_expenses == Decimal("150000")

    def test_expense_categories_sorted_unique(self, populated):
        assert populated.get_expense_categories() == ["Equipment", "Utilities"]

    def test_payment_methods(self, populated):
        assert populated.get_payment_methods() == [
            PaymentMethod.BANK_TRANSFER,
            PaymentMethod.CASH,
            PaymentMethod.MOBILE_MONEY,
        ]

    def test_returned_list_is_a_copy(self, populated):
        listing = populated.get_transactions()
        listing.clear()
        assert len(populated.get_transactions()) == 3
