"""
Tests for TransactionJournal -- write-through persistence and restore.

Covers:
- every store mutation lands in the status history
- restore() rebuilds transactions, offerings and the id high-water mark
- ids are not reused after a restart, even when the newest was deleted
- the status history refuses UPDATE and DELETE
- a failed database write leaves the in-memory store unchanged
"""

from dataclasses import replace
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from ledger_kernel.db.engine import session_scope
from ledger_kernel.domain.transaction import TransactionStatus
from ledger_kernel.exceptions import ImmutabilityViolationError
from ledger_kernel.models.ledger import HistoryAction, OfferingRecord, StatusHistoryEntry
from ledger_kernel.services.journal import TransactionJournal
from ledger_kernel.services.notification_relay import NotificationRelay
from ledger_kernel.services.transaction_store import TransactionStore


@pytest.fixture
def reopen(journal, deterministic_clock):
    """Build a second store over the same database, as after a restart."""

    def _reopen() -> TransactionStore:
        fresh = TransactionStore(NotificationRelay(), clock=deterministic_clock, journal=journal)
        fresh.restore()
        return fresh

    return _reopen


class TestHistory:

    def test_lifecycle_is_recorded_in_order(self, journaled_store, journal, gated_draft):
        tx = journaled_store.add_transaction(gated_draft)
        journaled_store.append_note(tx.id, "quote attached", actor="Inventory Manager")
        journaled_store.reject_transaction(tx.id, "Finance Manager", "over budget")

        history = journal.history(tx.id)

        assert [h.action for h in history] == [
            HistoryAction.CREATED,
            HistoryAction.NOTE_APPENDED,
            HistoryAction.STATUS_CHANGED,
        ]
        created, noted, rejected = history
        assert created.to_status == TransactionStatus.PENDING
        assert created.actor == "Inventory Manager"
        assert noted.note == "quote attached"
        assert rejected.from_status == TransactionStatus.PENDING
        assert rejected.to_status == TransactionStatus.REJECTED
        assert rejected.actor == "Finance Manager"
        assert rejected.note == "Rejected: over budget"
        assert created.seq < noted.seq < rejected.seq

    def test_deletion_is_recorded(self, journaled_store, journal, make_draft, deterministic_clock):
        tx = journaled_store.add_transaction(make_draft())
        deterministic_clock.advance(30)
        journaled_store.delete_transaction(tx.id, actor="Admin")

        last = journal.history(tx.id)[-1]
        assert last.action == HistoryAction.DELETED
        assert last.from_status == TransactionStatus.COMPLETED
        assert last.to_status is None
        assert last.actor == "Admin"
        assert last.occurred_at == deterministic_clock.now()

    def test_refused_decision_writes_nothing(self, journaled_store, journal, make_draft):
        tx = journaled_store.add_transaction(make_draft())
        before = journal.history_count()
        journaled_store.approve_transaction(tx.id, "FM")
        assert journal.history_count() == before


class TestRestore:

    def test_round_trip(self, journaled_store, reopen, gated_draft, make_draft, make_offering):
        gated = journaled_store.add_transaction(replace(gated_draft, tags=("audio",)))
        journaled_store.approve_transaction(gated.id, "Finance Manager")
        journaled_store.add_transaction(make_draft(
            amount=Decimal("45000.50"),
            vat_amount=Decimal("7200"),
            external_payment_reference="RKL9A2B3C4",
        ))
        journaled_store.add_offering(make_offering())

        restored = reopen()

        assert restored.get_transactions() == journaled_store.get_transactions()
        assert restored.get_offerings() == journaled_store.get_offerings()
        assert restored.get_financial_summary() == journaled_store.get_financial_summary()

    def test_pending_queue_survives_restart(self, journaled_store, reopen, gated_draft):
        tx = journaled_store.add_transaction(gated_draft)
        restored = reopen()
        assert [t.id for t in restored.get_pending_transactions()] == [tx.id]
        assert restored.approve_transaction(tx.id, "FM") is True

    def test_ids_continue_after_restart(self, journaled_store, reopen, make_draft, make_offering):
        journaled_store.add_transaction(make_draft())
        journaled_store.add_offering(make_offering())
        restored = reopen()
        assert restored.add_transaction(make_draft()).id == "FTX003"
        assert restored.add_offering(make_offering()).id == "OFF002"

    def test_deleted_id_not_reused_after_restart(self, journaled_store, reopen, make_draft):
        journaled_store.add_transaction(make_draft())
        newest = journaled_store.add_transaction(make_draft())
        journaled_store.delete_transaction(newest.id)

        restored = reopen()

        assert [t.id for t in restored.get_transactions()] == ["FTX001"]
        assert restored.add_transaction(make_draft()).id == "FTX003"

    def test_restore_notifies_subscribers(self, journaled_store, journal, deterministic_clock, gated_draft):
        journaled_store.add_transaction(gated_draft)
        relay = NotificationRelay()
        counts = []
        relay.subscribe_to_pending_count(counts.append)
        TransactionStore(relay, clock=deterministic_clock, journal=journal).restore()
        assert counts == [1]

    def test_restore_without_journal(self, store):
        assert store.restore() == 0


class TestImmutableHistory:

    def test_update_refused(self, journaled_store, session_factory, make_draft):
        journaled_store.add_transaction(make_draft())
        with pytest.raises(ImmutabilityViolationError):
            with session_scope(session_factory) as session:
                entry = session.scalars(select(StatusHistoryEntry)).first()
                entry.actor = "someone else"

    def test_delete_refused(self, journaled_store, session_factory, make_draft):
        journaled_store.add_transaction(make_draft())
        with pytest.raises(ImmutabilityViolationError):
            with session_scope(session_factory) as session:
                entry = session.scalars(select(StatusHistoryEntry)).first()
                session.delete(entry)


class SwitchableJournal(TransactionJournal):
    """Journal whose writes raise while ``offline`` is set."""

    offline = False

    def _guard(self):
        if self.offline:
            raise OperationalError("INSERT", {}, Exception("database is locked"))

    def record_created(self, tx):
        self._guard()
        super().record_created(tx)

    def record_status_change(self, tx, from_status, actor=None, note=None):
        self._guard()
        super().record_status_change(tx, from_status, actor=actor, note=note)

    def record_note(self, tx, note, actor=None):
        self._guard()
        super().record_note(tx, note, actor=actor)

    def record_deleted(self, tx, at, actor=None):
        self._guard()
        super().record_deleted(tx, at, actor=actor)

    def record_offering(self, offering, income):
        self._guard()
        super().record_offering(offering, income)


@pytest.fixture
def switchable(session_factory):
    return SwitchableJournal(session_factory)


@pytest.fixture
def fragile_store(relay, deterministic_clock, switchable):
    return TransactionStore(relay, clock=deterministic_clock, journal=switchable)


class TestSequence:

    def test_history_seq_assigned_by_database(self, journaled_store, journal, make_draft, gated_draft):
        journaled_store.add_transaction(make_draft())
        tx = journaled_store.add_transaction(gated_draft)
        journaled_store.approve_transaction(tx.id, "Finance Manager")

        assert [h.seq for h in journal.history()] == [1, 2, 3]


class TestFailedWrites:

    def test_failed_create_changes_nothing(self, fragile_store, switchable, relay, make_draft):
        listings = []
        relay.subscribe(listings.append)
        switchable.offline = True

        with pytest.raises(OperationalError):
            fragile_store.add_transaction(make_draft())

        assert fragile_store.get_transactions() == []
        assert listings == []

        switchable.offline = False
        assert fragile_store.add_transaction(make_draft()).id == "FTX001"

    def test_failed_decision_keeps_pending(self, fragile_store, switchable, gated_draft):
        tx = fragile_store.add_transaction(gated_draft)
        switchable.offline = True

        with pytest.raises(OperationalError):
            fragile_store.approve_transaction(tx.id, "Finance Manager")
        with pytest.raises(OperationalError):
            fragile_store.reject_transaction(tx.id, "Finance Manager", "over budget")

        assert fragile_store.get_transaction(tx.id) == tx
        assert fragile_store.get_pending_transactions() == [tx]

        switchable.offline = False
        assert fragile_store.approve_transaction(tx.id, "Finance Manager") is True

    def test_failed_note_and_delete_change_nothing(self, fragile_store, switchable, make_draft):
        tx = fragile_store.add_transaction(make_draft(notes="routine"))
        switchable.offline = True

        with pytest.raises(OperationalError):
            fragile_store.append_note(tx.id, "receipt attached")
        with pytest.raises(OperationalError):
            fragile_store.delete_transaction(tx.id)
        with pytest.raises(OperationalError):
            fragile_store.set_status(tx.id, TransactionStatus.CANCELLED)

        assert fragile_store.get_transactions() == [tx]

    def test_failed_offering_keeps_id_sequences(self, fragile_store, switchable, make_offering):
        switchable.offline = True
        with pytest.raises(OperationalError):
            fragile_store.add_offering(make_offering())

        assert fragile_store.get_offerings() == []
        assert fragile_store.get_transactions() == []

        switchable.offline = False
        offering = fragile_store.add_offering(make_offering())
        assert offering.id == "OFF001"
        assert [t.id for t in fragile_store.get_transactions()] == ["FTX001"]

    def test_offering_and_income_rows_land_together(
        self, journaled_store, journal, session_factory, deterministic_clock, make_draft, make_offering
    ):
        # A row already holding FTX001 makes the income insert collide
        elsewhere = TransactionStore(NotificationRelay(), clock=deterministic_clock)
        journal.record_created(elsewhere.add_transaction(make_draft()))

        with pytest.raises(IntegrityError):
            journaled_store.add_offering(make_offering())

        assert journaled_store.get_offerings() == []
        assert journaled_store.get_transactions() == []
        with session_scope(session_factory) as session:
            assert session.scalar(select(func.count()).select_from(OfferingRecord)) == 0
