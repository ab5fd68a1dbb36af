"""
TransactionStore -- the single authoritative ledger of the process.

Responsibility:
    Records every monetary movement from every module, classifies each one
    through the approval gate, keeps the reviewer's pending queue, applies
    approve / reject decisions and status updates, records service
    offerings, and answers the read-side queries (lists, filters,
    summary).

Architecture position:
    Kernel > Services.  Constructed once by ``ledger_services.bootstrap``
    and injected everywhere it is needed; there is no module-level
    instance.  Depends on the pure domain layer, the notification relay
    and, optionally, the durable journal.

Invariants enforced:
    - ``requires_approval`` is computed once, at creation, by
      ``domain.approval.requires_approval``.
    - A gated transaction starts Pending; approve / reject only act on
      Pending records, and no transition ever returns to Pending.
    - Transaction ids are sequential (FTX001, FTX002, ...) and never
      reused, even after deletion.
    - Amount and description never change after creation.  Notes may be
      appended; status and approver change only through the lifecycle.
    - Records handed to callers are frozen; every list returned is new.

Concurrency:
    One re-entrant lock serializes every mutation.  Approve and reject do
    their check-and-set under it, so concurrent decisions on one id have
    exactly one winner.  Subscribers are notified after the lock is
    released, with the snapshot taken under it.

Failure modes:
    - ValidationError from ``add_transaction`` / ``add_offering`` on a
      malformed draft.  Nothing is stored.
    - approve / reject / update / append / delete return False for an
      unknown id or a disallowed transition; they never raise for those.
    - ``set_status`` is the raising variant (TransactionNotFoundError,
      InvalidStatusTransitionError).
    - A journal write that raises propagates before anything in memory
      changes: no record, no consumed id, no notification.

Audit relevance:
    With a journal attached every creation, status change, note append
    and deletion is written to the append-only status history before
    subscribers hear about it.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime
from typing import TYPE_CHECKING

from ledger_kernel.domain import notifications
from ledger_kernel.domain.approval import (
    can_transition,
    initial_status,
    requires_approval,
)
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.ids import (
    OFFERING_ID_PREFIX,
    TRANSACTION_ID_PREFIX,
    format_id,
)
from ledger_kernel.domain.notifications import Notification
from ledger_kernel.domain.offering import (
    Offering,
    OfferingBreakdown,
    OfferingDraft,
    build_offering_income,
)
from ledger_kernel.domain.summary import FinancialSummary, in_range, summarize
from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    Transaction,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
)
from ledger_kernel.domain.validation import coerce_amount, coerce_enum, validate_draft
from ledger_kernel.exceptions import (
    InvalidStatusTransitionError,
    TransactionNotFoundError,
    ValidationError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.services.notification_relay import NotificationRelay

if TYPE_CHECKING:
    from ledger_kernel.services.journal import TransactionJournal

logger = get_logger("services.transaction_store")

NOTE_SEPARATOR = " | "


def _join_note(existing: str | None, note: str) -> str:
    return f"{existing}{NOTE_SEPARATOR}{note}" if existing else note


class TransactionStore:
    """Process-wide ledger of transactions and offerings."""

    def __init__(
        self,
        relay: NotificationRelay,
        clock: Clock | None = None,
        journal: TransactionJournal | None = None,
        currency: str = "KSh",
    ) -> None:
        self._relay = relay
        self._clock = clock or SystemClock()
        self._journal = journal
        self._currency = currency
        self._lock = threading.RLock()
        self._transactions: list[Transaction] = []
        self._offerings: list[Offering] = []
        self._transaction_seq = 0
        self._offering_seq = 0

    @property
    def relay(self) -> NotificationRelay:
        return self._relay

    @property
    def currency(self) -> str:
        return self._currency

    # -- restore --------------------------------------------------------------

    def restore(self) -> int:
        """Reload state from the attached journal.

        Returns the number of transactions restored.  Subscribers are
        notified once with the restored list.
        """
        if self._journal is None:
            return 0
        snapshot = self._journal.load()
        with self._lock:
            self._transactions = list(snapshot.transactions)
            self._offerings = list(snapshot.offerings)
            self._transaction_seq = max(self._transaction_seq, snapshot.transaction_seq)
            self._offering_seq = max(self._offering_seq, snapshot.offering_seq)
            listing, pending = self._snapshot()
        logger.info(
            "ledger_restored",
            extra={
                "transaction_count": len(listing),
                "offering_count": len(snapshot.offerings),
                "pending_count": pending,
                "next_transaction_seq": self._transaction_seq + 1,
            },
        )
        self._relay.publish_transactions(listing, pending)
        return len(listing)

    # -- writes ---------------------------------------------------------------

    def add_transaction(self, draft: TransactionDraft) -> Transaction:
        """Validate, gate and record a transaction."""
        draft = validate_draft(draft)
        with self._lock:
            tx = self._new_transaction(draft, self._transaction_seq + 1)
            if self._journal is not None:
                self._journal.record_created(tx)
            self._transaction_seq += 1
            self._transactions.append(tx)
            listing, pending = self._snapshot()
        self._announce_created(tx, listing, pending)
        return tx

    def approve_transaction(self, transaction_id: str, approved_by: str) -> bool:
        """Approve a pending transaction.  False if unknown or not pending."""
        return self._decide(
            transaction_id,
            TransactionStatus.APPROVED,
            approved_by,
            note=None,
            build=lambda tx, at: notifications.transaction_approved(
                tx, approved_by, at
            ),
        )

    def reject_transaction(
        self,
        transaction_id: str,
        rejected_by: str,
        reason: str,
    ) -> bool:
        """Reject a pending transaction, recording the reason in its notes."""
        return self._decide(
            transaction_id,
            TransactionStatus.REJECTED,
            rejected_by,
            note=f"Rejected: {reason}",
            build=lambda tx, at: notifications.transaction_rejected(
                tx, rejected_by, reason, at
            ),
        )

    def set_status(
        self,
        transaction_id: str,
        status: TransactionStatus | str,
        approved_by: str | None = None,
    ) -> Transaction:
        """Move a transaction along the lifecycle or raise.

        ``approved_by`` is recorded only when the record leaves Pending.
        """
        target = coerce_enum(TransactionStatus, status, "status")
        with self._lock:
            index, current = self._require(transaction_id)
            if not can_transition(current.status, target):
                raise InvalidStatusTransitionError(
                    transaction_id, current.status.value, target.value
                )
            changes: dict[str, object] = {
                "status": target,
                "updated_at": self._clock.now(),
            }
            if approved_by and current.status == TransactionStatus.PENDING:
                changes["approved_by"] = approved_by
            updated = replace(current, **changes)
            if self._journal is not None:
                self._journal.record_status_change(
                    updated, current.status, actor=approved_by
                )
            self._transactions[index] = updated
            listing, pending = self._snapshot()

        with LogContext.bind(transaction_id=transaction_id, actor=approved_by):
            logger.info(
                "transaction_status_updated",
                extra={
                    "from_status": current.status.value,
                    "to_status": target.value,
                },
            )
        self._relay.publish_transactions(listing, pending)
        return updated

    def update_transaction_status(
        self,
        transaction_id: str,
        status: TransactionStatus | str,
        approved_by: str | None = None,
    ) -> bool:
        """Boolean form of :meth:`set_status`."""
        try:
            self.set_status(transaction_id, status, approved_by)
        except (TransactionNotFoundError, InvalidStatusTransitionError) as exc:
            logger.warning(
                "transaction_status_update_refused",
                extra={"transaction_id": transaction_id, "reason": exc.code},
            )
            return False
        return True

    def append_note(self, transaction_id: str, note: str, actor: str | None = None) -> bool:
        if not note or not note.strip():
            raise ValidationError("note", "must not be empty")
        with self._lock:
            found = self._find(transaction_id)
            if found is None:
                return False
            index, current = found
            updated = replace(
                current,
                notes=_join_note(current.notes, note),
                updated_at=self._clock.now(),
            )
            if self._journal is not None:
                self._journal.record_note(updated, note, actor=actor)
            self._transactions[index] = updated
            listing, pending = self._snapshot()
        self._relay.publish_transactions(listing, pending)
        return True

    def delete_transaction(self, transaction_id: str, actor: str | None = None) -> bool:
        with self._lock:
            found = self._find(transaction_id)
            if found is None:
                return False
            index, removed = found
            if self._journal is not None:
                self._journal.record_deleted(removed, self._clock.now(), actor=actor)
            del self._transactions[index]
            listing, pending = self._snapshot()

        with LogContext.bind(transaction_id=transaction_id, actor=actor):
            logger.info(
                "transaction_deleted",
                extra={"status": removed.status.value, "amount": removed.amount},
            )
        self._relay.publish_transactions(listing, pending)
        return True

    # -- offerings ------------------------------------------------------------

    def add_offering(self, draft: OfferingDraft) -> Offering:
        """Record a service offering and its single Income transaction.

        Both land together or not at all: the journal writes the offering
        row and the income row in one database transaction.
        """
        draft = _validate_offering(draft)
        with self._lock:
            offering = Offering.from_draft(
                format_id(OFFERING_ID_PREFIX, self._offering_seq + 1), draft
            )
            income = self._new_transaction(
                validate_draft(build_offering_income(offering, self._currency)),
                self._transaction_seq + 1,
            )
            if self._journal is not None:
                self._journal.record_offering(offering, income)
            self._offering_seq += 1
            self._offerings.append(offering)
            self._transaction_seq += 1
            self._transactions.append(income)
            listing, pending = self._snapshot()

        self._announce_created(income, listing, pending)
        logger.info(
            "offering_recorded",
            extra={
                "offering_id": offering.id,
                "service_type": offering.service_type,
                "total_amount": offering.total_amount,
                "transaction_id": income.id,
            },
        )
        return offering

    def get_offerings(self) -> list[Offering]:
        with self._lock:
            return list(self._offerings)

    def get_latest_offering(self) -> Offering | None:
        """Most recent offering by service date (latest recorded on ties)."""
        with self._lock:
            if not self._offerings:
                return None
            # max() keeps the first maximum; walk newest-first for ties
            return max(reversed(self._offerings), key=lambda o: o.date)

    # -- reads ----------------------------------------------------------------

    def get_transaction(self, transaction_id: str) -> Transaction | None:
        with self._lock:
            found = self._find(transaction_id)
        return found[1] if found else None

    def get_transactions(self) -> list[Transaction]:
        with self._lock:
            return list(self._transactions)

    def get_transactions_by_module(self, module: Module | str) -> list[Transaction]:
        wanted = coerce_enum(Module, module, "module")
        return [tx for tx in self.get_transactions() if tx.module == wanted]

    def get_transactions_by_type(
        self, transaction_type: TransactionType | str
    ) -> list[Transaction]:
        wanted = coerce_enum(TransactionType, transaction_type, "type")
        return [tx for tx in self.get_transactions() if tx.type == wanted]

    def get_transactions_by_date_range(self, start: date, end: date) -> list[Transaction]:
        """Transactions dated within ``[start, end]``."""
        return [tx for tx in self.get_transactions() if start <= tx.date <= end]

    def get_pending_transactions(self) -> list[Transaction]:
        return [tx for tx in self.get_transactions() if tx.is_pending_approval]

    def get_financial_summary(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> FinancialSummary:
        with self._lock:
            transactions = list(self._transactions)
            offerings = list(self._offerings)
        return summarize(transactions, offerings, start, end)

    def get_expense_categories(self) -> list[str]:
        return sorted({
            tx.category
            for tx in self.get_transactions()
            if tx.type == TransactionType.EXPENSE
        })

    def get_payment_methods(self) -> list[PaymentMethod]:
        return sorted(
            {tx.payment_method for tx in self.get_transactions()},
            key=lambda m: m.value,
        )

    def get_transactions_in_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Transaction]:
        """Like ``get_transactions_by_date_range`` but either bound may be open.

        Used by the summary and listing endpoints, where a range applies
        only when both ends are given.
        """
        return [tx for tx in self.get_transactions() if in_range(tx.date, start, end)]

    # -- internals ------------------------------------------------------------

    def _decide(
        self,
        transaction_id: str,
        target: TransactionStatus,
        actor: str,
        note: str | None,
        build: Callable[[Transaction, datetime], Notification],
    ) -> bool:
        with self._lock:
            found = self._find(transaction_id)
            if found is None or found[1].status != TransactionStatus.PENDING:
                outcome = "not_found" if found is None else found[1].status.value
                decided = None
            else:
                index, current = found
                now = self._clock.now()
                changes: dict[str, object] = {
                    "status": target,
                    "approved_by": actor,
                    "updated_at": now,
                }
                if note is not None:
                    changes["notes"] = _join_note(current.notes, note)
                decided = replace(current, **changes)
                if self._journal is not None:
                    self._journal.record_status_change(
                        decided, current.status, actor=actor, note=note
                    )
                self._transactions[index] = decided
                listing, pending = self._snapshot()

        with LogContext.bind(transaction_id=transaction_id, actor=actor):
            if decided is None:
                logger.warning(
                    "approval_decision_refused",
                    extra={"decision": target.value, "current": outcome},
                )
                return False
            logger.info(
                "approval_decision_recorded",
                extra={
                    "decision": target.value,
                    "amount": decided.amount,
                    "source_module": decided.module.value,
                },
            )

        # List first: notification handlers may move the record on again
        self._relay.publish_transactions(listing, pending)
        self._relay.publish_notification(build(decided, self._clock.now()))
        return True

    def _new_transaction(self, draft: TransactionDraft, seq: int) -> Transaction:
        """Gate a validated draft and build the record it becomes."""
        gated = requires_approval(draft.module, draft.amount)
        now = self._clock.now()
        return Transaction(
            id=format_id(TRANSACTION_ID_PREFIX, seq),
            date=draft.date,
            type=draft.type,
            category=draft.category,
            subcategory=draft.subcategory,
            description=draft.description,
            amount=draft.amount,
            currency=draft.currency,
            payment_method=draft.payment_method,
            reference=draft.reference,
            external_payment_reference=draft.external_payment_reference,
            module=draft.module,
            module_reference=draft.module_reference,
            status=initial_status(gated, draft.status),
            created_by=draft.created_by,
            requested_by=draft.requested_by or draft.created_by,
            requires_approval=gated,
            notes=draft.notes,
            tags=tuple(draft.tags),
            attachments=tuple(draft.attachments),
            vat_amount=draft.vat_amount,
            withholding_tax=draft.withholding_tax,
            created_at=now,
            updated_at=now,
        )

    def _announce_created(
        self,
        tx: Transaction,
        listing: list[Transaction],
        pending: int,
    ) -> None:
        with LogContext.bind(
            transaction_id=tx.id,
            actor=tx.created_by,
            module=tx.module.value,
        ):
            logger.info(
                "transaction_recorded",
                extra={
                    "amount": tx.amount,
                    "transaction_type": tx.type.value,
                    "category": tx.category,
                    "status": tx.status.value,
                    "requires_approval": tx.requires_approval,
                },
            )
        self._relay.publish_transactions(listing, pending)
        if tx.is_pending_approval:
            self._relay.publish_notification(
                notifications.approval_required(tx, self._clock.now())
            )

    def _find(self, transaction_id: str) -> tuple[int, Transaction] | None:
        for index, tx in enumerate(self._transactions):
            if tx.id == transaction_id:
                return index, tx
        return None

    def _require(self, transaction_id: str) -> tuple[int, Transaction]:
        found = self._find(transaction_id)
        if found is None:
            raise TransactionNotFoundError(transaction_id)
        return found

    def _snapshot(self) -> tuple[list[Transaction], int]:
        listing = list(self._transactions)
        return listing, sum(1 for tx in listing if tx.is_pending_approval)


def _validate_offering(draft: OfferingDraft) -> OfferingDraft:
    """Check an offering draft and return it with Decimal amounts."""
    for name in ("service_type", "minister", "collected_by"):
        value = getattr(draft, name)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(name, "must not be empty")
    amounts = {}
    for name, value in draft.offerings.as_dict().items():
        amount = coerce_amount(value, f"offerings.{name}")
        if amount < 0:
            raise ValidationError(f"offerings.{name}", "must not be negative")
        amounts[name] = amount
    breakdown = OfferingBreakdown(**amounts)
    if breakdown.total() <= 0:
        raise ValidationError("offerings", "total must be greater than zero")
    return replace(draft, offerings=breakdown, counted_by=tuple(draft.counted_by))
