"""
TransactionJournal -- durable write-through persistence for the store.

Responsibility:
    Mirrors every store mutation into the database (current transaction
    rows, offering rows, and an append-only status history) and rebuilds
    the store's state from those tables after a restart.

Architecture position:
    Kernel > Services.  Used only by ``TransactionStore``; opens one short
    session per write through the injected session factory.

Invariants enforced:
    - Each write is its own database transaction (session_scope): either
      the row change and its history entry both land, or neither does.
    - ``load()`` reports the highest transaction and offering sequence ever
      issued, deleted ids included, so restored stores never reuse an id.

Failure modes:
    - SQLAlchemy errors propagate to the store caller; the session is
      rolled back first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from ledger_kernel.db.engine import session_scope
from ledger_kernel.domain.ids import (
    OFFERING_ID_PREFIX,
    TRANSACTION_ID_PREFIX,
    parse_id_seq,
)
from ledger_kernel.domain.offering import BankingDetails, Offering, OfferingBreakdown
from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.ledger import (
    HistoryAction,
    OfferingRecord,
    StatusHistoryEntry,
    TransactionRecord,
)

logger = get_logger("services.journal")


@dataclass(frozen=True)
class JournalSnapshot:
    """Everything ``TransactionStore.restore`` needs."""

    transactions: tuple[Transaction, ...] = ()
    offerings: tuple[Offering, ...] = ()
    transaction_seq: int = 0
    offering_seq: int = 0


@dataclass(frozen=True)
class HistoryEntry:
    seq: int
    transaction_id: str
    action: HistoryAction
    from_status: TransactionStatus | None
    to_status: TransactionStatus | None
    actor: str | None
    note: str | None
    occurred_at: datetime


class TransactionJournal:
    """Persists store mutations through a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    # -- writes ---------------------------------------------------------------

    def record_created(self, tx: Transaction) -> None:
        with session_scope(self._session_factory) as session:
            _add_created(session, tx)

    def record_status_change(
        self,
        tx: Transaction,
        from_status: TransactionStatus,
        actor: str | None = None,
        note: str | None = None,
    ) -> None:
        with session_scope(self._session_factory) as session:
            session.merge(_to_record(tx))
            session.add(StatusHistoryEntry(
                transaction_id=tx.id,
                action=HistoryAction.STATUS_CHANGED.value,
                from_status=from_status.value,
                to_status=tx.status.value,
                actor=actor,
                note=note,
                occurred_at=tx.updated_at,
            ))

    def record_note(self, tx: Transaction, note: str, actor: str | None = None) -> None:
        with session_scope(self._session_factory) as session:
            session.merge(_to_record(tx))
            session.add(StatusHistoryEntry(
                transaction_id=tx.id,
                action=HistoryAction.NOTE_APPENDED.value,
                from_status=tx.status.value,
                to_status=tx.status.value,
                actor=actor,
                note=note,
                occurred_at=tx.updated_at,
            ))

    def record_deleted(
        self,
        tx: Transaction,
        at: datetime,
        actor: str | None = None,
    ) -> None:
        with session_scope(self._session_factory) as session:
            record = session.get(TransactionRecord, tx.id)
            if record is not None:
                session.delete(record)
            session.add(StatusHistoryEntry(
                transaction_id=tx.id,
                action=HistoryAction.DELETED.value,
                from_status=tx.status.value,
                to_status=None,
                actor=actor,
                note=None,
                occurred_at=at,
            ))

    def record_offering(self, offering: Offering, income: Transaction) -> None:
        """Offering row and its income transaction, in one database transaction."""
        banking = offering.banking_details
        with session_scope(self._session_factory) as session:
            session.add(OfferingRecord(
                id=offering.id,
                date=offering.date,
                service_type=offering.service_type,
                minister=offering.minister,
                breakdown={k: str(v) for k, v in offering.offerings.as_dict().items()},
                total_amount=offering.total_amount,
                collected_by=offering.collected_by,
                counted_by=list(offering.counted_by),
                deposited=banking.deposited if banking else None,
                deposit_date=banking.deposit_date if banking else None,
                bank_slip_number=banking.bank_slip_number if banking else None,
            ))
            _add_created(session, income)

    # -- reads ----------------------------------------------------------------

    def load(self) -> JournalSnapshot:
        """Rebuild transactions, offerings and id high-water marks."""
        with session_scope(self._session_factory) as session:
            tx_rows = session.scalars(select(TransactionRecord)).all()
            offering_rows = session.scalars(select(OfferingRecord)).all()
            history_ids = session.scalars(
                select(StatusHistoryEntry.transaction_id).distinct()
            ).all()
            transactions = sorted(
                (_from_record(row) for row in tx_rows),
                key=lambda tx: parse_id_seq(TRANSACTION_ID_PREFIX, tx.id),
            )
            offerings = sorted(
                (_offering_from_record(row) for row in offering_rows),
                key=lambda o: parse_id_seq(OFFERING_ID_PREFIX, o.id),
            )

        known_ids = set(history_ids) | {tx.id for tx in transactions}
        transaction_seq = max(
            (parse_id_seq(TRANSACTION_ID_PREFIX, i) for i in known_ids),
            default=0,
        )
        offering_seq = max(
            (parse_id_seq(OFFERING_ID_PREFIX, o.id) for o in offerings),
            default=0,
        )
        logger.info(
            "journal_loaded",
            extra={
                "transaction_count": len(transactions),
                "offering_count": len(offerings),
                "transaction_seq": transaction_seq,
            },
        )
        return JournalSnapshot(
            transactions=tuple(transactions),
            offerings=tuple(offerings),
            transaction_seq=transaction_seq,
            offering_seq=offering_seq,
        )

    def history(self, transaction_id: str | None = None) -> list[HistoryEntry]:
        """Status history in sequence order, optionally for one transaction."""
        stmt = select(StatusHistoryEntry).order_by(StatusHistoryEntry.seq)
        if transaction_id is not None:
            stmt = stmt.where(StatusHistoryEntry.transaction_id == transaction_id)
        with session_scope(self._session_factory) as session:
            return [
                HistoryEntry(
                    seq=row.seq,
                    transaction_id=row.transaction_id,
                    action=HistoryAction(row.action),
                    from_status=_status_or_none(row.from_status),
                    to_status=_status_or_none(row.to_status),
                    actor=row.actor,
                    note=row.note,
                    occurred_at=_aware(row.occurred_at),
                )
                for row in session.scalars(stmt)
            ]

    def history_count(self) -> int:
        with session_scope(self._session_factory) as session:
            return session.scalar(select(func.count()).select_from(StatusHistoryEntry))


def _add_created(session: Session, tx: Transaction) -> None:
    session.add(_to_record(tx))
    session.add(StatusHistoryEntry(
        transaction_id=tx.id,
        action=HistoryAction.CREATED.value,
        from_status=None,
        to_status=tx.status.value,
        actor=tx.created_by,
        note=None,
        occurred_at=tx.created_at,
    ))


def _status_or_none(value: str | None) -> TransactionStatus | None:
    return TransactionStatus(value) if value is not None else None


def _to_record(tx: Transaction) -> TransactionRecord:
    return TransactionRecord(
        id=tx.id,
        date=tx.date,
        type=tx.type.value,
        category=tx.category,
        subcategory=tx.subcategory,
        description=tx.description,
        amount=tx.amount,
        currency=tx.currency,
        payment_method=tx.payment_method.value,
        reference=tx.reference,
        external_payment_reference=tx.external_payment_reference,
        module=tx.module.value,
        module_reference=tx.module_reference,
        status=tx.status.value,
        requires_approval=tx.requires_approval,
        created_by=tx.created_by,
        requested_by=tx.requested_by,
        approved_by=tx.approved_by,
        notes=tx.notes,
        tags=list(tx.tags),
        attachments=list(tx.attachments),
        vat_amount=tx.vat_amount,
        withholding_tax=tx.withholding_tax,
        created_at=tx.created_at,
        updated_at=tx.updated_at,
    )


def _money(value: Decimal | None) -> Decimal | None:
    # Numeric(38, 9) comes back padded with trailing zeros
    if value is None:
        return None
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return normalized.quantize(Decimal(1))
    return normalized


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything the ledger stores is UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _from_record(row: TransactionRecord) -> Transaction:
    return Transaction(
        id=row.id,
        date=row.date,
        type=TransactionType(row.type),
        category=row.category,
        subcategory=row.subcategory,
        description=row.description,
        amount=_money(row.amount),
        currency=row.currency,
        payment_method=PaymentMethod(row.payment_method),
        reference=row.reference,
        external_payment_reference=row.external_payment_reference,
        module=Module(row.module),
        module_reference=row.module_reference,
        status=TransactionStatus(row.status),
        requires_approval=row.requires_approval,
        created_by=row.created_by,
        requested_by=row.requested_by,
        approved_by=row.approved_by,
        notes=row.notes,
        tags=tuple(row.tags or ()),
        attachments=tuple(row.attachments or ()),
        vat_amount=_money(row.vat_amount),
        withholding_tax=_money(row.withholding_tax),
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _offering_from_record(row: OfferingRecord) -> Offering:
    banking = None
    if row.deposited is not None:
        banking = BankingDetails(
            deposited=row.deposited,
            deposit_date=row.deposit_date,
            bank_slip_number=row.bank_slip_number,
        )
    return Offering(
        id=row.id,
        date=row.date,
        service_type=row.service_type,
        minister=row.minister,
        offerings=OfferingBreakdown(
            **{k: Decimal(v) for k, v in row.breakdown.items()}
        ),
        total_amount=_money(row.total_amount),
        collected_by=row.collected_by,
        counted_by=tuple(row.counted_by or ()),
        banking_details=banking,
    )
