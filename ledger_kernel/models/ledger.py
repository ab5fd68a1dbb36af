"""
Module: ledger_kernel.models.ledger
Responsibility: ORM persistence for transactions, offerings and the
    append-only status history.
Architecture position: Kernel > Models.  May import from db/base.py and the
    exceptions module only.  Conversion to and from domain objects lives in
    services/journal.py.

Invariants enforced:
    - ledger_transactions holds the current state of each live transaction,
      keyed by its business id.
    - ledger_status_history is append-only: the ORM refuses UPDATE and
      DELETE of its rows.
    - seq in ledger_status_history is unique and increasing, giving a total
      order of everything that happened to the ledger.

Audit relevance:
    The status history answers "who moved this transaction, from what, to
    what, and when", including transactions that were later deleted.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import JSON, BigInteger, Boolean, Index, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base
from ledger_kernel.exceptions import ImmutabilityViolationError


class HistoryAction(str, Enum):
    """What happened to a transaction."""

    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    NOTE_APPENDED = "note_appended"
    DELETED = "deleted"


class TransactionRecord(Base):
    """Current state of one ledger transaction."""

    __tablename__ = "ledger_transactions"

    __table_args__ = (
        Index("idx_ledger_tx_module", "module"),
        Index("idx_ledger_tx_status", "status"),
        Index("idx_ledger_tx_date", "date"),
    )

    id: Mapped[str] = mapped_column(String(20), primary_key=True)
    date: Mapped[date]
    type: Mapped[str] = mapped_column(String(20))
    category: Mapped[str] = mapped_column(String(100))
    subcategory: Mapped[str | None] = mapped_column(String(100))
    description: Mapped[str] = mapped_column(Text)
    amount: Mapped[Decimal]
    currency: Mapped[str] = mapped_column(String(10))
    payment_method: Mapped[str] = mapped_column(String(30))
    reference: Mapped[str] = mapped_column(String(100))
    external_payment_reference: Mapped[str | None] = mapped_column(String(100))
    module: Mapped[str] = mapped_column(String(20))
    module_reference: Mapped[str | None] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(20))
    requires_approval: Mapped[bool] = mapped_column(Boolean)
    created_by: Mapped[str] = mapped_column(String(100))
    requested_by: Mapped[str] = mapped_column(String(100))
    approved_by: Mapped[str | None] = mapped_column(String(100))
    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    attachments: Mapped[list] = mapped_column(JSON, default=list)
    vat_amount: Mapped[Decimal | None]
    withholding_tax: Mapped[Decimal | None]
    created_at: Mapped[datetime]
    updated_at: Mapped[datetime]

    def __repr__(self) -> str:
        return f"<TransactionRecord {self.id} {self.status} {self.amount}>"


class OfferingRecord(Base):
    """One recorded service offering."""

    __tablename__ = "ledger_offerings"

    id: Mapped[str] = mapped_column(String(20), primary_key=True)
    date: Mapped[date]
    service_type: Mapped[str] = mapped_column(String(100))
    minister: Mapped[str] = mapped_column(String(100))
    # Breakdown amounts as strings so no precision is lost in JSON
    breakdown: Mapped[dict] = mapped_column(JSON)
    total_amount: Mapped[Decimal]
    collected_by: Mapped[str] = mapped_column(String(100))
    counted_by: Mapped[list] = mapped_column(JSON, default=list)
    deposited: Mapped[bool | None] = mapped_column(Boolean)
    deposit_date: Mapped[date | None]
    bank_slip_number: Mapped[str | None] = mapped_column(String(100))


class StatusHistoryEntry(Base):
    """
    Append-only history row.

    Guarantees:
        - Never updated or deleted once flushed.
        - from_status is None for creation rows; to_status is None for
          deletion rows.
    """

    __tablename__ = "ledger_status_history"

    __table_args__ = (
        Index("idx_ledger_history_tx", "transaction_id"),
    )

    # SQLite only autoincrements an INTEGER PRIMARY KEY (the rowid alias)
    seq: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    transaction_id: Mapped[str] = mapped_column(String(20))
    action: Mapped[str] = mapped_column(String(30))
    from_status: Mapped[str | None] = mapped_column(String(20))
    to_status: Mapped[str | None] = mapped_column(String(20))
    actor: Mapped[str | None] = mapped_column(String(100))
    note: Mapped[str | None] = mapped_column(Text)
    occurred_at: Mapped[datetime]

    def __repr__(self) -> str:
        return (
            f"<StatusHistoryEntry {self.seq} {self.transaction_id} "
            f"{self.action} {self.from_status}->{self.to_status}>"
        )


@event.listens_for(StatusHistoryEntry, "before_update")
def _refuse_history_update(mapper, connection, target):
    raise ImmutabilityViolationError(
        entity_type="StatusHistoryEntry",
        entity_id=str(target.seq),
        reason="status history rows are append-only",
    )


@event.listens_for(StatusHistoryEntry, "before_delete")
def _refuse_history_delete(mapper, connection, target):
    raise ImmutabilityViolationError(
        entity_type="StatusHistoryEntry",
        entity_id=str(target.seq),
        reason="status history rows are append-only",
    )
