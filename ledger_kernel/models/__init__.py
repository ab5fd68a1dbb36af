"""ORM models for the durable ledger journal."""

from ledger_kernel.models.ledger import (
    HistoryAction,
    OfferingRecord,
    StatusHistoryEntry,
    TransactionRecord,
)

__all__ = [
    "HistoryAction",
    "OfferingRecord",
    "StatusHistoryEntry",
    "TransactionRecord",
]
