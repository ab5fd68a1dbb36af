"""Kernel services: the transaction store and its collaborators."""

from ledger_kernel.services.event_bus import EventBus, IdempotentConsumer
from ledger_kernel.services.journal import TransactionJournal
from ledger_kernel.services.notification_relay import NotificationRelay
from ledger_kernel.services.transaction_store import TransactionStore

__all__ = [
    "EventBus",
    "IdempotentConsumer",
    "NotificationRelay",
    "TransactionJournal",
    "TransactionStore",
]
