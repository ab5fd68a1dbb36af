"""
Pure domain layer.

This module contains pure value objects and domain logic with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from ledger_kernel.domain.approval import (
    APPROVAL_THRESHOLD,
    APPROVAL_DECISIONS,
    STATUS_TRANSITIONS,
    can_transition,
    initial_status,
    requires_approval,
)
from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.notifications import Notification, NotificationType
from ledger_kernel.domain.offering import (
    BankingDetails,
    Offering,
    OfferingBreakdown,
    OfferingDraft,
)
from ledger_kernel.domain.summary import FinancialSummary, summarize
from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    Transaction,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
)

__all__ = [
    "APPROVAL_DECISIONS",
    "APPROVAL_THRESHOLD",
    "BankingDetails",
    "Clock",
    "DeterministicClock",
    "FinancialSummary",
    "Module",
    "Notification",
    "NotificationType",
    "Offering",
    "OfferingBreakdown",
    "OfferingDraft",
    "PaymentMethod",
    "STATUS_TRANSITIONS",
    "SystemClock",
    "Transaction",
    "TransactionDraft",
    "TransactionStatus",
    "TransactionType",
    "can_transition",
    "initial_status",
    "requires_approval",
    "summarize",
]
