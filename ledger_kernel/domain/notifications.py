"""
Notification events emitted by the transaction store.

Three kinds reach notification subscribers: a gated transaction needs
approval, a pending transaction was approved, or it was rejected.  The
builders here fix the titles and message wording the reviewer UI shows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from ledger_kernel.domain.transaction import Module, Transaction


class NotificationType(str, Enum):
    APPROVAL_REQUIRED = "approval_required"
    TRANSACTION_APPROVED = "transaction_approved"
    TRANSACTION_REJECTED = "transaction_rejected"


@dataclass(frozen=True)
class Notification:
    """Structured event delivered to notification subscribers."""

    id: str
    type: NotificationType
    title: str
    message: str
    transaction_id: str
    timestamp: datetime
    amount: Decimal | None = None
    module: Module | None = None
    reason: str | None = None


def _notification_id(kind: str) -> str:
    return f"{kind}_{uuid4().hex}"


def approval_required(transaction: Transaction, at: datetime) -> Notification:
    return Notification(
        id=_notification_id("notification"),
        type=NotificationType.APPROVAL_REQUIRED,
        title="Transaction Approval Required",
        message=(
            f"{transaction.module.value} module requests approval for "
            f"{transaction.type.value.lower()}: {transaction.description}"
        ),
        transaction_id=transaction.id,
        timestamp=at,
        amount=transaction.amount,
        module=transaction.module,
    )


def transaction_approved(
    transaction: Transaction,
    approved_by: str,
    at: datetime,
) -> Notification:
    return Notification(
        id=_notification_id("approval"),
        type=NotificationType.TRANSACTION_APPROVED,
        title="Transaction Approved",
        message=f"Transaction {transaction.id} has been approved by {approved_by}",
        transaction_id=transaction.id,
        timestamp=at,
        amount=transaction.amount,
        module=transaction.module,
    )


def transaction_rejected(
    transaction: Transaction,
    rejected_by: str,
    reason: str,
    at: datetime,
) -> Notification:
    return Notification(
        id=_notification_id("rejection"),
        type=NotificationType.TRANSACTION_REJECTED,
        title="Transaction Rejected",
        message=(
            f"Transaction {transaction.id} has been rejected by "
            f"{rejected_by}: {reason}"
        ),
        transaction_id=transaction.id,
        timestamp=at,
        amount=transaction.amount,
        module=transaction.module,
        reason=reason,
    )
