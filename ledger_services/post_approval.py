"""
PostApprovalCoordinator -- routes finance decisions back to their modules.

Responsibility:
    Listens to the notification relay for ``transaction_approved`` and
    ``transaction_rejected`` and turns each into the matching cross-module
    topic message:

    ==========================  ======================  ===================
    Transaction                 Approved                Rejected
    ==========================  ======================  ===================
    Welfare, module_reference   welfare.completion      welfare.rejection
    Procurement / LPO           lpo.approval            lpo.rejection
    HR, category Payroll        hr.disbursement         hr.rejection
    ==========================  ======================  ===================

    An approved LPO is also promoted to Completed: the approved ledger
    entry is the LPO's expense record, so no second expense is created.

Architecture position:
    Services layer.  Registered as an ordinary notification subscriber by
    ``ledger_services.bootstrap``; the store knows nothing about it.

Failure modes:
    - Bus errors while publishing are logged.  The approval itself is
      authoritative and is never rolled back; delivery to module consumers
      is retried by the bus.
"""

from __future__ import annotations

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.notifications import Notification, NotificationType
from ledger_kernel.domain.topics import (
    HR_DISBURSEMENT,
    HR_REJECTION,
    LPO_APPROVAL,
    LPO_REJECTION,
    WELFARE_COMPLETION,
    WELFARE_REJECTION,
    HrDisbursement,
    HrRejection,
    LpoApproval,
    LpoRejection,
    Topic,
    TopicPayload,
    WelfareCompletion,
    WelfareRejection,
)
from ledger_kernel.domain.transaction import Module, Transaction, TransactionStatus
from ledger_kernel.exceptions import LedgerError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.services.event_bus import EventBus
from ledger_kernel.services.notification_relay import NotificationRelay
from ledger_kernel.services.transaction_store import TransactionStore
from ledger_modules.payroll.adapters import PAYROLL_CATEGORY
from ledger_modules.procurement.adapters import is_lpo_transaction

logger = get_logger("services.post_approval")

NO_REASON = "No reason provided"


def _is_payroll(tx: Transaction) -> bool:
    return tx.module == Module.HR and tx.category == PAYROLL_CATEGORY


class PostApprovalCoordinator:
    """Publishes module-facing topics for approval outcomes."""

    def __init__(
        self,
        store: TransactionStore,
        bus: EventBus,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._bus = bus
        self._clock = clock or SystemClock()

    def attach(self, relay: NotificationRelay) -> None:
        relay.subscribe_to_notifications(self.handle)

    def detach(self, relay: NotificationRelay) -> None:
        relay.unsubscribe_from_notifications(self.handle)

    def handle(self, notification: Notification) -> None:
        if notification.type == NotificationType.APPROVAL_REQUIRED:
            return
        tx = self._store.get_transaction(notification.transaction_id)
        if tx is None:
            logger.warning(
                "decided_transaction_missing",
                extra={"transaction_id": notification.transaction_id},
            )
            return
        with LogContext.bind(
            transaction_id=tx.id,
            actor=tx.approved_by,
            module=tx.module.value,
        ):
            if notification.type == NotificationType.TRANSACTION_APPROVED:
                self._on_approved(tx)
            else:
                self._on_rejected(tx, notification.reason or NO_REASON)

    # -- approved -------------------------------------------------------------

    def _on_approved(self, tx: Transaction) -> None:
        actor = tx.approved_by or ""
        now = self._clock.now()
        if tx.module == Module.WELFARE and tx.module_reference:
            self._publish(WELFARE_COMPLETION, WelfareCompletion(
                transaction_id=tx.id,
                module=tx.module,
                amount=tx.amount,
                actor=actor,
                occurred_at=now,
                welfare_application_id=tx.module_reference,
                payment_method=tx.payment_method,
                disbursement_date=now.date(),
            ))
        elif is_lpo_transaction(tx):
            self._store.update_transaction_status(
                tx.id, TransactionStatus.COMPLETED, approved_by=actor
            )
            self._publish(LPO_APPROVAL, LpoApproval(
                transaction_id=tx.id,
                module=tx.module,
                amount=tx.amount,
                actor=actor,
                occurred_at=now,
                lpo_id=tx.module_reference,
                expense_transaction_id=tx.id,
            ))
        elif _is_payroll(tx):
            self._publish(HR_DISBURSEMENT, HrDisbursement(
                transaction_id=tx.id,
                module=tx.module,
                amount=tx.amount,
                actor=actor,
                occurred_at=now,
                batch_id=tx.module_reference or tx.reference,
                period=now.strftime("%Y-%m"),
                disbursement_method=tx.payment_method,
                disbursement_date=now.date(),
                notes=tx.notes,
            ))

    # -- rejected -------------------------------------------------------------

    def _on_rejected(self, tx: Transaction, reason: str) -> None:
        actor = tx.approved_by or ""
        now = self._clock.now()
        if tx.module == Module.WELFARE and tx.module_reference:
            self._publish(WELFARE_REJECTION, WelfareRejection(
                transaction_id=tx.id,
                module=tx.module,
                amount=tx.amount,
                actor=actor,
                occurred_at=now,
                welfare_application_id=tx.module_reference,
                reason=reason,
            ))
        elif is_lpo_transaction(tx):
            self._publish(LPO_REJECTION, LpoRejection(
                transaction_id=tx.id,
                module=tx.module,
                amount=tx.amount,
                actor=actor,
                occurred_at=now,
                lpo_id=tx.module_reference,
                reason=reason,
            ))
        elif _is_payroll(tx):
            self._publish(HR_REJECTION, HrRejection(
                transaction_id=tx.id,
                module=tx.module,
                amount=tx.amount,
                actor=actor,
                occurred_at=now,
                batch_id=tx.module_reference or tx.reference,
                period=now.strftime("%Y-%m"),
                reason=reason,
            ))

    def _publish(self, topic: Topic, payload: TopicPayload) -> None:
        try:
            self._bus.publish(topic, payload)
        except LedgerError:
            logger.error(
                "post_approval_publish_failed",
                exc_info=True,
                extra={"topic": topic.name},
            )
