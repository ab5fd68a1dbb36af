"""
Welfare-side consumer of finance decisions.

Keeps the welfare office's applications and applies
``welfare.completion`` / ``welfare.rejection`` messages to them.  Both
handlers are wrapped in ``IdempotentConsumer`` so a redelivered message
leaves the application as the first delivery did.
"""

from __future__ import annotations

from dataclasses import replace

from ledger_kernel.domain.topics import (
    WELFARE_COMPLETION,
    WELFARE_REJECTION,
    WelfareCompletion,
    WelfareRejection,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.event_bus import EventBus, IdempotentConsumer
from ledger_modules.welfare.models import (
    Disbursement,
    WelfareApplication,
    WelfareStatus,
)

logger = get_logger("modules.welfare.consumers")


class WelfareApplications:
    """In-memory register of welfare applications."""

    def __init__(self) -> None:
        self._applications: dict[str, WelfareApplication] = {}

    def register(self, application: WelfareApplication) -> WelfareApplication:
        self._applications[application.id] = application
        return application

    def mark_submitted_to_finance(
        self, application_id: str, transaction_id: str
    ) -> WelfareApplication | None:
        current = self._applications.get(application_id)
        if current is None:
            return None
        updated = replace(
            current,
            status=WelfareStatus.AWAITING_FINANCE,
            transaction_id=transaction_id,
        )
        self._applications[application_id] = updated
        return updated

    def get(self, application_id: str) -> WelfareApplication | None:
        return self._applications.get(application_id)

    def all(self) -> list[WelfareApplication]:
        return list(self._applications.values())

    def bind(self, bus: EventBus) -> None:
        """Subscribe this register to the welfare topics on ``bus``."""
        bus.subscribe(
            WELFARE_COMPLETION,
            IdempotentConsumer(WELFARE_COMPLETION, self.on_completion),
        )
        bus.subscribe(
            WELFARE_REJECTION,
            IdempotentConsumer(WELFARE_REJECTION, self.on_rejection),
        )

    def on_completion(self, payload: WelfareCompletion) -> None:
        current = self._lookup(payload.welfare_application_id, "completion")
        if current is None:
            return
        self._applications[current.id] = replace(
            current,
            status=WelfareStatus.COMPLETED,
            transaction_id=payload.transaction_id,
            disbursement=Disbursement(
                method=payload.payment_method,
                amount=payload.amount,
                approved_by=payload.actor,
                disbursement_date=payload.disbursement_date,
            ),
        )
        logger.info(
            "welfare_application_completed",
            extra={
                "application_id": current.id,
                "transaction_id": payload.transaction_id,
                "amount": payload.amount,
            },
        )

    def on_rejection(self, payload: WelfareRejection) -> None:
        current = self._lookup(payload.welfare_application_id, "rejection")
        if current is None:
            return
        self._applications[current.id] = replace(
            current,
            status=WelfareStatus.REJECTED,
            transaction_id=payload.transaction_id,
            rejection_reason=payload.reason,
            rejected_by=payload.actor,
        )
        logger.info(
            "welfare_application_rejected",
            extra={
                "application_id": current.id,
                "transaction_id": payload.transaction_id,
                "reason": payload.reason,
            },
        )

    def _lookup(self, application_id: str, signal: str) -> WelfareApplication | None:
        current = self._applications.get(application_id)
        if current is None:
            # Payouts recorded without an application reference the member id
            logger.warning(
                "welfare_application_unknown",
                extra={"application_id": application_id, "signal": signal},
            )
        return current
