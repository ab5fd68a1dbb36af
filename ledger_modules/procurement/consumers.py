"""
Procurement-side consumer of finance decisions.

``lpo.approval`` moves an LPO to the status finance names (``sent``: the
money is committed and the order can go to the supplier) and records the
expense transaction; ``lpo.rejection`` marks it rejected with the reason.
"""

from __future__ import annotations

from dataclasses import replace

from ledger_kernel.domain.topics import (
    LPO_APPROVAL,
    LPO_REJECTION,
    LpoApproval,
    LpoRejection,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.event_bus import EventBus, IdempotentConsumer
from ledger_modules.procurement.models import LocalPurchaseOrder, LpoStatus

logger = get_logger("modules.procurement.consumers")


class PurchaseOrders:
    """In-memory register of LPOs."""

    def __init__(self) -> None:
        self._orders: dict[str, LocalPurchaseOrder] = {}

    def register(self, lpo: LocalPurchaseOrder) -> LocalPurchaseOrder:
        self._orders[lpo.id] = lpo
        return lpo

    def attach_transaction(self, lpo_id: str, transaction_id: str) -> None:
        current = self._orders.get(lpo_id)
        if current is not None:
            self._orders[lpo_id] = replace(current, transaction_id=transaction_id)

    def get(self, lpo_id: str) -> LocalPurchaseOrder | None:
        return self._orders.get(lpo_id)

    def all(self) -> list[LocalPurchaseOrder]:
        return list(self._orders.values())

    def bind(self, bus: EventBus) -> None:
        bus.subscribe(LPO_APPROVAL, IdempotentConsumer(LPO_APPROVAL, self.on_approval))
        bus.subscribe(LPO_REJECTION, IdempotentConsumer(LPO_REJECTION, self.on_rejection))

    def on_approval(self, payload: LpoApproval) -> None:
        current = self._orders.get(payload.lpo_id)
        if current is None:
            logger.warning("lpo_unknown", extra={"lpo_id": payload.lpo_id})
            return
        self._orders[current.id] = replace(
            current,
            status=LpoStatus(payload.lpo_status),
            transaction_id=payload.transaction_id,
            expense_transaction_id=payload.expense_transaction_id,
            approved_by=payload.actor,
        )
        logger.info(
            "lpo_approved",
            extra={
                "lpo_id": current.id,
                "lpo_status": payload.lpo_status,
                "expense_transaction_id": payload.expense_transaction_id,
            },
        )

    def on_rejection(self, payload: LpoRejection) -> None:
        current = self._orders.get(payload.lpo_id)
        if current is None:
            logger.warning("lpo_unknown", extra={"lpo_id": payload.lpo_id})
            return
        self._orders[current.id] = replace(
            current,
            status=LpoStatus.REJECTED,
            transaction_id=payload.transaction_id,
            rejection_reason=payload.reason,
        )
        logger.info(
            "lpo_rejected",
            extra={"lpo_id": current.id, "reason": payload.reason},
        )
