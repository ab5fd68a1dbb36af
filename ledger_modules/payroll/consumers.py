"""
HR-side consumer of payroll decisions.

HR registers the payroll records of a batch before sending it to
finance.  Each ``hr.disbursement`` message adds the approved transaction
to the batch's disbursement report; ``hr.rejection`` marks the batch
rejected.  Reports for batches HR never registered carry no employee
list.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from ledger_kernel.domain.topics import (
    HR_DISBURSEMENT,
    HR_REJECTION,
    HrDisbursement,
    HrRejection,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.event_bus import EventBus, IdempotentConsumer
from ledger_modules.payroll.models import (
    DisbursementReport,
    DisbursementStatus,
    PayrollRecord,
)

logger = get_logger("modules.payroll.consumers")


class PayrollDisbursements:
    """Payroll batches and the disbursement reports finance produced."""

    def __init__(self) -> None:
        self._batches: dict[str, tuple[PayrollRecord, ...]] = {}
        self._reports: dict[str, DisbursementReport] = {}

    def register_batch(self, batch_id: str, records: Iterable[PayrollRecord]) -> None:
        self._batches[batch_id] = tuple(records)

    def report(self, batch_id: str) -> DisbursementReport | None:
        return self._reports.get(batch_id)

    def reports(self) -> list[DisbursementReport]:
        return list(self._reports.values())

    def bind(self, bus: EventBus) -> None:
        bus.subscribe(
            HR_DISBURSEMENT,
            IdempotentConsumer(HR_DISBURSEMENT, self.on_disbursement),
        )
        bus.subscribe(
            HR_REJECTION,
            IdempotentConsumer(HR_REJECTION, self.on_rejection),
        )

    def on_disbursement(self, payload: HrDisbursement) -> None:
        current = self._reports.get(payload.batch_id)
        if current is None or current.status != DisbursementStatus.DISBURSED:
            current = DisbursementReport(
                batch_id=payload.batch_id,
                period=payload.period,
                status=DisbursementStatus.DISBURSED,
                decided_by=payload.actor,
                decided_on=payload.disbursement_date,
                disbursement_method=payload.disbursement_method,
                employees=self._batches.get(payload.batch_id, ()),
                notes=payload.notes,
            )
        report = replace(
            current,
            transaction_ids=current.transaction_ids + (payload.transaction_id,),
            disbursed_amount=current.disbursed_amount + payload.amount,
        )
        self._reports[payload.batch_id] = report
        logger.info(
            "payroll_disbursement_recorded",
            extra={
                "batch_id": payload.batch_id,
                "transaction_id": payload.transaction_id,
                "disbursed_amount": report.disbursed_amount,
                "employee_count": report.total_employees,
            },
        )

    def on_rejection(self, payload: HrRejection) -> None:
        existing = self._reports.get(payload.batch_id)
        report = DisbursementReport(
            batch_id=payload.batch_id,
            period=payload.period,
            status=DisbursementStatus.REJECTED,
            decided_by=payload.actor,
            decided_on=payload.occurred_at.date(),
            transaction_ids=(
                (existing.transaction_ids if existing else ())
                + (payload.transaction_id,)
            ),
            employees=self._batches.get(payload.batch_id, ()),
            rejection_reason=payload.reason,
        )
        self._reports[payload.batch_id] = report
        logger.info(
            "payroll_batch_rejected",
            extra={"batch_id": payload.batch_id, "reason": payload.reason},
        )
