"""
Payroll Adapters (``ledger_modules.payroll.adapters``).

One HR expense draft per employee per period, paid by bank transfer.  The
batch id, when given, becomes ``module_reference`` so finance's decision
can be routed back to the batch; otherwise the employee id is used.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    TransactionDraft,
    TransactionType,
)
from ledger_modules.common import DEFAULT_CURRENCY, entry_date, money
from ledger_modules.payroll.models import PayrollRecord

PAYROLL_CATEGORY = "Payroll"
PAYROLL_SUBCATEGORY = "Staff Salaries"
HR_SYSTEM_ACTOR = "HR System"


def payroll_expense(
    record: PayrollRecord,
    batch_id: str | None = None,
    on: date | None = None,
    clock: Clock | None = None,
) -> TransactionDraft:
    gross = money(record.gross_salary, "gross_salary")
    deductions = money(record.total_deductions, "total_deductions")
    return TransactionDraft(
        date=entry_date(on, clock),
        type=TransactionType.EXPENSE,
        category=PAYROLL_CATEGORY,
        subcategory=PAYROLL_SUBCATEGORY,
        description=(
            f"Salary payment for {record.employee_name} ({record.period})"
        ),
        amount=money(record.net_salary, "net_salary"),
        currency=DEFAULT_CURRENCY,
        payment_method=PaymentMethod.BANK_TRANSFER,
        reference=f"PAY-{record.employee_id}-{record.period}",
        module=Module.HR,
        module_reference=batch_id or record.employee_id,
        created_by=HR_SYSTEM_ACTOR,
        requested_by=HR_SYSTEM_ACTOR,
        notes=f"Gross: KSh {gross:,}, Deductions: KSh {deductions:,}",
    )


def batch_payroll(
    records: Iterable[PayrollRecord],
    batch_id: str | None = None,
    on: date | None = None,
    clock: Clock | None = None,
) -> list[TransactionDraft]:
    """Drafts for a whole payroll run, in record order."""
    return [payroll_expense(r, batch_id=batch_id, on=on, clock=clock) for r in records]
