"""
Payroll Domain Models (``ledger_modules.payroll.models``).

Responsibility
--------------
Frozen value objects for the HR side of payroll: one employee's pay for a
period, and the disbursement report HR keeps per payroll batch once
finance has decided.

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* A report's employee list comes only from payroll records HR registered
  for the batch; it is never synthesized from the amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from ledger_kernel.domain.transaction import PaymentMethod


@dataclass(frozen=True)
class PayrollRecord:
    """One employee's pay for one period."""

    employee_id: str
    employee_name: str
    period: str
    gross_salary: Decimal
    net_salary: Decimal
    total_deductions: Decimal


class DisbursementStatus(str, Enum):
    DISBURSED = "disbursed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class DisbursementReport:
    """What HR knows about a payroll batch after finance decided."""

    batch_id: str
    period: str
    status: DisbursementStatus
    decided_by: str
    decided_on: date
    transaction_ids: tuple[str, ...] = ()
    disbursed_amount: Decimal = Decimal("0")
    disbursement_method: PaymentMethod | None = None
    employees: tuple[PayrollRecord, ...] = ()
    notes: str | None = None
    rejection_reason: str | None = None

    @property
    def total_employees(self) -> int:
        return len(self.employees)

    @property
    def total_gross_amount(self) -> Decimal:
        return sum((e.gross_salary for e in self.employees), Decimal("0"))

    @property
    def total_deductions(self) -> Decimal:
        return sum((e.total_deductions for e in self.employees), Decimal("0"))
