"""
Payroll Module (``ledger_modules.payroll``).

Salary payments go to finance as HR expenses; approved ones come back as
``hr.disbursement`` messages and build the batch's disbursement report.
"""

from ledger_modules.payroll.adapters import (
    PAYROLL_CATEGORY,
    batch_payroll,
    payroll_expense,
)
from ledger_modules.payroll.consumers import PayrollDisbursements
from ledger_modules.payroll.models import (
    DisbursementReport,
    DisbursementStatus,
    PayrollRecord,
)

__all__ = [
    "DisbursementReport",
    "DisbursementStatus",
    "PAYROLL_CATEGORY",
    "PayrollDisbursements",
    "PayrollRecord",
    "batch_payroll",
    "payroll_expense",
]
