"""
Welfare Module (``ledger_modules.welfare``).

Welfare payouts above the approval threshold wait for finance; the
outcome comes back over the ``welfare.completion`` and
``welfare.rejection`` topics and is applied by ``WelfareApplications``.
"""

from ledger_modules.welfare.adapters import welfare_application_payment, welfare_payment
from ledger_modules.welfare.consumers import WelfareApplications
from ledger_modules.welfare.models import (
    Disbursement,
    WelfareApplication,
    WelfareStatus,
)

__all__ = [
    "Disbursement",
    "WelfareApplication",
    "WelfareApplications",
    "WelfareStatus",
    "welfare_application_payment",
    "welfare_payment",
]
