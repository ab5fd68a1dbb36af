"""
Welfare Domain Models (``ledger_modules.welfare.models``).

Frozen records of welfare applications as the welfare office tracks them.
The finance side never touches these directly; it only publishes the
outcome of its review, which ``WelfareApplications`` applies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from ledger_kernel.domain.transaction import PaymentMethod


class WelfareStatus(str, Enum):
    SUBMITTED = "submitted"
    AWAITING_FINANCE = "awaiting_finance"
    COMPLETED = "completed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Disbursement:
    method: PaymentMethod
    amount: Decimal
    approved_by: str
    disbursement_date: date


@dataclass(frozen=True)
class WelfareApplication:
    """A member's request for welfare support."""

    id: str
    member_id: str
    member_name: str
    payment_type: str
    amount: Decimal
    reason: str
    status: WelfareStatus = WelfareStatus.SUBMITTED
    transaction_id: str | None = None
    disbursement: Disbursement | None = None
    rejection_reason: str | None = None
    rejected_by: str | None = None
