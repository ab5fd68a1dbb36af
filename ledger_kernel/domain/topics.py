"""
Cross-module topic catalogue (``ledger_kernel.domain.topics``).

Responsibility
--------------
Names every signal the finance side sends back to an originating module
after a reviewer decides, and pins the payload schema of each one.

Every payload carries the same envelope:

* ``transaction_id`` -- correlation id back to the ledger transaction
  (consumers deduplicate on it).
* ``module`` -- originating module of the transaction.
* ``amount`` -- transaction amount.
* ``actor`` -- reviewer who approved or rejected.
* ``occurred_at`` -- when the decision was relayed.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Generic, TypeVar

from ledger_kernel.domain.transaction import Module, PaymentMethod


@dataclass(frozen=True)
class TopicPayload:
    transaction_id: str
    module: Module
    amount: Decimal
    actor: str
    occurred_at: datetime


P = TypeVar("P", bound=TopicPayload)


@dataclass(frozen=True)
class Topic(Generic[P]):
    """A named channel with a single payload type."""

    name: str
    payload_type: type[P]


# ---------------------------------------------------------------------------
# Welfare
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WelfareCompletion(TopicPayload):
    """Finance approved a welfare disbursement."""

    welfare_application_id: str
    payment_method: PaymentMethod
    disbursement_date: date


@dataclass(frozen=True)
class WelfareRejection(TopicPayload):
    welfare_application_id: str
    reason: str


# ---------------------------------------------------------------------------
# Procurement (local purchase orders)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LpoApproval(TopicPayload):
    """Money committed for an LPO; the supplier can be sent the order."""

    lpo_id: str
    expense_transaction_id: str
    lpo_status: str = "sent"


@dataclass(frozen=True)
class LpoRejection(TopicPayload):
    lpo_id: str
    reason: str


# ---------------------------------------------------------------------------
# HR payroll
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HrDisbursement(TopicPayload):
    """Payroll approved; HR can release the disbursement report."""

    batch_id: str
    period: str
    disbursement_method: PaymentMethod
    disbursement_date: date
    notes: str | None = None


@dataclass(frozen=True)
class HrRejection(TopicPayload):
    batch_id: str
    period: str
    reason: str


WELFARE_COMPLETION: Topic[WelfareCompletion] = Topic(
    "welfare.completion", WelfareCompletion
)
WELFARE_REJECTION: Topic[WelfareRejection] = Topic(
    "welfare.rejection", WelfareRejection
)
LPO_APPROVAL: Topic[LpoApproval] = Topic("lpo.approval", LpoApproval)
LPO_REJECTION: Topic[LpoRejection] = Topic("lpo.rejection", LpoRejection)
HR_DISBURSEMENT: Topic[HrDisbursement] = Topic("hr.disbursement", HrDisbursement)
HR_REJECTION: Topic[HrRejection] = Topic("hr.rejection", HrRejection)

ALL_TOPICS: tuple[Topic, ...] = (
    WELFARE_COMPLETION,
    WELFARE_REJECTION,
    LPO_APPROVAL,
    LPO_REJECTION,
    HR_DISBURSEMENT,
    HR_REJECTION,
)
