"""
Transaction domain types (``ledger_kernel.domain.transaction``).

Responsibility
--------------
Pure value objects for the centralized ledger: the enumerations every
module shares (direction, payment method, originating module, status),
the caller-supplied ``TransactionDraft`` and the stored ``Transaction``.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``models/`` or ``services/``.

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Both dataclasses are frozen; the store changes a record only by
  replacing it with ``dataclasses.replace``, so records handed to callers
  can never be mutated behind the store's back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class TransactionType(str, Enum):
    """Direction of a monetary movement."""

    INCOME = "Income"
    EXPENSE = "Expense"


class PaymentMethod(str, Enum):
    """How money changed hands."""

    CASH = "Cash"
    MOBILE_MONEY = "Mobile-Money"
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"

    @classmethod
    def _missing_(cls, value: object) -> PaymentMethod | None:
        # Legacy labels from the mobile-money era of the data
        if isinstance(value, str) and value.strip().lower() in ("m-pesa", "mpesa"):
            return cls.MOBILE_MONEY
        return None


class Module(str, Enum):
    """Originating subsystem of a transaction."""

    FINANCE = "Finance"
    INVENTORY = "Inventory"
    HR = "HR"
    WELFARE = "Welfare"
    EVENTS = "Events"


class TransactionStatus(str, Enum):
    """Transaction lifecycle states."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class TransactionDraft:
    """Everything a caller supplies when recording a transaction.

    ``status`` is only a request: the approval gate overrides it for
    gated transactions.  ``requested_by`` defaults to ``created_by``.
    """

    date: date
    type: TransactionType
    category: str
    description: str
    amount: Decimal
    payment_method: PaymentMethod
    reference: str
    module: Module
    created_by: str
    currency: str = "KSh"
    subcategory: str | None = None
    external_payment_reference: str | None = None
    module_reference: str | None = None
    requested_by: str | None = None
    status: TransactionStatus | None = None
    notes: str | None = None
    tags: tuple[str, ...] = ()
    attachments: tuple[str, ...] = ()
    vat_amount: Decimal | None = None
    withholding_tax: Decimal | None = None


@dataclass(frozen=True)
class Transaction:
    """A recorded monetary movement owned by the transaction store."""

    id: str
    date: date
    type: TransactionType
    category: str
    description: str
    amount: Decimal
    currency: str
    payment_method: PaymentMethod
    reference: str
    module: Module
    status: TransactionStatus
    created_by: str
    requested_by: str
    requires_approval: bool
    created_at: datetime
    updated_at: datetime
    subcategory: str | None = None
    external_payment_reference: str | None = None
    module_reference: str | None = None
    approved_by: str | None = None
    notes: str | None = None
    tags: tuple[str, ...] = ()
    attachments: tuple[str, ...] = ()
    vat_amount: Decimal | None = None
    withholding_tax: Decimal | None = None

    @property
    def is_pending_approval(self) -> bool:
        """True when the transaction sits in the reviewer's queue."""
        return self.status == TransactionStatus.PENDING and self.requires_approval
