"""
Procurement Domain Models (``ledger_modules.procurement.models``).

Local purchase orders as the procurement office keeps them.  An LPO's
total is the sum of its line amounts; nothing else sets it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class LpoStatus(str, Enum):
    """LPO lifecycle as seen by procurement."""

    PENDING = "pending"
    APPROVED = "approved"
    SENT = "sent"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


@dataclass(frozen=True)
class LpoItem:
    description: str
    quantity: int
    unit_price: Decimal
    specification: str = ""

    @property
    def amount(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class LocalPurchaseOrder:
    """An order to a supplier that needs finance to commit the money."""

    id: str
    lpo_number: str
    date: date
    supplier: str
    items: tuple[LpoItem, ...]
    created_by: str
    requested_by: str = "Procurement Department"
    status: LpoStatus = LpoStatus.PENDING
    notes: str | None = None
    delivery_date: date | None = None
    payment_terms: str | None = None
    transaction_id: str | None = None
    expense_transaction_id: str | None = None
    approved_by: str | None = None
    rejection_reason: str | None = None

    @property
    def subtotal(self) -> Decimal:
        return sum((item.amount for item in self.items), Decimal("0"))

    @property
    def total(self) -> Decimal:
        # LPOs carry no tax line
        return self.subtotal
