"""
Offering domain types (``ledger_kernel.domain.offering``).

Responsibility
--------------
Service-collection summaries: the fixed set of named offering buckets,
optional banking metadata, and the shaping of the single Income
transaction every recorded offering produces.

Invariants enforced
-------------------
* ``Offering.total_amount`` is the sum of the breakdown at creation time;
  there is no way to set it independently.
* ``build_offering_income`` yields exactly one Income draft, category
  ``Offerings``, whose amount equals the offering total.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
)

OFFERINGS_CATEGORY = "Offerings"


@dataclass(frozen=True)
class OfferingBreakdown:
    """Named offering sub-amounts collected at one service."""

    tithe: Decimal = Decimal("0")
    special_offering: Decimal = Decimal("0")
    thanksgiving: Decimal = Decimal("0")
    building_fund: Decimal = Decimal("0")
    missions: Decimal = Decimal("0")
    welfare: Decimal = Decimal("0")
    youth: Decimal = Decimal("0")
    others: Decimal = Decimal("0")

    def total(self) -> Decimal:
        return sum(
            (getattr(self, f.name) for f in fields(self)),
            Decimal("0"),
        )

    def as_dict(self) -> dict[str, Decimal]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class BankingDetails:
    deposited: bool = False
    deposit_date: date | None = None
    bank_slip_number: str | None = None


@dataclass(frozen=True)
class OfferingDraft:
    """Offering data as submitted by the counting team."""

    date: date
    service_type: str
    minister: str
    offerings: OfferingBreakdown
    collected_by: str
    counted_by: tuple[str, ...] = ()
    banking_details: BankingDetails | None = None


@dataclass(frozen=True)
class Offering:
    """A recorded offering with its derived total."""

    id: str
    date: date
    service_type: str
    minister: str
    offerings: OfferingBreakdown
    total_amount: Decimal
    collected_by: str
    counted_by: tuple[str, ...] = ()
    banking_details: BankingDetails | None = None

    @classmethod
    def from_draft(cls, offering_id: str, draft: OfferingDraft) -> Offering:
        return cls(
            id=offering_id,
            date=draft.date,
            service_type=draft.service_type,
            minister=draft.minister,
            offerings=draft.offerings,
            total_amount=draft.offerings.total(),
            collected_by=draft.collected_by,
            counted_by=tuple(draft.counted_by),
            banking_details=draft.banking_details,
        )


def build_offering_income(offering: Offering, currency: str) -> TransactionDraft:
    """Shape the Income transaction that records an offering's total."""
    return TransactionDraft(
        date=offering.date,
        type=TransactionType.INCOME,
        category=OFFERINGS_CATEGORY,
        subcategory=offering.service_type,
        description=(
            f"Service offerings - {offering.service_type} by {offering.minister}"
        ),
        amount=offering.total_amount,
        currency=currency,
        payment_method=PaymentMethod.CASH,
        reference=offering.id,
        module=Module.FINANCE,
        module_reference=offering.id,
        status=TransactionStatus.COMPLETED,
        created_by=offering.collected_by,
        requested_by=offering.collected_by,
    )
