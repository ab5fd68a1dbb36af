"""Member contribution adapter."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    TransactionDraft,
    TransactionType,
)
from ledger_modules.common import (
    DEFAULT_CURRENCY,
    SYSTEM_ACTOR,
    entry_date,
    money,
    payment_method,
    stamp,
)


def member_contribution(
    *,
    member_name: str,
    member_id: str,
    contribution_type: str,
    amount: Decimal | int | str,
    payment_method_used: PaymentMethod | str,
    reference: str | None = None,
    on: date | None = None,
    clock: Clock | None = None,
) -> TransactionDraft:
    """Income draft for a member's tithe, pledge or other contribution.

    Contributions are recorded under Finance, so they never queue for
    approval.  A reference is generated when the caller has none.
    """
    return TransactionDraft(
        date=entry_date(on, clock),
        type=TransactionType.INCOME,
        category="Contributions",
        subcategory=contribution_type,
        description=f"{contribution_type} from {member_name}",
        amount=money(amount),
        currency=DEFAULT_CURRENCY,
        payment_method=payment_method(payment_method_used),
        reference=reference or f"MEM-{member_id}-{stamp(clock)}",
        module=Module.FINANCE,
        module_reference=member_id,
        created_by=SYSTEM_ACTOR,
        requested_by=SYSTEM_ACTOR,
    )
