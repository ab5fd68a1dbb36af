"""Event expense adapter."""

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
    stamp,
)


def event_expense(
    *,
    event_name: str,
    event_id: str,
    expense_type: str,
    amount: Decimal | int | str,
    description: str,
    on: date | None = None,
    clock: Clock | None = None,
) -> TransactionDraft:
    """Draft for money spent on an event; the reason is kept in the notes."""
    return TransactionDraft(
        date=entry_date(on, clock),
        type=TransactionType.EXPENSE,
        category="Events",
        subcategory=expense_type,
        description=f"Event expense for {event_name}: {description}",
        amount=money(amount),
        currency=DEFAULT_CURRENCY,
        payment_method=PaymentMethod.CASH,
        reference=f"EVT-{event_id}-{stamp(clock)}",
        module=Module.EVENTS,
        module_reference=event_id,
        created_by=SYSTEM_ACTOR,
        requested_by=SYSTEM_ACTOR,
        notes=description,
    )
