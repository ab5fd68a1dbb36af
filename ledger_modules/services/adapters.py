"""Service fee adapter."""

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


def service_fee(
    *,
    service_name: str,
    client_name: str,
    amount: Decimal | int | str,
    payment_method_used: PaymentMethod | str,
    reference: str | None = None,
    on: date | None = None,
    clock: Clock | None = None,
) -> TransactionDraft:
    return TransactionDraft(
        date=entry_date(on, clock),
        type=TransactionType.INCOME,
        category="Services",
        subcategory=service_name,
        description=f"{service_name} fee from {client_name}",
        amount=money(amount),
        currency=DEFAULT_CURRENCY,
        payment_method=payment_method(payment_method_used),
        reference=reference or f"SVC-{stamp(clock)}",
        module=Module.FINANCE,
        created_by=SYSTEM_ACTOR,
        requested_by=SYSTEM_ACTOR,
    )
