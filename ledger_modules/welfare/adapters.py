"""Welfare payment adapter."""

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
from ledger_modules.welfare.models import WelfareApplication


def welfare_payment(
    *,
    member_name: str,
    member_id: str,
    payment_type: str,
    amount: Decimal | int | str,
    reason: str,
    application_id: str | None = None,
    on: date | None = None,
    clock: Clock | None = None,
) -> TransactionDraft:
    """Expense draft for a welfare payout.

    ``module_reference`` is the welfare application id when there is one,
    so the approval outcome can be routed back to that application;
    otherwise the member id.
    """
    return TransactionDraft(
        date=entry_date(on, clock),
        type=TransactionType.EXPENSE,
        category="Welfare",
        subcategory=payment_type,
        description=f"Welfare payment to {member_name}: {reason}",
        amount=money(amount),
        currency=DEFAULT_CURRENCY,
        payment_method=PaymentMethod.CASH,
        reference=f"WEL-{member_id}-{stamp(clock)}",
        module=Module.WELFARE,
        module_reference=application_id or member_id,
        created_by=SYSTEM_ACTOR,
        requested_by=SYSTEM_ACTOR,
        notes=reason,
    )


def welfare_application_payment(
    application: WelfareApplication,
    on: date | None = None,
    clock: Clock | None = None,
) -> TransactionDraft:
    return welfare_payment(
        member_name=application.member_name,
        member_id=application.member_id,
        payment_type=application.payment_type,
        amount=application.amount,
        reason=application.reason,
        application_id=application.id,
        on=on,
        clock=clock,
    )
