"""
Inventory Adapters (``ledger_modules.inventory.adapters``).

Responsibility
--------------
Shape inventory activity into ledger expense drafts:

* equipment purchases -- category ``Equipment``, subcategory = the item's
  inventory category;
* maintenance work -- category ``Maintenance``, subcategory = the kind of
  maintenance performed.

Both reference the inventory record through ``module_reference`` so the
ledger entry can be traced back to the item.
"""

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
from ledger_modules.common import DEFAULT_CURRENCY, entry_date, money, payment_method


def inventory_purchase(
    *,
    item_name: str,
    purchase_price: Decimal | int | str,
    supplier: str,
    category: str,
    payment_method_used: PaymentMethod | str,
    reference: str,
    created_by: str,
    external_payment_reference: str | None = None,
    on: date | None = None,
    clock: Clock | None = None,
) -> TransactionDraft:
    return TransactionDraft(
        date=entry_date(on, clock),
        type=TransactionType.EXPENSE,
        category="Equipment",
        subcategory=category,
        description=f"Purchase of {item_name} from {supplier}",
        amount=money(purchase_price, "purchase_price"),
        currency=DEFAULT_CURRENCY,
        payment_method=payment_method(payment_method_used),
        reference=reference,
        external_payment_reference=external_payment_reference,
        module=Module.INVENTORY,
        module_reference=reference,
        created_by=created_by,
        requested_by=created_by,
    )


def maintenance_expense(
    *,
    item_name: str,
    maintenance_type: str,
    cost: Decimal | int | str,
    performed_by: str,
    payment_method_used: PaymentMethod | str,
    reference: str,
    created_by: str,
    external_payment_reference: str | None = None,
    on: date | None = None,
    clock: Clock | None = None,
) -> TransactionDraft:
    return TransactionDraft(
        date=entry_date(on, clock),
        type=TransactionType.EXPENSE,
        category="Maintenance",
        subcategory=maintenance_type,
        description=f"{maintenance_type} for {item_name} by {performed_by}",
        amount=money(cost, "cost"),
        currency=DEFAULT_CURRENCY,
        payment_method=payment_method(payment_method_used),
        reference=reference,
        external_payment_reference=external_payment_reference,
        module=Module.INVENTORY,
        module_reference=reference,
        created_by=created_by,
        requested_by=created_by,
    )
