"""
Procurement Adapter (``ledger_modules.procurement.adapters``).

An LPO is recorded as an Inventory expense under category
``Procurement`` / subcategory ``Local Purchase Order``, with the LPO id in
``module_reference``.  Recording it under Inventory puts LPOs above the
threshold through the approval gate like every other module expense.
"""

from __future__ import annotations

from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from ledger_kernel.exceptions import ValidationError
from ledger_modules.common import DEFAULT_CURRENCY
from ledger_modules.procurement.models import LocalPurchaseOrder

PROCUREMENT_CATEGORY = "Procurement"
LPO_SUBCATEGORY = "Local Purchase Order"


def local_purchase_order(lpo: LocalPurchaseOrder) -> TransactionDraft:
    if not lpo.items:
        raise ValidationError("items", "an LPO needs at least one item")
    return TransactionDraft(
        date=lpo.date,
        type=TransactionType.EXPENSE,
        category=PROCUREMENT_CATEGORY,
        subcategory=LPO_SUBCATEGORY,
        description=f"LPO #{lpo.lpo_number} - {lpo.supplier}",
        amount=lpo.total,
        currency=DEFAULT_CURRENCY,
        payment_method=PaymentMethod.BANK_TRANSFER,
        reference=lpo.lpo_number,
        module=Module.INVENTORY,
        module_reference=lpo.id,
        created_by=lpo.created_by,
        requested_by=lpo.requested_by,
        notes=f"LPO for {lpo.supplier} - {len(lpo.items)} items",
    )


def is_lpo_transaction(tx: Transaction) -> bool:
    """True for ledger entries recorded by :func:`local_purchase_order`."""
    return (
        tx.category == PROCUREMENT_CATEGORY
        and tx.subcategory == LPO_SUBCATEGORY
        and tx.module_reference is not None
    )
