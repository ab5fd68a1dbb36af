"""
Procurement Module (``ledger_modules.procurement``).

Local purchase orders go to finance as gated expenses; the decision comes
back over ``lpo.approval`` / ``lpo.rejection``.
"""

from ledger_modules.procurement.adapters import (
    LPO_SUBCATEGORY,
    PROCUREMENT_CATEGORY,
    is_lpo_transaction,
    local_purchase_order,
)
from ledger_modules.procurement.consumers import PurchaseOrders
from ledger_modules.procurement.models import LocalPurchaseOrder, LpoItem, LpoStatus

__all__ = [
    "LPO_SUBCATEGORY",
    "LocalPurchaseOrder",
    "LpoItem",
    "LpoStatus",
    "PROCUREMENT_CATEGORY",
    "PurchaseOrders",
    "is_lpo_transaction",
    "local_purchase_order",
]
