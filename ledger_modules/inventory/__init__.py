"""Inventory module: equipment purchases and maintenance costs."""

from ledger_modules.inventory.adapters import inventory_purchase, maintenance_expense

__all__ = ["inventory_purchase", "maintenance_expense"]
