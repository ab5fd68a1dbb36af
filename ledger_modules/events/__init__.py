"""Events module: costs of running church events."""

from ledger_modules.events.adapters import event_expense

__all__ = ["event_expense"]
