"""Church services module: fees for weddings, dedications and the like."""

from ledger_modules.services.adapters import service_fee

__all__ = ["service_fee"]
