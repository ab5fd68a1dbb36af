"""Members module: tithes and other member contributions."""

from ledger_modules.members.adapters import member_contribution

__all__ = ["member_contribution"]
