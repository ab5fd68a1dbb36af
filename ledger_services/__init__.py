"""
Ledger services: post-approval coordination, process wiring and the
request-level API.
"""

from ledger_services.api import ApiResponse, LedgerAPI
from ledger_services.bootstrap import Ledger, build_ledger
from ledger_services.post_approval import PostApprovalCoordinator

__all__ = [
    "ApiResponse",
    "Ledger",
    "LedgerAPI",
    "PostApprovalCoordinator",
    "build_ledger",
]
