"""
Church ledger kernel.

Pure domain types, the approval gate, the transaction store, the
notification relay, the cross-module event bus and durable persistence.
"""

__version__ = "0.1.0"
