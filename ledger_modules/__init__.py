"""
Church module integrations (``ledger_modules``).

Responsibility
--------------
Each subpackage is the ledger-facing edge of one church module: pure
adapter functions that turn module activity (an inventory purchase, a
payroll run, a welfare payout, an LPO) into a ``TransactionDraft``, and,
for the modules finance answers back to, consumers that apply the
approval outcome to the module's own records.

Architecture position
---------------------
**Modules layer** -- depends on ``ledger_kernel`` domain types and the
event bus.  Adapters never decide approval; the store's gate does.
"""
