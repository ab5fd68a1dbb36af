"""
Approval gate and status lifecycle (``ledger_kernel.domain.approval``).

Responsibility
--------------
The single home of the approval policy: which transactions must wait for
manual sign-off, what status a new transaction starts in, and which status
changes the lifecycle allows afterwards.

Architecture position
---------------------
**Kernel domain layer** -- pure functions and constants.  ZERO I/O.
Called only by ``TransactionStore``; module adapters never repeat the
threshold check.

Invariants enforced
-------------------
* ``requires_approval`` is true iff the module is not approval-exempt
  (Finance) AND the amount is strictly greater than the threshold.
* A gated transaction always starts ``Pending``; an ungated one never
  does.
* ``STATUS_TRANSITIONS`` defines the valid status changes.  No state
  has an edge back to ``Pending``.
* Approve and reject (the ``APPROVAL_DECISIONS``) only act on Pending
  records; that guard lives in the store's check-and-set.
"""

from __future__ import annotations

from decimal import Decimal

from ledger_kernel.domain.transaction import Module, TransactionStatus

# Fixed policy: not configurable per call or per deployment.
APPROVAL_THRESHOLD: Decimal = Decimal("1000")

APPROVAL_EXEMPT_MODULES: frozenset[Module] = frozenset({Module.FINANCE})

DEFAULT_UNGATED_STATUS: TransactionStatus = TransactionStatus.COMPLETED


# Direct status updates are unguarded except for one rule: nothing moves
# back into the approval queue.
STATUS_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    status: frozenset(t for t in TransactionStatus if t != TransactionStatus.PENDING)
    for status in TransactionStatus
}

APPROVAL_DECISIONS: frozenset[TransactionStatus] = frozenset({
    TransactionStatus.APPROVED,
    TransactionStatus.REJECTED,
})


def requires_approval(module: Module, amount: Decimal) -> bool:
    """Return True when a transaction must wait for manual approval."""
    return module not in APPROVAL_EXEMPT_MODULES and amount > APPROVAL_THRESHOLD


def initial_status(
    gated: bool,
    requested: TransactionStatus | None = None,
) -> TransactionStatus:
    """Status a new transaction starts in.

    Gated transactions are always Pending.  Ungated transactions take the
    caller's requested status, except that Pending is reserved for the
    approval queue and collapses to the default.
    """
    if gated:
        return TransactionStatus.PENDING
    if requested is None or requested == TransactionStatus.PENDING:
        return DEFAULT_UNGATED_STATUS
    return requested


def can_transition(
    from_status: TransactionStatus,
    to_status: TransactionStatus,
) -> bool:
    """True when the lifecycle allows moving from one status to another."""
    return to_status in STATUS_TRANSITIONS.get(from_status, frozenset())
