"""
Hypothesis properties of the ledger.

- the gate classifies every (module, amount) pair the same way the
  stored transaction reports it
- ids stay sequential and unique under any mix of adds and deletes
- the financial summary does not depend on recording order
- approve/reject either act exactly once or not at all
"""

from datetime import date, timedelta
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from ledger_kernel.domain.approval import APPROVAL_THRESHOLD
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.summary import summarize
from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
)
from ledger_kernel.services.notification_relay import NotificationRelay
from ledger_kernel.services.transaction_store import TransactionStore

amounts = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("10000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)

drafts = st.builds(
    TransactionDraft,
    date=st.dates(min_value=date(2024, 1, 1), max_value=date(2024, 12, 31)),
    type=st.sampled_from(TransactionType),
    category=st.sampled_from(["Tithe", "Utilities", "Equipment", "Welfare"]),
    description=st.just("generated"),
    amount=amounts,
    payment_method=st.sampled_from(PaymentMethod),
    reference=st.just("GEN"),
    module=st.sampled_from(Module),
    created_by=st.just("generator"),
)


def fresh_store() -> TransactionStore:
    return TransactionStore(NotificationRelay(), clock=DeterministicClock())


@given(draft=drafts)
def test_gate_classification(draft):
    tx = fresh_store().add_transaction(draft)
    expected = draft.module != Module.FINANCE and draft.amount > APPROVAL_THRESHOLD
    assert tx.requires_approval is expected
    assert (tx.status == TransactionStatus.PENDING) is expected


@settings(max_examples=50)
@given(
    batch=st.lists(drafts, min_size=1, max_size=15),
    deletions=st.lists(st.integers(min_value=0, max_value=14), max_size=10),
)
def test_ids_sequential_and_never_reused(batch, deletions):
    store = fresh_store()
    issued = [store.add_transaction(d).id for d in batch]
    for index in deletions:
        if index < len(issued):
            store.delete_transaction(issued[index])
    issued.append(store.add_transaction(batch[0]).id)

    assert issued == [f"FTX{n:03d}" for n in range(1, len(batch) + 2)]
    live = [t.id for t in store.get_transactions()]
    assert len(live) == len(set(live))


@settings(max_examples=50)
@given(batch=st.lists(drafts, max_size=20), data=st.data())
def test_summary_is_order_independent(batch, data):
    store = fresh_store()
    txs = [store.add_transaction(d) for d in batch]
    shuffled = data.draw(st.permutations(txs))
    start = date(2024, 3, 1)
    end = start + timedelta(days=data.draw(st.integers(min_value=0, max_value=200)))

    assert summarize(txs, []) == summarize(shuffled, [])
    assert summarize(txs, [], start, end) == summarize(shuffled, [], start, end)

    summary = summarize(txs, [])
    assert summary.net_income == summary.total_income - summary.total_expenses
    assert summary.transaction_count == len(txs)


@given(
    draft=drafts,
    decisions=st.lists(st.sampled_from(["approve", "reject"]), min_size=1, max_size=5),
)
def test_decision_applies_at_most_once(draft, decisions):
    store = fresh_store()
    tx = store.add_transaction(draft)
    results = [
        store.approve_transaction(tx.id, "A")
        if decision == "approve"
        else store.reject_transaction(tx.id, "R", "no")
        for decision in decisions
    ]
    if tx.status == TransactionStatus.PENDING:
        assert results[0] is True
        assert not any(results[1:])
        expected = (
            TransactionStatus.APPROVED
            if decisions[0] == "approve"
            else TransactionStatus.REJECTED
        )
        assert store.get_transaction(tx.id).status == expected
    else:
        assert not any(results)
        assert store.get_transaction(tx.id).status == tx.status
