"""
Financial summary over the ledger.

Pure derived computation: no side effects, no dependency on the order in
which transactions were recorded.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.offering import Offering
from ledger_kernel.domain.transaction import Transaction, TransactionType

_ZERO = Decimal("0")


@dataclass(frozen=True)
class FinancialSummary:
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    transaction_count: int
    offering_total: Decimal


def in_range(day: date, start: date | None, end: date | None) -> bool:
    """Inclusive date filter; a missing bound disables filtering."""
    if start is None or end is None:
        return True
    return start <= day <= end


def summarize(
    transactions: Iterable[Transaction],
    offerings: Iterable[Offering],
    start: date | None = None,
    end: date | None = None,
) -> FinancialSummary:
    """Aggregate income, expenses and offerings, optionally by date range.

    The range only applies when both ``start`` and ``end`` are given.
    Every status counts, matching what the ledger shows reviewers.
    """
    income = _ZERO
    expenses = _ZERO
    count = 0
    for tx in transactions:
        if not in_range(tx.date, start, end):
            continue
        count += 1
        if tx.type == TransactionType.INCOME:
            income += tx.amount
        elif tx.type == TransactionType.EXPENSE:
            expenses += tx.amount

    offering_total = sum(
        (o.total_amount for o in offerings if in_range(o.date, start, end)),
        _ZERO,
    )

    return FinancialSummary(
        total_income=income,
        total_expenses=expenses,
        net_income=income - expenses,
        transaction_count=count,
        offering_total=offering_total,
    )
