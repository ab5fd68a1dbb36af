"""Shared helpers for module adapters."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.transaction import PaymentMethod
from ledger_kernel.domain.validation import coerce_amount, coerce_enum

DEFAULT_CURRENCY = "KSh"
SYSTEM_ACTOR = "System"


def entry_date(day: date | None, clock: Clock | None) -> date:
    """The given date, or today according to ``clock``."""
    if day is not None:
        return day
    return (clock or SystemClock()).today()


def stamp(clock: Clock | None) -> int:
    """Millisecond timestamp used to keep generated references unique."""
    return int((clock or SystemClock()).now().timestamp() * 1000)


def money(value: Any, field: str = "amount") -> Decimal:
    return coerce_amount(value, field)


def payment_method(value: Any) -> PaymentMethod:
    return coerce_enum(PaymentMethod, value, "payment_method")
