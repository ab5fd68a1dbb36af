"""
Boundary validation for transaction drafts.

Responsibility:
    Rejects malformed drafts before they reach the store: non-positive or
    non-finite amounts, values outside the shared enumerations, and empty
    required text fields.  Also normalizes loosely typed input (amounts
    from JSON or forms, enum labels) into the domain types.

Architecture position:
    Kernel > Domain.  Pure functions, zero I/O.

Failure modes:
    - ValidationError naming the offending field and the reason.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
)
from ledger_kernel.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

_REQUIRED_TEXT = ("category", "description", "currency", "reference", "created_by")


def coerce_amount(value: Any, field: str = "amount") -> Decimal:
    """Convert an int/str/float/Decimal amount to Decimal.

    Floats go through ``str()`` so 0.1 becomes Decimal("0.1"), not its
    binary approximation.
    """
    if isinstance(value, bool):
        raise ValidationError(field, "must be a number")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(field, f"not a number: {value!r}") from None
    if not amount.is_finite():
        raise ValidationError(field, "must be finite")
    return amount


def coerce_enum(enum_type: type[E], value: Any, field: str) -> E:
    """Convert a label (or member) to ``enum_type``, raising ValidationError."""
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_type)
        raise ValidationError(field, f"{value!r} is not one of: {allowed}") from None


def validate_draft(draft: TransactionDraft) -> TransactionDraft:
    """Check a draft and return it with enum fields normalized."""
    amount = coerce_amount(draft.amount)
    if amount <= 0:
        raise ValidationError("amount", "must be greater than zero")

    normalized = replace(
        draft,
        amount=amount,
        type=coerce_enum(TransactionType, draft.type, "type"),
        module=coerce_enum(Module, draft.module, "module"),
        payment_method=coerce_enum(
            PaymentMethod, draft.payment_method, "payment_method"
        ),
        status=(
            coerce_enum(TransactionStatus, draft.status, "status")
            if draft.status is not None
            else None
        ),
    )

    for name in _REQUIRED_TEXT:
        value = getattr(draft, name)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(name, "must not be empty")

    for name in ("vat_amount", "withholding_tax"):
        value = getattr(draft, name)
        if value is not None and (not isinstance(value, Decimal) or value < 0):
            raise ValidationError(name, "must be a non-negative Decimal")

    return normalized
