"""
LedgerAPI -- synchronous request/response facade over the ledger.

Responsibility:
    The external interface of the ledger for UI and integration callers.
    Accepts JSON-shaped request bodies (camelCase keys, ISO dates, amounts
    as numbers or strings), calls the transaction store, and returns an
    ``ApiResponse`` whose body is JSON-ready (Decimals as strings).

    ==============================  ======================================
    Call                            Route it stands for
    ==============================  ======================================
    post_transaction(body)          POST transaction
    list_transactions(...)          GET transactions?module=&type=&from=&to=
    list_pending()                  GET transactions/pending
    approve(id, body)               POST transactions/{id}/approve
    reject(id, body)                POST transactions/{id}/reject
    post_offering(body)             POST offerings
    summary(from_, to)              GET summary?from=&to=
    ==============================  ======================================

Status codes:
    201 created, 200 read / decision recorded, 404 unknown transaction,
    409 transaction not pending, 422 validation failure (body carries the
    error ``code``, ``field`` and ``reason``).

Architecture position:
    Services layer.  Holds the store and relay by injection; no global
    state.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from ledger_kernel.domain.notifications import Notification
from ledger_kernel.domain.offering import (
    BankingDetails,
    Offering,
    OfferingBreakdown,
    OfferingDraft,
)
from ledger_kernel.domain.summary import FinancialSummary
from ledger_kernel.domain.transaction import (
    Module,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from ledger_kernel.domain.validation import coerce_amount, coerce_enum
from ledger_kernel.exceptions import ValidationError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.transaction_store import TransactionStore

logger = get_logger("services.api")


@dataclass(frozen=True)
class ApiResponse:
    status: int
    body: Any = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


# ---------------------------------------------------------------------------
# JSON shaping
# ---------------------------------------------------------------------------


def _json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        # datetime is a date subclass; both render as ISO strings
        return value.isoformat()
    if isinstance(value, tuple):
        return [_json_value(v) for v in value]
    return value


def transaction_to_json(tx: Transaction) -> dict[str, Any]:
    return {
        "id": tx.id,
        "date": _json_value(tx.date),
        "type": tx.type.value,
        "category": tx.category,
        "subcategory": tx.subcategory,
        "description": tx.description,
        "amount": _json_value(tx.amount),
        "currency": tx.currency,
        "paymentMethod": tx.payment_method.value,
        "reference": tx.reference,
        "externalPaymentReference": tx.external_payment_reference,
        "module": tx.module.value,
        "moduleReference": tx.module_reference,
        "status": tx.status.value,
        "createdBy": tx.created_by,
        "requestedBy": tx.requested_by,
        "approvedBy": tx.approved_by,
        "requiresApproval": tx.requires_approval,
        "notes": tx.notes,
        "tags": list(tx.tags),
        "attachments": list(tx.attachments),
        "vatAmount": _json_value(tx.vat_amount),
        "withholdingTax": _json_value(tx.withholding_tax),
        "createdAt": _json_value(tx.created_at),
        "updatedAt": _json_value(tx.updated_at),
    }


def offering_to_json(offering: Offering) -> dict[str, Any]:
    banking = offering.banking_details
    return {
        "id": offering.id,
        "date": _json_value(offering.date),
        "serviceType": offering.service_type,
        "minister": offering.minister,
        "offerings": {
            _camel(k): _json_value(v) for k, v in offering.offerings.as_dict().items()
        },
        "totalAmount": _json_value(offering.total_amount),
        "collectedBy": offering.collected_by,
        "countedBy": list(offering.counted_by),
        "bankingDetails": None if banking is None else {
            "deposited": banking.deposited,
            "depositDate": _json_value(banking.deposit_date),
            "bankSlipNumber": banking.bank_slip_number,
        },
    }


def summary_to_json(summary: FinancialSummary) -> dict[str, Any]:
    return {
        "totalIncome": _json_value(summary.total_income),
        "totalExpenses": _json_value(summary.total_expenses),
        "netIncome": _json_value(summary.net_income),
        "transactionCount": summary.transaction_count,
        "offeringTotal": _json_value(summary.offering_total),
    }


def notification_to_json(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "type": notification.type.value,
        "title": notification.title,
        "message": notification.message,
        "amount": _json_value(notification.amount),
        "module": _json_value(notification.module),
        "transactionId": notification.transaction_id,
        "timestamp": _json_value(notification.timestamp),
    }


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# ---------------------------------------------------------------------------
# Request parsing
# ---------------------------------------------------------------------------


def _required(body: dict[str, Any], key: str) -> Any:
    value = body.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(key, "is required")
    return value


def _parse_date(value: Any, key: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(key, f"not an ISO date: {value!r}") from None


def _optional_date(value: Any, key: str) -> date | None:
    return None if value in (None, "") else _parse_date(value, key)


def _optional_amount(value: Any, key: str) -> Decimal | None:
    return None if value is None else coerce_amount(value, key)


def parse_transaction(body: dict[str, Any]) -> TransactionDraft:
    """Build a draft from a camelCase request body.

    ``mpesaTransactionId`` is accepted as the legacy name of
    ``externalPaymentReference``.  Enum labels are checked later by the
    store's validation.
    """
    return TransactionDraft(
        date=_parse_date(_required(body, "date"), "date"),
        type=_required(body, "type"),
        category=_required(body, "category"),
        subcategory=body.get("subcategory"),
        description=_required(body, "description"),
        amount=coerce_amount(_required(body, "amount")),
        currency=body.get("currency") or "KSh",
        payment_method=_required(body, "paymentMethod"),
        reference=_required(body, "reference"),
        external_payment_reference=(
            body.get("externalPaymentReference") or body.get("mpesaTransactionId")
        ),
        module=_required(body, "module"),
        module_reference=body.get("moduleReference"),
        created_by=_required(body, "createdBy"),
        requested_by=body.get("requestedBy"),
        status=body.get("status"),
        notes=body.get("notes"),
        tags=tuple(body.get("tags") or ()),
        attachments=tuple(body.get("attachments") or ()),
        vat_amount=_optional_amount(body.get("vatAmount"), "vatAmount"),
        withholding_tax=_optional_amount(body.get("withholdingTax"), "withholdingTax"),
    )


def parse_offering(body: dict[str, Any]) -> OfferingDraft:
    raw = body.get("offerings") or {}
    if not isinstance(raw, dict):
        raise ValidationError("offerings", "must be an object")
    known = {_camel(name): name for name in OfferingBreakdown.__dataclass_fields__}
    unknown = set(raw) - set(known)
    if unknown:
        raise ValidationError("offerings", f"unknown buckets: {', '.join(sorted(unknown))}")
    breakdown = OfferingBreakdown(**{
        known[key]: coerce_amount(value, f"offerings.{key}")
        for key, value in raw.items()
    })

    banking = None
    raw_banking = body.get("bankingDetails")
    if raw_banking:
        banking = BankingDetails(
            deposited=bool(raw_banking.get("deposited", False)),
            deposit_date=_optional_date(raw_banking.get("depositDate"), "depositDate"),
            bank_slip_number=raw_banking.get("bankSlipNumber"),
        )

    return OfferingDraft(
        date=_parse_date(_required(body, "date"), "date"),
        service_type=_required(body, "serviceType"),
        minister=_required(body, "minister"),
        offerings=breakdown,
        collected_by=_required(body, "collectedBy"),
        counted_by=tuple(body.get("countedBy") or ()),
        banking_details=banking,
    )


def _validation_error(exc: ValidationError) -> ApiResponse:
    return ApiResponse(
        422,
        {"error": exc.code, "field": exc.field, "reason": exc.reason},
    )


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------


class LedgerAPI:
    """Request-level operations on one transaction store."""

    def __init__(self, store: TransactionStore) -> None:
        self._store = store

    def post_transaction(self, body: dict[str, Any]) -> ApiResponse:
        try:
            tx = self._store.add_transaction(parse_transaction(body))
        except ValidationError as exc:
            logger.info(
                "api_validation_failed",
                extra={"field": exc.field, "reason": exc.reason},
            )
            return _validation_error(exc)
        return ApiResponse(201, transaction_to_json(tx))

    def get_transaction(self, transaction_id: str) -> ApiResponse:
        tx = self._store.get_transaction(transaction_id)
        if tx is None:
            return _not_found(transaction_id)
        return ApiResponse(200, transaction_to_json(tx))

    def list_transactions(
        self,
        module: str | None = None,
        type: str | None = None,
        from_: str | date | None = None,
        to: str | date | None = None,
    ) -> ApiResponse:
        """Filter by module, type and inclusive date range (both ends needed)."""
        try:
            start = _optional_date(from_, "from")
            end = _optional_date(to, "to")
            wanted_module = coerce_enum(Module, module, "module") if module else None
            wanted_type = coerce_enum(TransactionType, type, "type") if type else None
        except ValidationError as exc:
            return _validation_error(exc)
        items = [
            tx
            for tx in self._store.get_transactions_in_range(start, end)
            if (wanted_module is None or tx.module == wanted_module)
            and (wanted_type is None or tx.type == wanted_type)
        ]
        return ApiResponse(200, [transaction_to_json(tx) for tx in items])

    def list_pending(self) -> ApiResponse:
        return ApiResponse(
            200,
            [transaction_to_json(tx) for tx in self._store.get_pending_transactions()],
        )

    def approve(self, transaction_id: str, body: dict[str, Any]) -> ApiResponse:
        try:
            approver = _required(body, "approvedBy")
        except ValidationError as exc:
            return _validation_error(exc)
        if self._store.approve_transaction(transaction_id, approver):
            return self.get_transaction(transaction_id)
        return self._refusal(transaction_id)

    def reject(self, transaction_id: str, body: dict[str, Any]) -> ApiResponse:
        try:
            rejecter = _required(body, "rejectedBy")
        except ValidationError as exc:
            return _validation_error(exc)
        reason = body.get("reason") or "No reason provided"
        if self._store.reject_transaction(transaction_id, rejecter, reason):
            return self.get_transaction(transaction_id)
        return self._refusal(transaction_id)

    def post_offering(self, body: dict[str, Any]) -> ApiResponse:
        try:
            offering = self._store.add_offering(parse_offering(body))
        except ValidationError as exc:
            return _validation_error(exc)
        return ApiResponse(201, offering_to_json(offering))

    def summary(
        self,
        from_: str | date | None = None,
        to: str | date | None = None,
    ) -> ApiResponse:
        try:
            start = _optional_date(from_, "from")
            end = _optional_date(to, "to")
        except ValidationError as exc:
            return _validation_error(exc)
        return ApiResponse(
            200, summary_to_json(self._store.get_financial_summary(start, end))
        )

    # -- subscription channel -------------------------------------------------

    def on_transactions_changed(
        self, callback: Callable[[list[dict[str, Any]]], None]
    ) -> Callable[[], None]:
        """Register a JSON-level listener; returns a function that removes it."""
        relay = self._store.relay

        def deliver(transactions: list[Transaction]) -> None:
            callback([transaction_to_json(tx) for tx in transactions])

        relay.subscribe(deliver)
        return lambda: relay.unsubscribe(deliver)

    def on_pending_count_changed(
        self, callback: Callable[[int], None]
    ) -> Callable[[], None]:
        relay = self._store.relay
        relay.subscribe_to_pending_count(callback)
        return lambda: relay.unsubscribe_from_pending_count(callback)

    def on_notification(
        self, callback: Callable[[dict[str, Any]], None]
    ) -> Callable[[], None]:
        relay = self._store.relay

        def deliver(notification: Notification) -> None:
            callback(notification_to_json(notification))

        relay.subscribe_to_notifications(deliver)
        return lambda: relay.unsubscribe_from_notifications(deliver)

    def _refusal(self, transaction_id: str) -> ApiResponse:
        tx = self._store.get_transaction(transaction_id)
        if tx is None:
            return _not_found(transaction_id)
        return ApiResponse(
            409,
            {
                "error": "TRANSACTION_NOT_PENDING",
                "transactionId": transaction_id,
                "status": tx.status.value,
            },
        )


def _not_found(transaction_id: str) -> ApiResponse:
    return ApiResponse(
        404,
        {"error": "TRANSACTION_NOT_FOUND", "transactionId": transaction_id},
    )
