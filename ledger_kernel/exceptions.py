"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the ledger (API handlers, module adapters, the CLI) must react
to errors by type, never by parsing message strings.  Every exception
therefore carries:

  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example:

    try:
        store.add_transaction(draft)
    except ValidationError as e:
        api_response(422, code=e.code, field=e.field, reason=e.reason)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerError (base)
    |
    +-- TransactionError
    |   +-- ValidationError
    |   +-- TransactionNotFoundError
    |   +-- InvalidStatusTransitionError
    |
    +-- EventBusError
    |   +-- UnknownTopicError
    |   +-- TopicPayloadError
    |
    +-- ImmutabilityViolationError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                        | When Raised
--------------|-----------------------------|------------------------------------
Transaction   | VALIDATION_ERROR            | Draft fails boundary validation
              | TRANSACTION_NOT_FOUND       | Transaction ID doesn't exist
              | INVALID_STATUS_TRANSITION   | Status change not in state machine
--------------|-----------------------------|------------------------------------
Event bus     | UNKNOWN_TOPIC               | Publish/subscribe on unregistered topic
              | TOPIC_PAYLOAD_MISMATCH      | Payload type differs from topic schema
--------------|-----------------------------|------------------------------------
Journal       | IMMUTABILITY_VIOLATION      | Update/delete of a status history row
--------------|-----------------------------|------------------------------------
Config        | CONFIGURATION_ERROR         | Missing/malformed/invalid config

Approve and reject do NOT raise for an unknown id or a
non-pending transaction: they return ``False`` and the caller decides
what to tell the user.
"""


class LedgerError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "LEDGER_ERROR"


# Transaction-related exceptions


class TransactionError(LedgerError):
    """Base exception for transaction-related errors."""

    code: str = "TRANSACTION_ERROR"


class ValidationError(TransactionError):
    """A transaction or offering draft failed boundary validation."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class TransactionNotFoundError(TransactionError):
    """Transaction with given ID was not found."""

    code: str = "TRANSACTION_NOT_FOUND"

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")


class InvalidStatusTransitionError(TransactionError):
    """Requested status change is not allowed by the lifecycle."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, transaction_id: str, from_status: str, to_status: str):
        self.transaction_id = transaction_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Transaction {transaction_id} cannot move from "
            f"{from_status} to {to_status}"
        )


# Event bus exceptions


class EventBusError(LedgerError):
    """Base exception for cross-module event bus errors."""

    code: str = "EVENT_BUS_ERROR"


class UnknownTopicError(EventBusError):
    """Topic has not been registered with the bus."""

    code: str = "UNKNOWN_TOPIC"

    def __init__(self, topic_name: str):
        self.topic_name = topic_name
        super().__init__(f"Unknown topic: {topic_name}")


class TopicPayloadError(EventBusError):
    """Published payload does not match the topic's payload schema."""

    code: str = "TOPIC_PAYLOAD_MISMATCH"

    def __init__(self, topic_name: str, expected: str, received: str):
        self.topic_name = topic_name
        self.expected = expected
        self.received = received
        super().__init__(
            f"Topic {topic_name} expects {expected} payload, got {received}"
        )


# Journal exceptions


class ImmutabilityViolationError(LedgerError):
    """Attempted to modify or delete an append-only journal record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Configuration exceptions


class ConfigurationError(LedgerError):
    """Configuration could not be loaded or is invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)
