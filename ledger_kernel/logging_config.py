"""
Structured JSON logging for the ledger (``ledger_kernel.logging_config``).

Responsibility:
    One JSON object per log line, carrying the ledger context (which
    transaction, which reviewer, which originating module) alongside the
    message key and its structured ``extra`` fields.

Architecture position:
    Kernel, no dependencies on the rest of the ledger.  Every package
    obtains loggers through ``get_logger`` so they all hang off the
    ``ledger_kernel`` logger and share its handler.

Conventions:
    - Messages are snake_case event keys (``transaction_recorded``,
      ``approval_decision_refused``); details go in ``extra``.
    - Context is bound around a unit of work with ``LogContext.bind``.
      Context keys win over ``extra`` keys of the same name.
    - Money is logged as a Decimal string, enums by value.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT: ContextVar[dict[str, str]] = ContextVar("ledger_log_context", default={})


class LogContext:
    """Request-scoped log fields, safe across threads and tasks."""

    FIELDS = ("correlation_id", "transaction_id", "actor", "module")

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        transaction_id: str | None = None,
        actor: str | None = None,
        module: str | None = None,
    ) -> None:
        """Update context fields; None leaves a field as it is."""
        cls._update(
            correlation_id=correlation_id,
            transaction_id=transaction_id,
            actor=actor,
            module=module,
        )

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_CONTEXT.get())

    @classmethod
    def clear(cls) -> None:
        _CONTEXT.set({})

    @classmethod
    def bind(cls, **fields: str | None) -> "_Binding":
        """Context manager: set fields on entry, restore the previous context on exit."""
        unknown = set(fields) - set(cls.FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context fields: {', '.join(sorted(unknown))}")
        return _Binding(fields)

    @classmethod
    def _update(cls, **fields: str | None):
        current = dict(_CONTEXT.get())
        current.update({k: v for k, v in fields.items() if v is not None})
        return _CONTEXT.set(current)


class _Binding:

    def __init__(self, fields: dict[str, str | None]):
        self._fields = fields
        self._token = None

    def __enter__(self) -> type[LogContext]:
        self._token = LogContext._update(**self._fields)
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        _CONTEXT.reset(self._token)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord has; anything else on a record came from extra=
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(LogContext.get_all())
        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in entry
        )
        if record.exc_info and record.exc_info[1] is not None:
            entry.update(self._exception_fields(record))
        return json.dumps(entry, default=_to_json)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # LedgerError subclasses carry their details as attributes
        fields.update(
            (f"exc_{name}", value)
            for name, value in vars(exc).items()
            if not name.startswith("_")
        )
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Logger factory and setup
# ---------------------------------------------------------------------------

ROOT_LOGGER = "ledger_kernel"

_configured = False
_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Logger ``ledger_kernel.<name>``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the ledger logger tree.

    Only the first call has any effect.  ``level`` may be a name such as
    ``"debug"``; ``handler`` replaces the default stderr stream handler.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(target)


def reset_logging() -> None:
    """Undo ``configure_logging``. For tests."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
