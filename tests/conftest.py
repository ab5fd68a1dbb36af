"""
Pytest fixtures for the ledger test suite.

Provides:
- A deterministic clock shared by the store, bus and coordinator
- An in-memory transaction store with its notification relay
- In-memory SQLite session factories for journal-backed tests
- A fully wired ledger (``build_ledger``) for end-to-end tests
- Draft factories with sensible defaults
- Structured-log capture
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest
from sqlalchemy.orm import sessionmaker

from ledger_config.schema import LedgerConfig
from ledger_kernel.db.engine import build_engine, create_tables
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.offering import OfferingBreakdown, OfferingDraft
from ledger_kernel.domain.topics import ALL_TOPICS
from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    TransactionDraft,
    TransactionType,
)
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.services.event_bus import EventBus
from ledger_kernel.services.journal import TransactionJournal
from ledger_kernel.services.notification_relay import NotificationRelay
from ledger_kernel.services.transaction_store import TransactionStore
from ledger_services.bootstrap import build_ledger


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, store):
            store.add_transaction(...)
            logs = captured_logs()
            assert any(r["message"] == "transaction_recorded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Core services
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2024, 1, 15, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def relay():
    return NotificationRelay()


@pytest.fixture
def store(relay, deterministic_clock):
    """In-memory store, no journal."""
    return TransactionStore(relay, clock=deterministic_clock)


@pytest.fixture
def bus(deterministic_clock):
    return EventBus(ALL_TOPICS, max_attempts=3, clock=deterministic_clock)


# =============================================================================
# Persistence
# =============================================================================


@pytest.fixture
def session_factory():
    """Session factory over a fresh in-memory SQLite database."""
    engine = build_engine("sqlite://")
    create_tables(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def journal(session_factory):
    return TransactionJournal(session_factory)


@pytest.fixture
def journaled_store(relay, deterministic_clock, journal):
    return TransactionStore(relay, clock=deterministic_clock, journal=journal)


@pytest.fixture
def ledger(deterministic_clock, session_factory):
    """Fully wired, journal-backed ledger."""
    return build_ledger(
        LedgerConfig(),
        clock=deterministic_clock,
        session_factory=session_factory,
    )


# =============================================================================
# Draft factories
# =============================================================================


@pytest.fixture
def make_draft():
    """
    Factory fixture for transaction drafts.

    Defaults describe a small Finance expense; override any field by
    keyword.
    """

    def _make(**overrides) -> TransactionDraft:
        fields = dict(
            date=date(2024, 1, 15),
            type=TransactionType.EXPENSE,
            category="Utilities",
            description="Monthly water bill",
            amount=Decimal("500"),
            payment_method=PaymentMethod.CASH,
            reference="REF-TEST",
            module=Module.FINANCE,
            created_by="Finance Officer",
        )
        fields.update(overrides)
        return TransactionDraft(**fields)

    return _make


@pytest.fixture
def gated_draft(make_draft):
    """A draft the approval gate holds: Inventory, above the threshold."""
    return make_draft(
        module=Module.INVENTORY,
        category="Equipment",
        description="Projector for main hall",
        amount=Decimal("150000"),
        reference="INV-001",
        created_by="Inventory Manager",
    )


@pytest.fixture
def make_offering():
    def _make(**overrides) -> OfferingDraft:
        fields = dict(
            date=date(2024, 1, 21),
            service_type="Sunday Service",
            minister="Pastor John",
            offerings=OfferingBreakdown(
                tithe=Decimal("45000"),
                special_offering=Decimal("12000"),
                thanksgiving=Decimal("8000"),
            ),
            collected_by="Usher Team",
            counted_by=("Grace", "Samuel"),
        )
        fields.update(overrides)
        return OfferingDraft(**fields)

    return _make
