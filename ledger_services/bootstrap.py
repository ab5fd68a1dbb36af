"""
Process wiring (``ledger_services.bootstrap``).

Responsibility:
    Build the one ledger of the process: relay, event bus with every
    cross-module topic, transaction store (journal-backed when a database
    URL is configured), post-approval coordinator, the module-side
    consumers and the API facade.  Everything is constructed here and
    passed by reference; nothing is a module-level singleton.

Failure modes:
    - SQLAlchemy errors from engine creation or table creation propagate.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session, sessionmaker

from ledger_config.schema import LedgerConfig
from ledger_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
)
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.topics import ALL_TOPICS
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.event_bus import EventBus
from ledger_kernel.services.journal import TransactionJournal
from ledger_kernel.services.notification_relay import NotificationRelay
from ledger_kernel.services.transaction_store import TransactionStore
from ledger_modules.payroll.consumers import PayrollDisbursements
from ledger_modules.procurement.consumers import PurchaseOrders
from ledger_modules.welfare.consumers import WelfareApplications
from ledger_services.api import LedgerAPI
from ledger_services.post_approval import PostApprovalCoordinator

logger = get_logger("services.bootstrap")


@dataclass
class Ledger:
    """Everything one ledger process needs, already wired."""

    config: LedgerConfig
    clock: Clock
    relay: NotificationRelay
    bus: EventBus
    store: TransactionStore
    coordinator: PostApprovalCoordinator
    welfare: WelfareApplications
    procurement: PurchaseOrders
    payroll: PayrollDisbursements
    api: LedgerAPI
    journal: TransactionJournal | None = None


def build_ledger(
    config: LedgerConfig,
    clock: Clock | None = None,
    session_factory: sessionmaker[Session] | None = None,
) -> Ledger:
    """
    Construct and wire a ledger.

    ``session_factory`` overrides ``config.database_url`` (tests pass an
    in-memory SQLite factory).  With either, tables are created if needed
    and the store is restored from the journal.
    """
    clock = clock or SystemClock()

    if session_factory is None and config.database_url is not None:
        init_engine_from_url(config.database_url)
        create_tables()
        session_factory = get_session_factory()
    journal = TransactionJournal(session_factory) if session_factory else None

    relay = NotificationRelay()
    bus = EventBus(
        ALL_TOPICS,
        max_attempts=config.event_bus.max_delivery_attempts,
        clock=clock,
    )
    store = TransactionStore(
        relay,
        clock=clock,
        journal=journal,
        currency=config.currency,
    )

    welfare = WelfareApplications()
    procurement = PurchaseOrders()
    payroll = PayrollDisbursements()
    for consumer in (welfare, procurement, payroll):
        consumer.bind(bus)

    coordinator = PostApprovalCoordinator(store, bus, clock=clock)
    coordinator.attach(relay)

    if journal is not None:
        store.restore()

    logger.info(
        "ledger_built",
        extra={
            "persistent": journal is not None,
            "currency": config.currency,
            "topic_count": len(ALL_TOPICS),
        },
    )
    return Ledger(
        config=config,
        clock=clock,
        relay=relay,
        bus=bus,
        store=store,
        coordinator=coordinator,
        welfare=welfare,
        procurement=procurement,
        payroll=payroll,
        api=LedgerAPI(store),
        journal=journal,
    )
