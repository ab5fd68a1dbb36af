"""
Ledger configuration schema (``ledger_config.schema``).

``LedgerConfig`` is the only configuration object the rest of the system
sees.  It is frozen; build a new one to change anything.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EventBusConfig:
    max_delivery_attempts: int = 5


@dataclass(frozen=True)
class LedgerConfig:
    """
    Runtime settings for one ledger process.

    Attributes:
        currency: Currency code stamped on synthesized transactions
            (offering income).
        database_url: SQLAlchemy URL of the journal database.  ``None``
            keeps the ledger in memory only.
        log_level: Level for the ``ledger_kernel`` logger hierarchy.
        default_approver: Label used by the CLI when no approver is named.
        event_bus: Delivery settings for cross-module topics.

    The approval threshold is fixed policy and has no setting.
    """

    currency: str = "KSh"
    database_url: str | None = None
    log_level: str = "INFO"
    default_approver: str = "Finance Manager"
    event_bus: EventBusConfig = field(default_factory=EventBusConfig)
