"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    ``get_active_config()`` is the only way the rest of the system obtains
    settings.  It returns a frozen ``LedgerConfig`` built from the packaged
    defaults and an optional override file.

Architecture position:
    Configuration.  Sits beside ``ledger_kernel``; the kernel never imports
    from here, it receives plain values from the bootstrap container.

Failure modes:
    - ``ConfigurationError`` for a missing file, malformed YAML, unknown
      keys or invalid values.

Audit relevance:
    Every successful call logs a ``ledger_config_loaded`` entry naming the
    source file and the effective settings.
"""

from __future__ import annotations

from pathlib import Path

from ledger_config.loader import load_config
from ledger_config.schema import EventBusConfig, LedgerConfig
from ledger_kernel.logging_config import get_logger

_logger = get_logger("config")

__all__ = ["EventBusConfig", "LedgerConfig", "get_active_config"]


def get_active_config(path: Path | str | None = None) -> LedgerConfig:
    """The ONLY public configuration entrypoint."""
    config = load_config(path)
    _logger.info(
        "ledger_config_loaded",
        extra={
            "source": str(path) if path is not None else "defaults",
            "currency": config.currency,
            "persistent": config.database_url is not None,
            "max_delivery_attempts": config.event_bus.max_delivery_attempts,
        },
    )
    return config
