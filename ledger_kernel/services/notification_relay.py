"""
NotificationRelay -- in-process fan-out of ledger changes.

Responsibility:
    Decouples the transaction store from its listeners.  Keeps three
    independent subscriber lists:

    * transaction-list subscribers, handed the full current transaction
      list after every mutation;
    * pending-count subscribers, handed the size of the approval queue;
    * notification subscribers, handed structured ``Notification`` events
      (approval required / approved / rejected).

Architecture position:
    Kernel > Services.  Owned by the bootstrap container, injected into
    ``TransactionStore``.  Post-approval handlers register here as ordinary
    notification subscribers.

Delivery contract:
    Synchronous, in-process, best-effort.  A subscriber registered after
    an event fires never sees it.  A subscriber that raises is logged with
    its traceback; delivery to the remaining subscribers continues.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

from ledger_kernel.domain.notifications import Notification
from ledger_kernel.domain.transaction import Transaction
from ledger_kernel.logging_config import get_logger

logger = get_logger("services.notification_relay")

TransactionListSubscriber = Callable[[list[Transaction]], None]
PendingCountSubscriber = Callable[[int], None]
NotificationSubscriber = Callable[[Notification], None]

T = TypeVar("T")


class NotificationRelay:
    """Holds subscribers and delivers ledger events to them."""

    def __init__(self) -> None:
        self._transaction_subscribers: list[TransactionListSubscriber] = []
        self._pending_subscribers: list[PendingCountSubscriber] = []
        self._notification_subscribers: list[NotificationSubscriber] = []

    # -- subscription management --------------------------------------------

    def subscribe(self, callback: TransactionListSubscriber) -> None:
        self._transaction_subscribers.append(callback)

    def unsubscribe(self, callback: TransactionListSubscriber) -> None:
        self._transaction_subscribers = [
            sub for sub in self._transaction_subscribers if sub != callback
        ]

    def subscribe_to_pending_count(self, callback: PendingCountSubscriber) -> None:
        self._pending_subscribers.append(callback)

    def unsubscribe_from_pending_count(
        self, callback: PendingCountSubscriber
    ) -> None:
        self._pending_subscribers = [
            sub for sub in self._pending_subscribers if sub != callback
        ]

    def subscribe_to_notifications(self, callback: NotificationSubscriber) -> None:
        self._notification_subscribers.append(callback)

    def unsubscribe_from_notifications(
        self, callback: NotificationSubscriber
    ) -> None:
        self._notification_subscribers = [
            sub for sub in self._notification_subscribers if sub != callback
        ]

    # -- delivery -------------------------------------------------------------

    def publish_transactions(
        self,
        transactions: Sequence[Transaction],
        pending_count: int,
    ) -> None:
        """Deliver the current transaction list and pending-queue size."""
        for callback in list(self._transaction_subscribers):
            self._deliver("transactions", callback, list(transactions))
        for callback in list(self._pending_subscribers):
            self._deliver("pending_count", callback, pending_count)

    def publish_notification(self, notification: Notification) -> None:
        logger.info(
            "notification_published",
            extra={
                "notification_type": notification.type.value,
                "transaction_id": notification.transaction_id,
                "subscriber_count": len(self._notification_subscribers),
            },
        )
        for callback in list(self._notification_subscribers):
            self._deliver("notification", callback, notification)

    @staticmethod
    def _deliver(channel: str, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception:
            logger.error(
                "subscriber_failed",
                exc_info=True,
                extra={
                    "channel": channel,
                    "subscriber": getattr(callback, "__qualname__", repr(callback)),
                },
            )
