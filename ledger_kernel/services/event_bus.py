"""
EventBus -- typed publish/subscribe for cross-module signals.

Responsibility:
    Carries approval and rejection outcomes from the finance side to the
    originating modules (welfare, procurement, payroll) over named topics,
    one topic per signal, each with a fixed payload type.

Architecture position:
    Kernel > Services.  Published to by the post-approval coordinator,
    consumed by the module-side consumers in ``ledger_modules``.

Invariants enforced:
    - A payload must be an instance of its topic's payload type.
    - Messages carry a monotonically increasing ``seq`` and are delivered
      in publish order.
    - Delivery is at-least-once: a subscriber that raises keeps the
      message in the retry queue until it succeeds or runs out of
      attempts.  Exhausted deliveries move to the dead-letter list.

Failure modes:
    - UnknownTopicError when publishing or subscribing on an unregistered
      topic.
    - TopicPayloadError on a payload of the wrong type.
    - Subscriber exceptions never propagate to the publisher; they are
      logged and scheduled for redelivery.

Non-goals:
    - No persistence: queued retries live for the process lifetime.
    - No cross-process transport.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.topics import Topic, TopicPayload
from ledger_kernel.exceptions import TopicPayloadError, UnknownTopicError
from ledger_kernel.logging_config import get_logger

logger = get_logger("services.event_bus")

Handler = Callable[[TopicPayload], None]

DEFAULT_MAX_ATTEMPTS = 5


@dataclass(frozen=True)
class Message:
    """One published payload with its delivery metadata."""

    seq: int
    topic: str
    payload: TopicPayload
    published_at: datetime


@dataclass
class PendingDelivery:
    """A message still owed to one subscriber."""

    message: Message
    handler: Handler
    attempts: int = 0
    last_error: str | None = None


class EventBus:
    """In-process topic bus with ordered, at-least-once delivery."""

    def __init__(
        self,
        topics: Iterable[Topic] = (),
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Clock | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._topics: dict[str, Topic] = {}
        self._subscriptions: dict[str, list[Handler]] = {}
        self._retry_queue: list[PendingDelivery] = []
        self._in_flight: list[PendingDelivery] = []
        self._dead_letters: list[PendingDelivery] = []
        self._published: list[Message] = []
        self._seq = 0
        self._max_attempts = max_attempts
        self._clock = clock or SystemClock()
        for topic in topics:
            self.register(topic)

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def register(self, topic: Topic) -> None:
        existing = self._topics.get(topic.name)
        if existing is not None and existing.payload_type is not topic.payload_type:
            raise ValueError(
                f"Topic {topic.name} already registered with "
                f"{existing.payload_type.__name__}"
            )
        self._topics[topic.name] = topic
        self._subscriptions.setdefault(topic.name, [])

    def subscribe(self, topic: Topic, handler: Handler) -> None:
        self._require(topic.name)
        self._subscriptions[topic.name].append(handler)

    def unsubscribe(self, topic: Topic, handler: Handler) -> None:
        self._require(topic.name)
        self._subscriptions[topic.name] = [
            h for h in self._subscriptions[topic.name] if h != handler
        ]

    def publish(self, topic: Topic, payload: TopicPayload) -> Message:
        """Publish a payload and deliver it to every current subscriber."""
        registered = self._require(topic.name)
        if not isinstance(payload, registered.payload_type):
            raise TopicPayloadError(
                topic.name,
                registered.payload_type.__name__,
                type(payload).__name__,
            )

        self._seq += 1
        message = Message(
            seq=self._seq,
            topic=topic.name,
            payload=payload,
            published_at=self._clock.now(),
        )
        self._published.append(message)

        logger.info(
            "topic_message_published",
            extra={
                "topic": topic.name,
                "seq": message.seq,
                "correlation_id": payload.transaction_id,
                "subscriber_count": len(self._subscriptions[topic.name]),
            },
        )

        for handler in list(self._subscriptions[topic.name]):
            pending = PendingDelivery(message, handler)
            if self._has_backlog(handler):
                # Keep per-subscriber order: queue behind earlier failures.
                self._retry_queue.append(pending)
            else:
                self._attempt(pending)
        return message

    def redeliver(self) -> int:
        """Retry queued deliveries, oldest message first.

        A subscriber whose retry fails again keeps the rest of its backlog
        queued (untouched) until the next pass, so it never sees a later
        message before an earlier one.  Messages published by a handler
        during the pass queue behind that subscriber's unfinished retries.
        Returns the number of deliveries that succeeded in this pass.
        """
        self._in_flight = sorted(self._retry_queue, key=lambda d: d.message.seq)
        self._retry_queue = []
        blocked: list[Handler] = []
        delivered = 0
        while self._in_flight:
            pending = self._in_flight.pop(0)
            if any(pending.handler is h for h in blocked):
                self._retry_queue.append(pending)
                continue
            if self._attempt(pending):
                delivered += 1
            elif pending in self._retry_queue:
                blocked.append(pending.handler)
        return delivered

    def pending_deliveries(self) -> list[PendingDelivery]:
        return list(self._retry_queue)

    def dead_letters(self) -> list[PendingDelivery]:
        return list(self._dead_letters)

    def published(self, topic: Topic | None = None) -> list[Message]:
        if topic is None:
            return list(self._published)
        return [m for m in self._published if m.topic == topic.name]

    def _attempt(self, pending: PendingDelivery) -> bool:
        pending.attempts += 1
        try:
            pending.handler(pending.message.payload)
        except Exception as exc:
            pending.last_error = f"{type(exc).__name__}: {exc}"
            if pending.attempts >= self._max_attempts:
                self._dead_letters.append(pending)
                logger.error(
                    "topic_delivery_dead_lettered",
                    exc_info=True,
                    extra={
                        "topic": pending.message.topic,
                        "seq": pending.message.seq,
                        "attempts": pending.attempts,
                    },
                )
            else:
                self._retry_queue.append(pending)
                logger.warning(
                    "topic_delivery_failed",
                    exc_info=True,
                    extra={
                        "topic": pending.message.topic,
                        "seq": pending.message.seq,
                        "attempts": pending.attempts,
                    },
                )
            return False
        return True

    def _has_backlog(self, handler: Handler) -> bool:
        return any(
            p.handler is handler for p in (*self._retry_queue, *self._in_flight)
        )

    def _require(self, name: str) -> Topic:
        topic = self._topics.get(name)
        if topic is None:
            raise UnknownTopicError(name)
        return topic


class IdempotentConsumer:
    """Wraps a handler so redelivered messages are applied once.

    Duplicates are detected on (topic name, transaction id), the
    correlation id every payload carries.
    """

    def __init__(self, topic: Topic, handler: Handler) -> None:
        self._topic = topic
        self._handler = handler
        self._seen: set[tuple[str, str]] = set()

    def __repr__(self) -> str:
        return f"IdempotentConsumer({self._topic.name}, {self._handler!r})"

    def __call__(self, payload: TopicPayload) -> None:
        key = (self._topic.name, payload.transaction_id)
        if key in self._seen:
            logger.debug(
                "duplicate_message_skipped",
                extra={"topic": self._topic.name, "correlation_id": payload.transaction_id},
            )
            return
        self._handler(payload)
        self._seen.add(key)
