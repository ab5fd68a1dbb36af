"""
Injectable time source for the ledger.

Responsibility:
    The store, the event bus and the post-approval coordinator stamp
    ``created_at``, ``approved_at``, status-history rows and event
    timestamps from a ``Clock`` they were handed, never from
    ``datetime.now()``.

Architecture position:
    Kernel > Domain.  ``SystemClock`` is the only place the ledger reads
    wall-clock time.

Audit relevance:
    With a ``DeterministicClock`` an approval history replays to the same
    timestamps, so journal and summary tests compare exact values.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

# Monday morning of the first week the demo ledger covers
LEDGER_EPOCH = datetime(2024, 1, 15, 9, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of the current UTC instant."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        """Ledger date of ``now()``; transaction dates default to this."""
        return self.now().date()


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    ``now()`` is stable between calls.  ``advance`` and ``tick`` move it
    forward in whole seconds; ``set_time`` jumps to an instant and drops
    any accumulated offset.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or LEDGER_EPOCH

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def tick(self) -> datetime:
        """One second forward; returns the new instant."""
        self.advance()
        return self._current
