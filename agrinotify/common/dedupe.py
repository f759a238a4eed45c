"""Bounded in-memory record of recently handled event ids.

This is only the fast path for duplicate rejection. The durable check (an
in-app notification carrying the same `event_id`) stays the source of truth,
so losing this cache on restart is harmless.
"""

from collections import OrderedDict


DEFAULT_MAX_ENTRIES = 10_000


class RecentEventCache:
    """LRU set of processed event ids plus the ids currently in flight.

    `claim` is synchronous on purpose: with no `await` between the membership
    check and the insert, two coroutines in the same event loop cannot both
    claim one id.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._processed: OrderedDict[str, None] = OrderedDict()
        self._in_flight: set[str] = set()

    def __contains__(self, event_id: str) -> bool:
        return event_id in self._processed

    def __len__(self) -> int:
        return len(self._processed)

    def seen(self, event_id: str) -> bool:
        """True when the id was processed recently or is being processed now."""

        if event_id in self._processed:
            self._processed.move_to_end(event_id)
            return True
        return event_id in self._in_flight

    def claim(self, event_id: str) -> bool:
        """Reserve an id for processing; False if it is already seen or claimed."""

        if self.seen(event_id):
            return False
        self._in_flight.add(event_id)
        return True

    def release(self, event_id: str) -> None:
        """Drop an in-flight claim without marking the id processed."""

        self._in_flight.discard(event_id)

    def mark_processed(self, event_id: str) -> None:
        self._in_flight.discard(event_id)
        self._processed[event_id] = None
        self._processed.move_to_end(event_id)
        while len(self._processed) > self.max_entries:
            self._processed.popitem(last=False)

    def clear(self) -> None:
        self._processed.clear()
        self._in_flight.clear()
