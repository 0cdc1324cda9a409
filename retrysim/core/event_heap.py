import heapq

from retrysim.core.event import Event


class EventHeap:
    def __init__(self, events: list[Event] | None = None):
        """Store Events directly on the heap.

        Event implements ordering by (time, sort_index), so there's no need
        to store (time, event) tuples.
        """
        self._heap = list(events) if events else []
        heapq.heapify(self._heap)

    def push(self, event: Event) -> None:
        heapq.heappush(self._heap, event)

    def pop(self) -> Event:
        return heapq.heappop(self._heap)

    def clear(self) -> int:
        """Drop every pending event and return how many were dropped."""
        dropped = len(self._heap)
        self._heap.clear()
        return dropped

    def has_events(self) -> bool:
        return bool(self._heap)

    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)
