"""Discrete-event driver: virtual clock, event heap and stat recorder.

A Simulation is the explicit context every actor receives. It owns the only
mutable state shared between actors (the pending events and the stat log) and
executes callbacks strictly one at a time in (time, insertion) order.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from itertools import count
from typing import TYPE_CHECKING, Any

from retrysim.core.event import Event
from retrysim.core.event_heap import EventHeap
from retrysim.instrumentation.analyzer import Analyzer
from retrysim.instrumentation.recorder import Recorder
from retrysim.instrumentation.summary import SimulationSummary

if TYPE_CHECKING:
    from retrysim.components.server import Server

logger = logging.getLogger(__name__)

MIN_DELAY_MS = 1.0
"""Every scheduled callback lies at least this far in the future."""


class Simulation:
    """Virtual-time scheduler plus the stat log of one run.

    Args:
        seed: Seed for ``rng``. Two runs with the same seed and the same
            model produce identical stat logs.
        start_time: Initial value of the virtual clock, in ms. Must not be negative.

    Attributes:
        now: Current virtual time in ms. Only advances when an event is popped.
        end_time: Horizon of the active or last run, or None when unbounded.
        rng: Random generator every actor samples from.
        recorder: Append-only stat log.
    """

    def __init__(self, seed: int | None = None, start_time: float = 0.0):
        if start_time < 0:
            raise ValueError(f"start_time must be non-negative, got {start_time}")
        self.now = start_time
        self.end_time: float | None = None
        self.rng = random.Random(seed)
        self.recorder = Recorder()
        self.events_processed = 0

        self._event_heap = EventHeap()
        self._sort_counter = count()
        self._servers: list[Server] = []
        self._running = False

    @property
    def pending(self) -> int:
        """Number of events waiting in the heap."""
        return self._event_heap.size()

    def register_server(self, server: Server) -> None:
        """Include a server's queue statistics in run summaries."""
        self._servers.append(server)

    def schedule(self, delay: float, callback: Callable[..., Any], *args: Any) -> Event | None:
        """Run ``callback(*args)`` after ``delay`` ms of virtual time.

        Delays below 1 ms are raised to 1 ms so time always advances. Events
        that would land at or past the horizon are silently not scheduled.

        Returns:
            The scheduled Event, or None if it fell past the horizon.
        """
        if delay < MIN_DELAY_MS:
            delay = MIN_DELAY_MS
        t = self.now + delay
        if self.end_time is not None and t >= self.end_time:
            return None

        event = Event(t, callback, args, next(self._sort_counter))
        self._event_heap.push(event)
        return event

    def record(self, key: str, value: float) -> None:
        """Append ``(now, key, value)`` to the stat log."""
        self.recorder.record(self.now, key, value)

    def analyzer(self) -> Analyzer:
        """Analyzer over everything recorded so far."""
        return Analyzer(self.recorder.samples)

    def run(self, max_duration: float | None = None) -> SimulationSummary:
        """Process events until the heap is empty or the horizon is reached.

        Args:
            max_duration: Virtual ms to run from ``now``. None runs until no
                events remain.

        Returns:
            SimulationSummary describing the run.

        Raises:
            ValueError: If max_duration is negative.
            RuntimeError: If called from inside a running callback.
        """
        if self._running:
            raise RuntimeError("Simulation.run() is not re-entrant")
        if max_duration is not None and max_duration < 0:
            raise ValueError(f"max_duration must be non-negative, got {max_duration}")

        self.end_time = self.now + max_duration if max_duration is not None else None
        start_ms = self.now
        processed_before = self.events_processed
        discarded = 0
        end_reason = "queue_empty"
        wall_start = time.perf_counter()

        logger.info(
            "Simulation started: %d pending events, horizon=%s",
            self._event_heap.size(),
            self.end_time,
            extra={"sim_time": self.now},
        )

        self._running = True
        try:
            while self._event_heap.has_events():
                event = self._event_heap.pop()

                if self.end_time is not None and event.time >= self.end_time:
                    discarded = self._event_heap.clear() + 1
                    end_reason = "time_limit"
                    logger.info(
                        "Stop due to time with %d events left",
                        discarded,
                        extra={"sim_time": self.now},
                    )
                    break

                self.now = event.time
                event.invoke()
                self.events_processed += 1
        finally:
            self._running = False

        wall_clock = time.perf_counter() - wall_start
        summary = SimulationSummary(
            start_ms=start_ms,
            end_ms=self.now,
            end_reason=end_reason,
            total_events_processed=self.events_processed - processed_before,
            events_discarded=discarded,
            samples_recorded=len(self.recorder),
            wall_clock_seconds=wall_clock,
            servers={server.name: server.queue_stats() for server in self._servers},
        )
        logger.info(
            "Simulation complete in %.3fs: %d events processed",
            wall_clock,
            summary.total_events_processed,
            extra={"sim_time": self.now},
        )
        return summary

    def __repr__(self) -> str:
        return f"Simulation(now={self.now}, pending={self.pending}, samples={len(self.recorder)})"
