"""Scheduled callbacks, the unit of work of the simulation.

An Event pairs a virtual time with a callable and its arguments. The callable
is normally a bound method (``server.receive_request``) so the target actor
travels with it; no name-based dispatch happens at run time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class Event:
    """A callback scheduled for a point in virtual time.

    Sorting uses (time, sort_index). ``sort_index`` is handed out by the
    owning Simulation in scheduling order, so events at the same instant run
    first-in first-out and a seeded run replays identically.

    Attributes:
        time: Virtual time (ms) at which the callback runs.
        callback: Function invoked with ``args``.
        args: Positional arguments for the callback.
        sort_index: Insertion order within the owning simulation.
    """

    __slots__ = ("args", "callback", "sort_index", "time")

    def __init__(
        self,
        time: float,
        callback: Callable[..., Any],
        args: tuple[Any, ...] = (),
        sort_index: int = 0,
    ):
        if not callable(callback):
            raise TypeError(f"Event callback must be callable, got {type(callback).__name__}")
        self.time = time
        self.callback = callback
        self.args = args
        self.sort_index = sort_index

    @property
    def label(self) -> str:
        """Readable name of the callback, e.g. ``Server._handle_first_request``."""
        return getattr(self.callback, "__qualname__", type(self.callback).__name__)

    def invoke(self) -> None:
        """Run the callback. Exceptions propagate to the run loop."""
        self.callback(*self.args)

    def __lt__(self, other: Event) -> bool:
        """
        1. Time (Primary)
        2. Insert Order (Secondary - FIFO for simultaneous events)
        """
        if self.time != other.time:
            return self.time < other.time
        return self.sort_index < other.sort_index

    def __repr__(self) -> str:
        return f"Event({self.time!r}, {self.label}, #{self.sort_index})"
