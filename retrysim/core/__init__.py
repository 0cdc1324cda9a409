"""Core simulation engine components."""

from retrysim.core.event import Event
from retrysim.core.event_heap import EventHeap
from retrysim.core.simulation import MIN_DELAY_MS, Simulation

__all__ = [
    "Event",
    "EventHeap",
    "MIN_DELAY_MS",
    "Simulation",
]
