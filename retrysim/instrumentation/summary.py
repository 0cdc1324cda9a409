"""Simulation summary generated after a run completes.

SimulationSummary gives a structured overview of one ``Simulation.run()``
call, including per-server queue statistics when servers are attached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class QueueStats:
    """Queue statistics for one Server."""
    peak_depth: int
    total_accepted: int
    total_rejected: int
    total_dropped: int
    total_processed: int
    total_failed: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "peak_depth": self.peak_depth,
            "total_accepted": self.total_accepted,
            "total_rejected": self.total_rejected,
            "total_dropped": self.total_dropped,
            "total_processed": self.total_processed,
            "total_failed": self.total_failed,
        }


@dataclass
class SimulationSummary:
    """Auto-generated summary of a simulation run.

    Returned by Simulation.run().
    """
    start_ms: float
    end_ms: float
    end_reason: str
    total_events_processed: int
    events_discarded: int
    samples_recorded: int
    wall_clock_seconds: float
    servers: dict[str, QueueStats] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return self.end_ms - self.start_ms

    def __str__(self) -> str:
        lines = [
            "Simulation Summary",
            f"  Virtual time: {self.start_ms:.0f}ms -> {self.end_ms:.0f}ms ({self.end_reason})",
            f"  Wall clock: {self.wall_clock_seconds:.3f}s",
            f"  Events processed: {self.total_events_processed}",
            f"  Events discarded at horizon: {self.events_discarded}",
            f"  Samples recorded: {self.samples_recorded}",
        ]
        if self.servers:
            lines.append("  Servers:")
            for name, qs in self.servers.items():
                lines.append(
                    f"    {name}: peak={qs.peak_depth}, accepted={qs.total_accepted}, "
                    f"rejected={qs.total_rejected}, dropped={qs.total_dropped}, "
                    f"processed={qs.total_processed}, failed={qs.total_failed}"
                )
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "end_reason": self.end_reason,
            "total_events_processed": self.total_events_processed,
            "events_discarded": self.events_discarded,
            "samples_recorded": self.samples_recorded,
            "wall_clock_seconds": self.wall_clock_seconds,
            "servers": {name: qs.to_dict() for name, qs in self.servers.items()},
        }
