"""Append-only log of statistics samples written during a run.

Every actor writes through ``Simulation.record(key, value)``, which stamps
the sample with the current virtual time. Nothing is aggregated here; the
Analyzer does all the work after the run.
"""

from __future__ import annotations

from collections import Counter
from typing import NamedTuple

import pandas as pd

# Keys written by the built-in actors
START_REQUEST = "start_request"
REQUEST_SENT = "request_sent"
REQUEST_SUCCEEDED = "request_succeeded"
REQUEST_FAILED = "request_failed"
REQUEST_TIMEDOUT = "request_timedout"
LATENCY = "latency"
SUCCESS_LATENCY = "success_latency"
FAILURE_LATENCY = "failure_latency"
WAIT = "wait"
QUEUE_FULL = "queue_full"
QUEUE_SIZE = "queue_size"


class StatSample(NamedTuple):
    """One immutable ``(time, key, value)`` observation."""
    time: float
    key: str
    value: float


class Recorder:
    """Container for stat samples in insertion order.

    Insertion order is also non-decreasing time order because every writer
    observes the simulation clock at the moment it records.
    """

    def __init__(self) -> None:
        self._samples: list[StatSample] = []

    def record(self, time: float, key: str, value: float) -> None:
        """Append a sample.

        Args:
            time: Virtual time of the observation.
            key: Series name, e.g. ``"latency"``.
            value: Numeric value.
        """
        self._samples.append(StatSample(time, key, value))

    @property
    def samples(self) -> tuple[StatSample, ...]:
        """All samples so far. A snapshot; later records are not reflected."""
        return tuple(self._samples)

    def keys(self) -> set[str]:
        return {sample.key for sample in self._samples}

    def count(self, key: str) -> int:
        """Number of samples recorded under ``key``."""
        return sum(1 for sample in self._samples if sample.key == key)

    def counts(self) -> Counter[str]:
        return Counter(sample.key for sample in self._samples)

    def values(self, key: str) -> list[float]:
        return [sample.value for sample in self._samples if sample.key == key]

    def last_time(self) -> float | None:
        return self._samples[-1].time if self._samples else None

    def to_dataframe(self) -> pd.DataFrame:
        """Long-format DataFrame with columns ``time``, ``key``, ``value``."""
        return pd.DataFrame(self._samples, columns=list(StatSample._fields))

    def __len__(self) -> int:
        return len(self._samples)

    def __bool__(self) -> bool:
        return len(self._samples) > 0
