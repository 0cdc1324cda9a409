"""Chart-ready series derived from a list of Timeslices.

A series definition is a function ``slices -> Series``. Renderers only need
the label and the ``(t0, value)`` points; slices that never saw the queried
key are skipped rather than plotted as zero.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

import pandas as pd

from retrysim.instrumentation.analyzer import Timeslice
from retrysim.instrumentation.recorder import (
    FAILURE_LATENCY,
    LATENCY,
    QUEUE_FULL,
    QUEUE_SIZE,
    REQUEST_FAILED,
    REQUEST_SENT,
    REQUEST_SUCCEEDED,
    START_REQUEST,
    SUCCESS_LATENCY,
    WAIT,
)


@dataclass
class Series:
    """A labelled list of ``(t0, value)`` points."""
    label: str
    points: list[tuple[float, float]] = field(default_factory=list)

    def times(self) -> list[float]:
        return [t for t, _ in self.points]

    def values(self) -> list[float]:
        return [v for _, v in self.points]

    def __len__(self) -> int:
        return len(self.points)


SeriesDefinition = Callable[[Sequence[Timeslice]], Series]


def timeseries(label: str, key: str, query: Callable[[Timeslice], float]) -> SeriesDefinition:
    """Apply ``query`` to every slice that has ``key``."""

    def build(slices: Sequence[Timeslice]) -> Series:
        return Series(label, [(s.t0, query(s)) for s in slices if s.has(key)])

    return build


def percentile_series(label: str, p: float, key: str) -> SeriesDefinition:
    return timeseries(label, key, lambda s: s.percentile(p, key))


def rate_series(label: str, key: str) -> SeriesDefinition:
    return timeseries(label, key, lambda s: s.rate_sum(key))


def sum_series(label: str, key: str) -> SeriesDefinition:
    return timeseries(label, key, lambda s: s.sum(key))


def cumulative(definition: SeriesDefinition) -> SeriesDefinition:
    """Running total of another series."""

    def build(slices: Sequence[Timeslice]) -> Series:
        series = definition(slices)
        total = 0.0
        points = []
        for t0, value in series.points:
            total += value
            points.append((t0, total))
        return Series(series.label, points)

    return build


STANDARD_SERIES: dict[str, SeriesDefinition] = {
    "latencies": percentile_series("Latency (p99)", 99, LATENCY),
    "success_latencies": percentile_series("Success latency (p99)", 99, SUCCESS_LATENCY),
    "failure_latencies": percentile_series("Failure latency (p99)", 99, FAILURE_LATENCY),
    "queue_size": percentile_series("Queue size (p50)", 50, QUEUE_SIZE),
    "tps": rate_series("TPS", REQUEST_SENT),
    "successrate": rate_series("Success/s", REQUEST_SUCCEEDED),
    "failrate": rate_series("Failures/s", REQUEST_FAILED),
    "droprate": rate_series("Dropped/s", QUEUE_FULL),
    "requestrate": rate_series("Unique Requests/s", START_REQUEST),
    "waitp50": percentile_series("Backoff (p50)", 50, WAIT),
    "waitp99": percentile_series("Backoff (p99)", 99, WAIT),
    "uniques": cumulative(sum_series("Unique queries", START_REQUEST)),
    "served": cumulative(sum_series("Served queries", REQUEST_SUCCEEDED)),
    "useless": cumulative(sum_series("Wasted requests", REQUEST_FAILED)),
}


@dataclass(frozen=True)
class Chart:
    """A grouping of series names onto a left and an optional right axis."""
    caption: str
    left: tuple[str, ...]
    right: tuple[str, ...] = ()


CHARTS: tuple[Chart, ...] = (
    Chart("Transactions per second", ("tps", "successrate", "failrate")),
    Chart("Latencies vs. queue size", ("latencies", "success_latencies"), ("queue_size",)),
    Chart("Request count", ("uniques", "served", "useless")),
    Chart("Backoff times", ("waitp50", "waitp99")),
)


def build_series(
    slices: Sequence[Timeslice],
    definitions: Mapping[str, SeriesDefinition] = STANDARD_SERIES,
) -> dict[str, Series]:
    """Evaluate every definition over the same slices."""
    return {name: definition(slices) for name, definition in definitions.items()}


def series_frame(series: Mapping[str, Series]) -> pd.DataFrame:
    """Wide DataFrame indexed by bucket start, one column per series name.

    Buckets missing from a series show up as NaN.
    """
    columns = {
        name: pd.Series(s.values(), index=pd.Index(s.times(), dtype=float), dtype=float)
        for name, s in series.items()
    }
    frame = pd.DataFrame(columns)
    frame.index.name = "t0"
    return frame.sort_index()
