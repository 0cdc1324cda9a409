"""Stat recording, slicing and series derivation."""

from retrysim.instrumentation.analyzer import Analyzer, Timeslice
from retrysim.instrumentation.recorder import Recorder, StatSample
from retrysim.instrumentation.series import (
    CHARTS,
    STANDARD_SERIES,
    Chart,
    Series,
    build_series,
    cumulative,
    series_frame,
    timeseries,
)
from retrysim.instrumentation.summary import QueueStats, SimulationSummary

__all__ = [
    "Analyzer",
    "CHARTS",
    "Chart",
    "QueueStats",
    "Recorder",
    "STANDARD_SERIES",
    "Series",
    "SimulationSummary",
    "StatSample",
    "Timeslice",
    "build_series",
    "cumulative",
    "series_frame",
    "timeseries",
]
