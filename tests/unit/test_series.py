"""Tests for chart series derived from Timeslices."""

import math

from retrysim import Series, StatSample, Timeslice, build_series, series_frame
from retrysim.instrumentation import CHARTS, STANDARD_SERIES, cumulative
from retrysim.instrumentation.series import percentile_series, rate_series, sum_series


def _slices():
    return [
        Timeslice(
            [StatSample(0, "request_sent", 1), StatSample(5, "request_sent", 1), StatSample(9, "latency", 70)],
            0,
            1000,
        ),
        Timeslice([], 1000, 1000),
        Timeslice([StatSample(2500, "request_sent", 1), StatSample(2600, "latency", 30)], 2000, 1000),
    ]


class TestSeries:
    def test_skips_slices_without_key(self):
        series = rate_series("TPS", "request_sent")(_slices())
        assert series.label == "TPS"
        assert series.points == [(0, 2.0), (2000, 1.0)]

    def test_percentile_series(self):
        series = percentile_series("p99", 99, "latency")(_slices())
        assert series.values() == [70, 30]
        assert series.times() == [0, 2000]

    def test_cumulative(self):
        series = cumulative(sum_series("Sent", "request_sent"))(_slices())
        assert series.values() == [2, 3]
        assert len(series) == 2

    def test_build_standard_series(self):
        built = build_series(_slices())
        assert set(built) == set(STANDARD_SERIES)
        assert all(isinstance(s, Series) for s in built.values())
        assert len(built["tps"]) == 2
        assert len(built["waitp50"]) == 0

    def test_charts_reference_standard_series(self):
        for chart in CHARTS:
            for name in chart.left + chart.right:
                assert name in STANDARD_SERIES

    def test_series_frame_aligns_on_t0(self):
        frame = series_frame(
            {
                "tps": Series("TPS", [(0, 2.0), (2000, 1.0)]),
                "latencies": Series("Latency", [(2000, 30.0)]),
            }
        )
        assert frame.index.name == "t0"
        assert list(frame.index) == [0.0, 2000.0]
        assert frame.loc[2000.0, "latencies"] == 30.0
        assert math.isnan(frame.loc[0.0, "latencies"])
