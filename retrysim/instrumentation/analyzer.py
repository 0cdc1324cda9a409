"""Post-run slicing of the stat log into fixed-width time buckets.

Analyzer turns the flat ``(time, key, value)`` log into a list of Timeslices.
Each Timeslice answers sum / percentile / rate queries for its window and is
never modified after construction.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Sequence
from types import MappingProxyType

import numpy as np

from retrysim.instrumentation.recorder import StatSample

logger = logging.getLogger(__name__)


class Timeslice:
    """Samples observed in ``[t0, t0 + width)``, grouped by key.

    Args:
        samples: Samples that fall inside the window.
        t0: Window start in virtual ms.
        width: Window width in virtual ms.
    """

    __slots__ = ("_buckets", "t0", "width")

    def __init__(self, samples: Sequence[StatSample], t0: float, width: float):
        self.t0 = t0
        self.width = width

        grouped: dict[str, list[float]] = defaultdict(list)
        for sample in samples:
            grouped[sample.key].append(sample.value)

        buckets = {}
        for key, values in grouped.items():
            arr = np.asarray(values, dtype=float)
            arr.setflags(write=False)
            buckets[key] = arr
        self._buckets = MappingProxyType(buckets)

    @property
    def buckets(self) -> MappingProxyType:
        """Read-only mapping of key to the values seen in this window."""
        return self._buckets

    def has(self, key: str) -> bool:
        return key in self._buckets

    def count(self, key: str) -> int:
        values = self._buckets.get(key)
        return 0 if values is None else len(values)

    def sum(self, key: str) -> float:
        """Sum of the values for ``key``; 0 if the key is absent."""
        values = self._buckets.get(key)
        if values is None:
            return 0
        return float(np.sum(values))

    def percentile(self, p: float, key: str) -> float:
        """Nearest-rank percentile ``p`` in [0, 100] for ``key``; 0 if absent.

        Values are sorted ascending and the result is the value at index
        ``clamp(ceil(p / 100 * N), 0, N - 1)``. For ``[1, 2, 3, 4, 5]`` the
        50th percentile is therefore 4.
        """
        values = self._buckets.get(key)
        if values is None or len(values) == 0:
            return 0
        ordered = np.sort(values)
        n = len(ordered)
        ix = min(max(math.ceil((p / 100.0) * n), 0), n - 1)
        return float(ordered[ix])

    def rate(self, amount: float) -> float:
        """Turn an amount observed in this window into a per-second rate."""
        return amount / (self.width / 1000.0)

    def rate_sum(self, key: str) -> float:
        return self.rate(self.sum(key))

    def __repr__(self) -> str:
        return f"Timeslice(t0={self.t0}, width={self.width}, keys={sorted(self._buckets)})"


class Analyzer:
    """Slices a finished stat log into Timeslices."""

    def __init__(self, samples: Sequence[StatSample]):
        self.samples = tuple(samples)

    def slice(self, width: float) -> list[Timeslice]:
        """Partition the log into contiguous ``width``-ms buckets starting at 0.

        Buckets run up to the one holding the last sample. Windows with no
        samples still produce an (empty) Timeslice so the result has no gaps.

        Raises:
            ValueError: If width is not positive, or a sample lies before 0.
        """
        if not width > 0:
            raise ValueError(f"Bucket width must be positive, got {width}")
        if not self.samples:
            return []

        # Bucket count and membership share one index formula
        by_index: dict[int, list[StatSample]] = defaultdict(list)
        for sample in self.samples:
            by_index[int(sample.time // width)].append(sample)

        if min(by_index) < 0:
            raise ValueError("Samples must not precede t=0")
        last_index = max(by_index)
        slices = [Timeslice(by_index.get(k, ()), k * width, width) for k in range(last_index + 1)]

        logger.debug(
            "Sliced %d samples into %d buckets of %sms", len(self.samples), len(slices), width
        )
        return slices

    def chunk(self, n: int) -> list[Timeslice]:
        """Split the recorded span into exactly ``n`` equal-width buckets.

        The width is ``ceil((t_max + 1) / n)``; trailing windows past the last
        sample come back empty.

        Raises:
            ValueError: If n is less than 1.
        """
        if n < 1:
            raise ValueError(f"Bucket count must be at least 1, got {n}")
        if not self.samples:
            return []

        t_max = self.samples[-1].time
        width = math.ceil((t_max + 1) / n)
        slices = self.slice(width)
        while len(slices) < n:
            slices.append(Timeslice((), len(slices) * width, width))
        return slices
