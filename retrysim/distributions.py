"""Sampling distributions and retry backoff policies.

All durations are virtual milliseconds. Distributions draw from the random
generator owned by the Simulation so that a seeded run is reproducible.

Backoff policies are pure functions of the retry index: the first retry of a
request uses index 0, the second index 1, and so on. Each Request therefore
walks its own backoff schedule instead of sharing a counter with other
requests from the same client.
"""

from __future__ import annotations

import logging
import math
import random
from abc import ABC, abstractmethod
from collections.abc import Callable

logger = logging.getLogger(__name__)

Milliseconds = float


def seconds(s: float) -> Milliseconds:
    """Convert seconds to virtual milliseconds."""
    return s * 1000.0


def minutes(m: float) -> Milliseconds:
    """Convert minutes to virtual milliseconds."""
    return m * 60_000.0


def chance(rng: random.Random, probability: float) -> bool:
    """Return True with the given probability."""
    return rng.random() < probability


class Distribution(ABC):
    """Source of random samples, typically durations in milliseconds."""

    @abstractmethod
    def sample(self, rng: random.Random) -> float:
        """Draw one value using the simulation's random generator."""
        raise NotImplementedError

    @property
    @abstractmethod
    def mean(self) -> float:
        """Theoretical mean of the distribution."""
        raise NotImplementedError


class Normal(Distribution):
    """Normal (Gaussian) distribution with an optional lower bound.

    Samples are not clamped unless ``min_val`` is given. Negative delays are
    harmless: the scheduler raises every delay to at least 1 ms.

    Args:
        mean: Mean of the distribution.
        std: Standard deviation. Must be non-negative.
        min_val: If set, samples below this value are clamped to it.
    """

    def __init__(self, mean: float, std: float, min_val: float | None = None):
        if std < 0:
            raise ValueError(f"Standard deviation must be non-negative, got {std}")
        self._mean = mean
        self.std = std
        self.min_val = min_val

    @property
    def mean(self) -> float:
        return self._mean

    def sample(self, rng: random.Random) -> float:
        value = rng.gauss(self._mean, self.std)
        if self.min_val is not None:
            return max(self.min_val, value)
        return value

    def __repr__(self) -> str:
        return f"Normal(mean={self._mean}, std={self.std})"


class Constant(Distribution):
    """Always returns the same value. Useful for deterministic tests."""

    def __init__(self, value: float):
        self.value = value

    @property
    def mean(self) -> float:
        return self.value

    def sample(self, rng: random.Random) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"Constant(value={self.value})"


class Exponential(Distribution):
    """Exponential distribution parameterized by its mean."""

    def __init__(self, mean: float):
        if mean <= 0:
            raise ValueError(f"Mean must be positive, got {mean}")
        self._mean = mean

    @property
    def mean(self) -> float:
        return self._mean

    def sample(self, rng: random.Random) -> float:
        return rng.expovariate(1.0 / self._mean)

    def __repr__(self) -> str:
        return f"Exponential(mean={self._mean})"


class Uniform(Distribution):
    """Uniform distribution over [low, high)."""

    def __init__(self, low: float, high: float):
        if low >= high:
            raise ValueError(f"Low must be less than high, got low={low}, high={high}")
        self.low = low
        self.high = high

    @property
    def mean(self) -> float:
        return (self.low + self.high) / 2.0

    def sample(self, rng: random.Random) -> float:
        return rng.uniform(self.low, self.high)

    def __repr__(self) -> str:
        return f"Uniform(low={self.low}, high={self.high})"


# =============================================================================
# Backoff policies
# =============================================================================


class BackoffPolicy(ABC):
    """Delay applied between a failed or timed-out attempt and the next retry."""

    @abstractmethod
    def delay(self, retry_index: int, rng: random.Random) -> Milliseconds:
        """Return the wait before retry number ``retry_index`` (0-based)."""
        raise NotImplementedError


class ConstantBackoff(BackoffPolicy):
    """Waits the same amount before every retry."""

    def __init__(self, delay_ms: Milliseconds = 1000.0):
        if delay_ms <= 0:
            raise ValueError(f"Backoff delay must be positive, got {delay_ms}")
        self.delay_ms = delay_ms

    def delay(self, retry_index: int, rng: random.Random) -> Milliseconds:
        return self.delay_ms

    def __repr__(self) -> str:
        return f"ConstantBackoff(delay_ms={self.delay_ms})"


class LinearBackoff(BackoffPolicy):
    """Waits ``step, 2*step, 3*step, ...``."""

    def __init__(self, step_ms: Milliseconds = 100.0):
        if step_ms <= 0:
            raise ValueError(f"Backoff step must be positive, got {step_ms}")
        self.step_ms = step_ms

    def delay(self, retry_index: int, rng: random.Random) -> Milliseconds:
        return self.step_ms * (retry_index + 1)

    def __repr__(self) -> str:
        return f"LinearBackoff(step_ms={self.step_ms})"


class QuadraticBackoff(BackoffPolicy):
    """Waits ``step, 4*step, 9*step, ...``."""

    def __init__(self, step_ms: Milliseconds = 100.0):
        if step_ms <= 0:
            raise ValueError(f"Backoff step must be positive, got {step_ms}")
        self.step_ms = step_ms

    def delay(self, retry_index: int, rng: random.Random) -> Milliseconds:
        return self.step_ms * (retry_index + 1) ** 2

    def __repr__(self) -> str:
        return f"QuadraticBackoff(step_ms={self.step_ms})"


class ExponentialBackoff(BackoffPolicy):
    """Doubles the wait on every retry: ``2*base, 4*base, 8*base, ...``.

    Args:
        base_ms: Starting value; the first retry already waits twice this.
        max_ms: Optional ceiling for the computed wait.
    """

    def __init__(self, base_ms: Milliseconds = 50.0, max_ms: Milliseconds | None = None):
        if base_ms <= 0:
            raise ValueError(f"Backoff base must be positive, got {base_ms}")
        if max_ms is not None and max_ms < base_ms:
            raise ValueError(f"max_ms ({max_ms}) must be >= base_ms ({base_ms})")
        self.base_ms = base_ms
        self.max_ms = max_ms

    def delay(self, retry_index: int, rng: random.Random) -> Milliseconds:
        # Cap the exponent so long retry chains stay finite
        value = self.base_ms * math.pow(2.0, min(retry_index + 1, 1000))
        if self.max_ms is not None:
            return min(value, self.max_ms)
        return value

    def __repr__(self) -> str:
        return f"ExponentialBackoff(base_ms={self.base_ms}, max_ms={self.max_ms})"


class JitteredBackoff(BackoffPolicy):
    """Full jitter: a uniform fraction in [0, 1) of the wrapped policy's wait."""

    def __init__(self, inner: BackoffPolicy):
        if not isinstance(inner, BackoffPolicy):
            raise TypeError(f"JitteredBackoff wraps a BackoffPolicy, got {type(inner).__name__}")
        self.inner = inner

    def delay(self, retry_index: int, rng: random.Random) -> Milliseconds:
        return rng.random() * self.inner.delay(retry_index, rng)

    def __repr__(self) -> str:
        return f"JitteredBackoff({self.inner!r})"


BACKOFFS: dict[str, Callable[[], BackoffPolicy]] = {
    "constant": ConstantBackoff,
    "constant-random": lambda: JitteredBackoff(ConstantBackoff()),
    "linear": LinearBackoff,
    "linear-random": lambda: JitteredBackoff(LinearBackoff()),
    "quadratic": QuadraticBackoff,
    "quadratic-random": lambda: JitteredBackoff(QuadraticBackoff()),
    "exponential": ExponentialBackoff,
    "exponential-random": lambda: JitteredBackoff(ExponentialBackoff()),
}


def backoff_from_name(name: str) -> BackoffPolicy:
    """Build one of the named backoff policies with its default parameters.

    Raises:
        ValueError: If the name is not one of ``BACKOFFS``.
    """
    try:
        factory = BACKOFFS[name]
    except KeyError:
        raise ValueError(
            f"Unknown backoff {name!r}; expected one of {sorted(BACKOFFS)}"
        ) from None
    policy = factory()
    logger.debug("Backoff %r resolved to %r", name, policy)
    return policy
