"""Typed configuration for the simulation actors.

Each actor takes one of these dataclasses. Omitted fields fall back to the
defaults below, and every field is validated in ``__post_init__`` so a bad
value fails before the event loop starts rather than halfway through a run.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field

from retrysim.distributions import (
    BackoffPolicy,
    ConstantBackoff,
    Distribution,
    Milliseconds,
    Normal,
)

DoneCallback = Callable[[bool], None]
"""Called with True when a request succeeds, False when it gives up."""


def _check_distribution(name: str, value: object) -> None:
    if not isinstance(value, Distribution):
        raise TypeError(f"{name} must be a Distribution, got {type(value).__name__}")


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be in [0, 1], got {value}")


@dataclass
class NetworkConfig:
    """Transport behavior shared by every actor.

    Attributes:
        latency: One-way delivery delay in milliseconds.
        drop_probability: Chance that a send is silently lost.
    """

    latency: Distribution = field(default_factory=lambda: Normal(10, 2))
    drop_probability: float = 0.0

    def __post_init__(self) -> None:
        _check_distribution("latency", self.latency)
        _check_probability("drop_probability", self.drop_probability)


@dataclass
class ServerConfig:
    """Queueing and failure behavior of a single server.

    Attributes:
        proc_time: Processing time per request in milliseconds.
        queue_bound: Maximum queued requests. ``math.inf`` for unbounded.
        failure_probability: Chance a processed request is answered with a failure.
        quick_reject: When the queue is full, answer with an immediate failure
            instead of silently dropping the arrival.
    """

    proc_time: Distribution = field(default_factory=lambda: Normal(50, 10))
    queue_bound: float = 1000
    failure_probability: float = 0.01
    quick_reject: bool = True

    def __post_init__(self) -> None:
        _check_distribution("proc_time", self.proc_time)
        _check_probability("failure_probability", self.failure_probability)
        if math.isnan(self.queue_bound) or self.queue_bound < 0:
            raise ValueError(f"queue_bound must be non-negative, got {self.queue_bound}")


@dataclass
class ClientConfig:
    """Request generation and retry behavior.

    Attributes:
        interval: Think time before each spawn, in milliseconds.
        backoff: Delay policy between a failed attempt and its retry.
        timeout_ms: How long an attempt may stay unanswered.
        max_retries: Retries allowed after the first attempt.
        open_loop: Spawn on a fixed cadence instead of waiting for the
            previous request to finish.
        done: Optional completion callback for every spawned request.
    """

    interval: Distribution = field(default_factory=lambda: Normal(1000, 100))
    backoff: BackoffPolicy = field(default_factory=ConstantBackoff)
    timeout_ms: Milliseconds = 120_000
    max_retries: int = 10
    open_loop: bool = False
    done: DoneCallback | None = None

    def __post_init__(self) -> None:
        _check_distribution("interval", self.interval)
        if not isinstance(self.backoff, BackoffPolicy):
            raise TypeError(f"backoff must be a BackoffPolicy, got {type(self.backoff).__name__}")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {self.max_retries}")
        if self.done is not None and not callable(self.done):
            raise TypeError("done must be callable")
