"""Lossy transport between clients and servers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from retrysim.config import NetworkConfig
from retrysim.core.simulation import Simulation
from retrysim.distributions import chance

logger = logging.getLogger(__name__)


class Network:
    """Delivers calls after a sampled latency, or loses them.

    A lost call leaves no trace at all: no event, no stat sample. The sender
    only notices through the absence of a reply. Because every delivery draws
    its own latency, two sends may arrive in the opposite order.
    """

    def __init__(self, sim: Simulation, config: NetworkConfig | None = None):
        self.sim = sim
        self.config = config if config is not None else NetworkConfig()
        self.stats_sent = 0
        self.stats_dropped = 0

    def send(self, callback: Callable[..., Any], *args: Any) -> None:
        """Transport a call: ``callback(*args)`` runs on arrival, if it arrives."""
        self.stats_sent += 1
        if chance(self.sim.rng, self.config.drop_probability):
            self.stats_dropped += 1
            logger.debug("Dropped call to %s", getattr(callback, "__qualname__", callback))
            return
        self.sim.schedule(self.config.latency.sample(self.sim.rng), callback, *args)
