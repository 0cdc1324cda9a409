"""Periodic generator of Requests."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from retrysim.components.network import Network
from retrysim.components.request import Request
from retrysim.config import ClientConfig
from retrysim.core.simulation import Simulation

if TYPE_CHECKING:
    from retrysim.components.server import Server

logger = logging.getLogger(__name__)


class Client:
    """Spawns Requests against a server pool after a sampled think time.

    Closed-loop by default: the next spawn is scheduled when the previous
    request completes (success or give-up), so a client has at most one
    request outstanding. With ``config.open_loop`` the next spawn is scheduled
    right after each spawn, regardless of outcomes.
    """

    def __init__(
        self,
        sim: Simulation,
        network: Network,
        servers: Sequence[Server],
        config: ClientConfig | None = None,
    ):
        if not servers:
            raise ValueError("Client needs at least one server")

        self.sim = sim
        self.network = network
        self.servers = servers
        self.config = config if config is not None else ClientConfig()
        self.stats_spawned = 0
        self.stats_succeeded = 0
        self.stats_given_up = 0

        self._go()

    def _go(self) -> None:
        self.sim.schedule(self.config.interval.sample(self.sim.rng), self._spawn)

    def _spawn(self) -> None:
        self.stats_spawned += 1
        Request(self.sim, self.network, self.servers, self.config, done=self._request_done)
        if self.config.open_loop:
            self._go()

    def _request_done(self, succeeded: bool) -> None:
        if succeeded:
            self.stats_succeeded += 1
        else:
            self.stats_given_up += 1

        if self.config.done is not None:
            self.config.done(succeeded)
        if not self.config.open_loop:
            self._go()
