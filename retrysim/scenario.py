"""Build and run the standard client/server ramp-up scenario.

A scenario wires one Network, a pool of identical Servers and a population of
identical Clients. ``initial_clients`` start at time 0; the remaining
``final_clients - initial_clients`` join at evenly spaced points over the run
so load ramps up linearly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from retrysim.components.client import Client
from retrysim.components.network import Network
from retrysim.components.server import Server
from retrysim.config import ClientConfig, NetworkConfig, ServerConfig
from retrysim.core.simulation import Simulation
from retrysim.distributions import minutes
from retrysim.instrumentation.analyzer import Timeslice
from retrysim.instrumentation.series import Series, build_series
from retrysim.instrumentation.summary import SimulationSummary

logger = logging.getLogger(__name__)


@dataclass
class ScenarioConfig:
    """Everything needed to build and run one scenario.

    Attributes:
        network: Transport settings.
        server: Settings shared by every server.
        client: Settings shared by every client.
        server_count: Size of the server pool.
        initial_clients: Clients present from the start.
        final_clients: Clients present by the end of the ramp.
        duration_minutes: Virtual run length.
        bucket_ms: Width of the analysis buckets.
        seed: Random seed for the run.
    """

    network: NetworkConfig = field(default_factory=NetworkConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    server_count: int = 5
    initial_clients: int = 100
    final_clients: int = 1500
    duration_minutes: float = 10
    bucket_ms: float = 2000
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.server_count < 1:
            raise ValueError(f"server_count must be at least 1, got {self.server_count}")
        if self.initial_clients < 0 or self.final_clients < 0:
            raise ValueError("Client counts must be non-negative")
        if self.duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {self.duration_minutes}")
        if self.bucket_ms <= 0:
            raise ValueError(f"bucket_ms must be positive, got {self.bucket_ms}")

    @property
    def duration_ms(self) -> float:
        return minutes(self.duration_minutes)


@dataclass
class ScenarioResult:
    """Outcome of ``run_scenario``."""
    simulation: Simulation
    summary: SimulationSummary
    network: Network
    servers: list[Server]
    clients: list[Client]
    slices: list[Timeslice]
    series: dict[str, Series]


class Scenario:
    """Wires the actors of a ScenarioConfig into a fresh Simulation."""

    def __init__(self, config: ScenarioConfig):
        self.config = config
        self.sim = Simulation(seed=config.seed)
        self.network = Network(self.sim, config.network)
        self.servers = [
            Server(self.sim, self.network, config.server, name=f"server-{i}")
            for i in range(config.server_count)
        ]
        self.clients: list[Client] = []

        for _ in range(config.initial_clients):
            self._spawn_client()

        extra = max(0, config.final_clients - config.initial_clients)
        if extra:
            dt = config.duration_ms / extra
            for k in range(extra):
                self.sim.schedule((k + 1) * dt, self._spawn_client)

    def _spawn_client(self) -> None:
        self.clients.append(Client(self.sim, self.network, self.servers, self.config.client))

    def run(self) -> ScenarioResult:
        logger.info(
            "Running scenario: %d servers, %d -> %d clients over %.1f min",
            self.config.server_count,
            self.config.initial_clients,
            self.config.final_clients,
            self.config.duration_minutes,
        )
        summary = self.sim.run(self.config.duration_ms)
        slices = self.sim.analyzer().slice(self.config.bucket_ms)
        return ScenarioResult(
            simulation=self.sim,
            summary=summary,
            network=self.network,
            servers=self.servers,
            clients=self.clients,
            slices=slices,
            series=build_series(slices),
        )


def run_scenario(config: ScenarioConfig | None = None) -> ScenarioResult:
    """Build the scenario described by ``config`` and run it to its horizon."""
    return Scenario(config if config is not None else ScenarioConfig()).run()

