"""Single-worker server with a bounded FIFO queue.

Requests are handled first-come first-served, one at a time. Each takes a
sampled processing time and is answered through the network with either a
success or, with ``failure_probability``, a failure. When the queue is full
an arrival is either rejected right away (quick reject) or dropped.
"""

from __future__ import annotations

import logging
from collections import deque
from itertools import count
from typing import TYPE_CHECKING

from retrysim.components.network import Network
from retrysim.config import ServerConfig
from retrysim.core.simulation import Simulation
from retrysim.distributions import chance
from retrysim.instrumentation.recorder import QUEUE_FULL, QUEUE_SIZE
from retrysim.instrumentation.summary import QueueStats

if TYPE_CHECKING:
    from retrysim.components.request import Request

logger = logging.getLogger(__name__)

_server_ids = count()


class Server:
    """A server instance in the pool.

    Attributes:
        name: Identifier used in logs and summaries.
        queue: Pending ``(request, sequence_number)`` pairs, oldest first.
        busy: True while the worker is processing an item.
    """

    def __init__(
        self,
        sim: Simulation,
        network: Network,
        config: ServerConfig | None = None,
        name: str | None = None,
    ):
        self.sim = sim
        self.network = network
        self.config = config if config is not None else ServerConfig()
        self.name = name if name is not None else f"server-{next(_server_ids)}"

        self.queue: deque[tuple[Request, int]] = deque()
        self.busy = False

        self.stats_accepted = 0
        self.stats_rejected = 0
        self.stats_dropped = 0
        self.stats_processed = 0
        self.stats_failed = 0
        self.peak_depth = 0

        sim.register_server(self)

    @property
    def depth(self) -> int:
        """Number of requests waiting in the queue."""
        return len(self.queue)

    def receive_request(self, request: Request, sequence_number: int) -> None:
        """Admit an arriving attempt, or reject/drop it when the queue is full."""
        if len(self.queue) < self.config.queue_bound:
            self.queue.append((request, sequence_number))
            self.stats_accepted += 1
            self.peak_depth = max(self.peak_depth, len(self.queue))
            self._maybe_start_worker()
        elif self.config.quick_reject:
            self.stats_rejected += 1
            self.sim.record(QUEUE_FULL, 1)
            self.network.send(request.request_failed, sequence_number)
            logger.debug("[%s] Queue full, rejected attempt %d", self.name, sequence_number)
        else:
            self.stats_dropped += 1
            logger.debug("[%s] Queue full, dropped attempt %d", self.name, sequence_number)

        self.sim.record(QUEUE_SIZE, len(self.queue))

    def _maybe_start_worker(self) -> None:
        if self.busy or not self.queue:
            return
        self.busy = True
        self.sim.schedule(self.config.proc_time.sample(self.sim.rng), self._handle_first_request)

    def _handle_first_request(self) -> None:
        request, sequence_number = self.queue.popleft()
        self.stats_processed += 1

        if chance(self.sim.rng, self.config.failure_probability):
            self.stats_failed += 1
            self.network.send(request.request_failed, sequence_number)
        else:
            self.network.send(request.request_succeeded, sequence_number)

        self.busy = False
        self._maybe_start_worker()

    def queue_stats(self) -> QueueStats:
        return QueueStats(
            peak_depth=self.peak_depth,
            total_accepted=self.stats_accepted,
            total_rejected=self.stats_rejected,
            total_dropped=self.stats_dropped,
            total_processed=self.stats_processed,
            total_failed=self.stats_failed,
        )

    def __repr__(self) -> str:
        return f"Server({self.name}, depth={len(self.queue)}, busy={self.busy})"
