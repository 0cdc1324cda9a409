"""One logical client transaction and its retry protocol.

A Request sends an attempt to a random server, arms a timeout, and waits.
The first of {success, failure, timeout} to arrive for the current attempt
decides its outcome; failures and timeouts are retried after a backoff until
``max_retries`` is exhausted.

Replies can be lost, reordered, or arrive after the timeout already fired.
The sequence number is what keeps outcomes exactly-once: every callback
carries the number of the attempt it belongs to, and only a callback whose
number matches the current one is accepted. Accepting bumps the number, so
any later callback for the same attempt is ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

from retrysim.components.network import Network
from retrysim.config import ClientConfig, DoneCallback
from retrysim.core.simulation import Simulation
from retrysim.instrumentation.recorder import (
    FAILURE_LATENCY,
    LATENCY,
    REQUEST_FAILED,
    REQUEST_SENT,
    REQUEST_SUCCEEDED,
    REQUEST_TIMEDOUT,
    START_REQUEST,
    SUCCESS_LATENCY,
    WAIT,
)

if TYPE_CHECKING:
    from retrysim.components.server import Server

logger = logging.getLogger(__name__)


class RequestState(Enum):
    """Lifecycle of a Request."""

    SENT = "sent"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    RETRYING = "retrying"
    GIVEN_UP = "given_up"


TERMINAL_STATES = frozenset({RequestState.SUCCEEDED, RequestState.GIVEN_UP})


class Request:
    """A retried transaction against a pool of servers.

    The first attempt is sent from the constructor.

    Args:
        sim: Simulation context.
        network: Transport for attempts and their replies.
        servers: Pool to pick a server from, uniformly, on every attempt.
        config: Retry settings. Defaults to ``ClientConfig()``.
        done: Completion callback. Falls back to ``config.done``.
    """

    def __init__(
        self,
        sim: Simulation,
        network: Network,
        servers: Sequence[Server],
        config: ClientConfig | None = None,
        done: DoneCallback | None = None,
    ):
        if not servers:
            raise ValueError("Request needs at least one server")

        self.sim = sim
        self.network = network
        self.servers = servers
        self.config = config if config is not None else ClientConfig()
        self.done = done if done is not None else self.config.done

        self.sequence_number = 0
        self.start_time = sim.now
        self.state = RequestState.SENT
        self.outcomes_accepted = 0

        self.sim.record(START_REQUEST, 1)
        self._retry()

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def _expected_response(self, seq: int) -> bool:
        """Accept ``seq`` once, if it belongs to the current attempt."""
        if seq != self.sequence_number:
            return False
        self.sequence_number += 1
        self.outcomes_accepted += 1
        return True

    def _retry(self) -> None:
        self.state = RequestState.SENT
        self.start_time = self.sim.now

        server = self.sim.rng.choice(self.servers)

        self.sim.record(REQUEST_SENT, 1)
        self.network.send(server.receive_request, self, self.sequence_number)
        self.sim.schedule(self.config.timeout_ms, self._request_timed_out, self.sequence_number)

    def request_succeeded(self, seq: int) -> None:
        """Reply from a server: attempt ``seq`` was handled."""
        if not self._expected_response(seq):
            return

        self.state = RequestState.SUCCEEDED
        elapsed = self.sim.now - self.start_time
        self.sim.record(REQUEST_SUCCEEDED, 1)
        self.sim.record(LATENCY, elapsed)
        self.sim.record(SUCCESS_LATENCY, elapsed)

        if self.done is not None:
            self.done(True)

    def request_failed(self, seq: int) -> None:
        """Reply from a server: attempt ``seq`` failed or was rejected."""
        if not self._expected_response(seq):
            return

        self.state = RequestState.FAILED
        self._record_failure(REQUEST_FAILED)
        self._after_failure(seq)

    def _request_timed_out(self, seq: int) -> None:
        if not self._expected_response(seq):
            return

        self.state = RequestState.TIMED_OUT
        self._record_failure(REQUEST_TIMEDOUT)
        self._after_failure(seq)

    def _record_failure(self, key: str) -> None:
        elapsed = self.sim.now - self.start_time
        self.sim.record(key, 1)
        self.sim.record(LATENCY, elapsed)
        self.sim.record(FAILURE_LATENCY, elapsed)

    def _after_failure(self, seq: int) -> None:
        # seq is the attempt just closed; attempts are numbered from 0
        if seq < self.config.max_retries:
            self.state = RequestState.RETRYING
            wait = self.config.backoff.delay(seq, self.sim.rng)
            self.sim.record(WAIT, wait)
            self.sim.schedule(wait, self._retry)
            return

        self.state = RequestState.GIVEN_UP
        logger.debug("Request gave up after %d attempts", seq + 1)
        if self.done is not None:
            self.done(False)

    def __repr__(self) -> str:
        return f"Request(seq={self.sequence_number}, state={self.state.value})"
