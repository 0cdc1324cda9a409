"""Tests for the Request retry state machine and its stale-response guard."""

import math

import pytest

from retrysim import (
    ClientConfig,
    Constant,
    ConstantBackoff,
    LinearBackoff,
    Network,
    NetworkConfig,
    Request,
    RequestState,
    Server,
    ServerConfig,
)


def _server(sim, network, **overrides):
    config = dict(proc_time=Constant(50), queue_bound=math.inf, failure_probability=0.0)
    config.update(overrides)
    return Server(sim, network, ServerConfig(**config))


class TestSuccess:
    def test_single_attempt_success(self, sim, fixed_network, reliable_server):
        outcomes = []
        request = Request(
            sim, fixed_network, [reliable_server], ClientConfig(max_retries=0), done=outcomes.append
        )
        assert request.state == RequestState.SENT

        sim.run()

        counts = sim.recorder.counts()
        assert counts["start_request"] == 1
        assert counts["request_sent"] == 1
        assert counts["request_succeeded"] == 1
        assert counts["request_timedout"] == 0
        # 10ms there, 50ms processing, 10ms back
        assert sim.recorder.values("latency") == [70.0]
        assert sim.recorder.values("success_latency") == [70.0]
        assert outcomes == [True]
        assert request.state == RequestState.SUCCEEDED
        assert request.finished
        assert request.sequence_number == 1

    def test_late_timeout_is_ignored(self, sim, fixed_network, reliable_server):
        request = Request(sim, fixed_network, [reliable_server], ClientConfig(timeout_ms=1000))
        sim.run()
        # The timeout event still fired at t=1000 but was discarded
        assert sim.now == 1000
        assert sim.recorder.count("request_timedout") == 0
        assert request.outcomes_accepted == 1

    def test_done_falls_back_to_config(self, sim, fixed_network, reliable_server):
        outcomes = []
        Request(sim, fixed_network, [reliable_server], ClientConfig(done=outcomes.append))
        sim.run()
        assert outcomes == [True]

    def test_requires_servers(self, sim, fixed_network):
        with pytest.raises(ValueError):
            Request(sim, fixed_network, [])


class TestStaleResponses:
    def test_replayed_success_has_no_effect(self, sim, fixed_network, reliable_server):
        outcomes = []
        request = Request(sim, fixed_network, [reliable_server], done=outcomes.append)
        sim.run()

        samples_before = sim.recorder.samples
        request.request_succeeded(0)
        request.request_failed(0)
        request._request_timed_out(0)

        assert sim.recorder.samples == samples_before
        assert request.sequence_number == 1
        assert request.state == RequestState.SUCCEEDED
        assert outcomes == [True]

    def test_future_sequence_number_is_ignored(self, sim, fixed_network, reliable_server):
        request = Request(sim, fixed_network, [reliable_server])
        request.request_succeeded(5)
        assert request.sequence_number == 0
        assert sim.recorder.count("request_succeeded") == 0

    def test_reply_after_timeout_is_discarded(self, sim, fixed_network, reliable_server):
        # The reply needs 70ms but the timeout is 30ms, so every reply is stale
        config = ClientConfig(timeout_ms=30, max_retries=1, backoff=ConstantBackoff(1000))
        outcomes = []
        request = Request(sim, fixed_network, [reliable_server], config, done=outcomes.append)
        sim.run()

        counts = sim.recorder.counts()
        assert counts["request_sent"] == 2
        assert counts["request_timedout"] == 2
        assert counts["request_succeeded"] == 0
        assert reliable_server.stats_processed == 2
        assert outcomes == [False]
        assert request.state == RequestState.GIVEN_UP


class TestRetries:
    def test_failures_retry_until_exhausted(self, sim, fixed_network):
        server = _server(sim, fixed_network, failure_probability=1.0)
        outcomes = []
        config = ClientConfig(max_retries=3, backoff=LinearBackoff(100))
        request = Request(sim, fixed_network, [server], config, done=outcomes.append)
        sim.run()

        counts = sim.recorder.counts()
        assert counts["request_sent"] == 4
        assert counts["request_failed"] == 4
        assert counts["failure_latency"] == 4
        assert sim.recorder.values("wait") == [100, 200, 300]
        assert request.outcomes_accepted == 4
        assert outcomes == [False]

    def test_dropped_network_times_out_every_attempt(self, sim, fast_retry_config):
        network = Network(sim, NetworkConfig(drop_probability=1.0))
        server = _server(sim, network)
        outcomes = []
        request = Request(sim, network, [server], fast_retry_config, done=outcomes.append)
        sim.run()

        counts = sim.recorder.counts()
        assert counts["request_sent"] == 3
        assert counts["request_timedout"] == 3
        assert counts["request_succeeded"] == 0
        assert counts["request_failed"] == 0
        assert counts["wait"] == 2
        assert request.state == RequestState.GIVEN_UP
        assert outcomes == [False]
        # timeouts at 100, 210 and 320
        assert sim.now == 320

    def test_retry_then_success(self, sim, fixed_network):
        server = _server(sim, fixed_network)
        request = Request(sim, fixed_network, [server], ClientConfig(max_retries=2))
        # First attempt is answered with a failure before the server replies
        request.request_failed(0)
        assert request.state == RequestState.RETRYING
        sim.run()

        assert request.state == RequestState.SUCCEEDED
        assert sim.recorder.count("request_sent") == 2
        assert sim.recorder.count("request_succeeded") == 1
        assert request.sequence_number == 2

    def test_latency_measured_from_attempt_start(self, sim, fixed_network):
        server = _server(sim, fixed_network)
        request = Request(sim, fixed_network, [server], ClientConfig(backoff=ConstantBackoff(500)))
        request.request_failed(0)
        sim.run()
        # failure at t=0, retry at t=500, reply at t=570
        assert sim.recorder.values("success_latency") == [70.0]

    @pytest.mark.parametrize("max_retries", [0, 1, 4])
    def test_accepted_outcomes_bounded(self, sim, max_retries):
        network = Network(sim, NetworkConfig(latency=Constant(10), drop_probability=0.5))
        server = _server(sim, network, failure_probability=0.5)
        config = ClientConfig(timeout_ms=40, max_retries=max_retries, backoff=ConstantBackoff(5))
        requests = [Request(sim, network, [server], config) for _ in range(50)]
        sim.run()
        for request in requests:
            assert request.finished
            assert request.outcomes_accepted <= max_retries + 1
