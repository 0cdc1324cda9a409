"""Tests for the bounded FIFO Server."""

import math

import pytest

from retrysim import Constant, Server, ServerConfig


class StubRequest:
    """Collects the replies a server sends back."""

    def __init__(self, sim, name="stub"):
        self.sim = sim
        self.name = name
        self.replies = []

    def request_succeeded(self, seq):
        self.replies.append(("ok", seq, self.sim.now))

    def request_failed(self, seq):
        self.replies.append(("fail", seq, self.sim.now))


def _server(sim, network, **overrides):
    config = dict(proc_time=Constant(50), queue_bound=math.inf, failure_probability=0.0)
    config.update(overrides)
    return Server(sim, network, ServerConfig(**config))


class TestProcessing:
    def test_single_request_round_trip(self, sim, fixed_network):
        server = _server(sim, fixed_network)
        stub = StubRequest(sim)
        server.receive_request(stub, 0)
        sim.run()
        # 50ms processing + 10ms reply
        assert stub.replies == [("ok", 0, 60.0)]
        assert server.stats_processed == 1
        assert not server.busy

    def test_fifo_sequential_processing(self, sim, fixed_network):
        server = _server(sim, fixed_network)
        stubs = [StubRequest(sim, f"r{i}") for i in range(3)]
        for i, stub in enumerate(stubs):
            server.receive_request(stub, i)

        assert server.busy
        sim.run()

        finish = [stub.replies[0][2] for stub in stubs]
        assert finish == [60.0, 110.0, 160.0]

    def test_always_failing_server(self, sim, fixed_network):
        server = _server(sim, fixed_network, failure_probability=1.0)
        stub = StubRequest(sim)
        for seq in range(3):
            server.receive_request(stub, seq)
        sim.run()
        assert [kind for kind, _, _ in stub.replies] == ["fail"] * 3
        assert server.stats_failed == 3

    def test_records_queue_size_on_every_arrival(self, sim, fixed_network):
        server = _server(sim, fixed_network)
        stub = StubRequest(sim)
        for seq in range(3):
            server.receive_request(stub, seq)
        assert sim.recorder.values("queue_size") == [1, 2, 3]
        assert server.peak_depth == 3


class TestAdmission:
    def test_quick_reject_when_full(self, sim, fixed_network):
        server = _server(sim, fixed_network, queue_bound=1, quick_reject=True)
        stubs = [StubRequest(sim, f"r{i}") for i in range(3)]
        for stub in stubs:
            server.receive_request(stub, 0)

        assert sim.recorder.count("queue_full") == 2
        assert sim.recorder.values("queue_size") == [1, 1, 1]

        sim.run()

        assert stubs[0].replies == [("ok", 0, 60.0)]
        assert stubs[1].replies == [("fail", 0, 10.0)]
        assert stubs[2].replies == [("fail", 0, 10.0)]
        assert server.stats_rejected == 2

    def test_silent_drop_when_full(self, sim, fixed_network):
        server = _server(sim, fixed_network, queue_bound=1, quick_reject=False)
        stubs = [StubRequest(sim, f"r{i}") for i in range(3)]
        for stub in stubs:
            server.receive_request(stub, 0)
        sim.run()

        assert stubs[0].replies == [("ok", 0, 60.0)]
        assert stubs[1].replies == []
        assert stubs[2].replies == []
        assert sim.recorder.count("queue_full") == 0
        assert server.stats_dropped == 2

    @pytest.mark.parametrize("bound", [0, 1, 3])
    def test_queue_never_exceeds_bound(self, sim, fixed_network, bound):
        server = _server(sim, fixed_network, queue_bound=bound)
        stub = StubRequest(sim)
        for seq in range(10):
            sim.schedule(seq * 7, server.receive_request, stub, seq)
        sim.run()
        assert max(sim.recorder.values("queue_size")) <= bound
        assert server.peak_depth <= bound

    def test_queue_stats_snapshot(self, sim, fixed_network):
        server = _server(sim, fixed_network, queue_bound=1)
        stub = StubRequest(sim)
        server.receive_request(stub, 0)
        server.receive_request(stub, 1)
        sim.run()
        stats = server.queue_stats()
        assert stats.total_accepted == 1
        assert stats.total_rejected == 1
        assert stats.total_processed == 1
        assert stats.peak_depth == 1

    def test_summary_includes_registered_servers(self, sim, fixed_network):
        server = _server(sim, fixed_network)
        server.receive_request(StubRequest(sim), 0)
        summary = sim.run()
        assert summary.servers[server.name].total_processed == 1
