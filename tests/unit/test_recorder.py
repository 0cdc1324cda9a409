"""Tests for the append-only stat log."""

from retrysim import Recorder, StatSample


class TestRecorder:
    def test_records_in_order(self):
        recorder = Recorder()
        recorder.record(0.0, "start_request", 1)
        recorder.record(10.0, "latency", 70.0)

        assert recorder.samples == (
            StatSample(0.0, "start_request", 1),
            StatSample(10.0, "latency", 70.0),
        )
        assert len(recorder) == 2
        assert recorder.last_time() == 10.0

    def test_samples_is_a_snapshot(self):
        recorder = Recorder()
        recorder.record(0.0, "wait", 5)
        snapshot = recorder.samples
        recorder.record(1.0, "wait", 6)
        assert len(snapshot) == 1

    def test_queries(self):
        recorder = Recorder()
        for t, key, value in [(0, "wait", 5), (1, "wait", 7), (2, "queue_size", 3)]:
            recorder.record(t, key, value)

        assert recorder.keys() == {"wait", "queue_size"}
        assert recorder.count("wait") == 2
        assert recorder.count("latency") == 0
        assert recorder.counts()["queue_size"] == 1
        assert recorder.values("wait") == [5, 7]

    def test_empty(self):
        recorder = Recorder()
        assert not recorder
        assert recorder.last_time() is None
        assert recorder.to_dataframe().empty

    def test_to_dataframe(self):
        recorder = Recorder()
        recorder.record(0.0, "request_sent", 1)
        recorder.record(70.0, "latency", 70.0)

        df = recorder.to_dataframe()
        assert list(df.columns) == ["time", "key", "value"]
        assert len(df) == 2
        assert df.loc[df["key"] == "latency", "value"].item() == 70.0

    def test_simulation_stamps_current_time(self, sim):
        sim.schedule(25, sim.record, "wait", 3)
        sim.run()
        assert sim.recorder.samples == (StatSample(25.0, "wait", 3),)
