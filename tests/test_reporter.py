"""
Reporter Tests
==============
Tests for the readiness gate, the reporting cycle and both loops.
"""

import logging
import time
from unittest.mock import patch

import pytest

from nodetelemetry.reporter import Reporter, next_tick, start_update_status
from nodetelemetry.status import StatusStore

URL = "http://collector.test"


def wait_for(condition, timeout: float = 2.0) -> bool:
    """Poll condition until true or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


@pytest.fixture
def make_reporter():
    """Build reporters and stop them after the test."""
    reporters = []

    def factory(store, collector, interval=3600, bandwidth_interval=3600):
        reporter = Reporter(
            store, URL, interval,
            bandwidth_interval=bandwidth_interval,
            transport=collector.transport,
        )
        reporters.append(reporter)
        return reporter

    yield factory

    for reporter in reporters:
        reporter.stop(timeout=2.0)


class TestNextTick:
    """Fixed-period schedule arithmetic."""

    def test_next_after_now(self):
        assert next_tick(100.0, 10.0, 100.0) == 110.0
        assert next_tick(100.0, 10.0, 105.0) == 110.0

    def test_missed_ticks_skipped(self):
        """An overrun lands on the next slot of the schedule grid."""
        assert next_tick(100.0, 10.0, 137.0) == 140.0

    def test_before_start(self):
        assert next_tick(100.0, 10.0, 90.0) == 100.0


class TestReportOnce:
    """One reporting cycle."""

    def test_skip_when_not_ready(self, store, collector, make_reporter, caplog):
        store.set_device_id("")
        store.set_device_owner("x")
        store.set_peer_id("y")
        reporter = make_reporter(store, collector)

        with caplog.at_level(logging.DEBUG, logger="nodetelemetry.reporter"):
            assert reporter.report_once() is False

        assert collector.requests == []
        assert reporter.get_stats()['reports_skipped'] == 1
        assert any("skip update status" in r.getMessage() for r in caplog.records)

    def test_sends_snapshot_when_ready(self, ready_store, collector, make_reporter):
        ready_store.set_peers_count(4)
        ready_store.add_download(512)
        reporter = make_reporter(ready_store, collector)

        assert reporter.report_once() is True

        params = collector.requests[0]["params"]
        assert params["device_id"] == "0xabc"
        assert params["peers_count"] == 4
        assert params["download_bandwidth"][-1] == 512
        assert len(params["upload_bandwidth"]) == 30
        assert reporter.get_stats()['reports_sent'] == 1
        assert reporter.get_stats()['last_report_ts']

    def test_transport_failure_swallowed(self, ready_store, failing_collector, make_reporter, caplog):
        reporter = make_reporter(ready_store, failing_collector)

        with caplog.at_level(logging.ERROR, logger="nodetelemetry.reporter"):
            assert reporter.report_once() is False

        assert reporter.get_stats()['reports_failed'] == 1
        assert any("update status to telemetry failed" in r.getMessage() for r in caplog.records)

    def test_protocol_error_counted(self, ready_store, make_collector, make_reporter):
        collector = make_collector({"jsonrpc": "2.0", "error": {"code": -1, "message": "bad"}, "id": 1})
        reporter = make_reporter(ready_store, collector)

        assert reporter.report_once() is False

        stats = reporter.get_stats()
        assert stats['protocol_errors'] == 1
        assert stats['reports_failed'] == 0


class TestLoops:
    """Background threads."""

    def test_start_resets_current_interval(self, store, collector, make_reporter):
        """Bytes counted before start are dropped; closed slots and the head stay."""
        store.add_upload(2)
        for _ in range(29):
            store.rotate_bandwidth()
        store.add_upload(5)
        assert store.snapshot().upload_bandwidth[0] == 2
        reporter = make_reporter(store, collector)

        reporter.start()

        upload = store.snapshot().upload_bandwidth
        assert len(upload) == 30
        assert upload[0] == 2
        assert upload[-1] == 0
        assert 5 not in upload
        assert reporter.get_stats()['rotations'] == 0

    def test_first_report_immediate(self, ready_store, collector, make_reporter):
        reporter = make_reporter(ready_store, collector)
        reporter.start()

        assert wait_for(lambda: len(collector.requests) == 1)

    def test_loop_keeps_running_after_failures(self, ready_store, failing_collector, make_reporter):
        reporter = make_reporter(ready_store, failing_collector, interval=0.05)
        reporter.start()

        assert wait_for(lambda: reporter.get_stats()['reports_failed'] >= 3)

    def test_loop_skips_until_ready(self, store, collector, make_reporter):
        reporter = make_reporter(store, collector, interval=0.05)
        reporter.start()

        assert wait_for(lambda: reporter.get_stats()['reports_skipped'] >= 2)
        assert collector.requests == []

        store.set_identity("0xabc", "alice", "peer")

        assert wait_for(lambda: len(collector.requests) >= 1)

    def test_rotator_ticks(self, store, collector, make_reporter):
        reporter = make_reporter(store, collector, bandwidth_interval=0.05)
        reporter.start()
        store.add_download(9)

        assert wait_for(lambda: reporter.get_stats()['rotations'] >= 4)
        download = store.snapshot().download_bandwidth
        assert len(download) == 30
        assert 9 in download[:-3]

    def test_stop_ends_threads(self, store, collector):
        reporter = Reporter(store, URL, 0.05, bandwidth_interval=0.05, transport=collector.transport)
        reporter.start()

        reporter.stop(timeout=2.0)

        assert all(not t.is_alive() for t in reporter.threads)


class TestValidation:
    """Constructor validation."""

    def test_reject_zero_interval(self, store):
        with pytest.raises(ValueError):
            Reporter(store, URL, 0)

    def test_reject_zero_bandwidth_interval(self, store):
        with pytest.raises(ValueError):
            Reporter(store, URL, 1, bandwidth_interval=0)


class TestEntryPoint:
    """start_update_status wiring."""

    def test_runs_reporter_in_caller_thread(self):
        store = StatusStore()
        with patch('nodetelemetry.reporter.Reporter.run') as run:
            start_update_status(URL, 10, store)
        run.assert_called_once_with()
