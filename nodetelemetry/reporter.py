"""
Telemetry Reporter
==================
Periodic driver that pushes the status snapshot to the collector.

Two background threads:
    Reporter-Bandwidth: rotates the bandwidth windows once per interval
    Reporter-Loop     : snapshots the store and reports it once per tick

Both tick on a fixed schedule measured from their own start, so a slow
collector delays a report but never shifts later ticks. Transport
failures are logged and counted; the next tick is the only retry.
"""

import time
import logging
from typing import Optional
from datetime import datetime
from threading import Thread, Event, Lock

import httpx

from .config import HTTP_TIMEOUT_SEC, BANDWIDTH_INTERVAL_SEC
from .errors import TransportError
from .rpc import RpcClient
from .status import StatusStore

logger = logging.getLogger(__name__)


def next_tick(start: float, interval: float, now: float) -> float:
    """
    First tick of the schedule start + k * interval that is after now.

    Ticks that were missed while a cycle overran are skipped.
    """
    elapsed = now - start
    if elapsed < 0:
        return start
    return start + (int(elapsed // interval) + 1) * interval


class Reporter:
    """
    Periodic status reporter.

    Owns one RpcClient for its whole life and shares the StatusStore
    with the hosting application.
    """

    def __init__(
        self,
        store: StatusStore,
        url: str,
        interval: float,
        timeout: float = HTTP_TIMEOUT_SEC,
        bandwidth_interval: float = BANDWIDTH_INTERVAL_SEC,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize reporter.

        Args:
            store: Status shared with the hosting application
            url: Collector endpoint
            interval: Seconds between reports
            timeout: HTTP request timeout in seconds
            bandwidth_interval: Seconds per bandwidth window slot
            transport: Optional httpx transport (tests use MockTransport)
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        if bandwidth_interval <= 0:
            raise ValueError("bandwidth_interval must be positive")

        self.store = store
        self.url = url
        self.interval = interval
        self.bandwidth_interval = bandwidth_interval
        self.client = RpcClient(url, timeout=timeout, transport=transport)

        self.stop_event = Event()
        self.threads: list = []

        # Statistics
        self._stats_lock = Lock()
        self._reports_sent = 0
        self._reports_failed = 0
        self._protocol_errors = 0
        self._reports_skipped = 0
        self._rotations = 0
        self._last_report_ts = ""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Start the rotator and the reporting loop in background threads."""
        self._start_bandwidth_rotator()

        t = Thread(
            target=self._report_loop,
            daemon=True,
            name="Reporter-Loop"
        )
        t.start()
        self.threads.append(t)

        logger.info(f"Reporting to {self.url} every {self.interval}s")

    def run(self):
        """Start the rotator and run the reporting loop in this thread."""
        self._start_bandwidth_rotator()
        logger.info(f"Reporting to {self.url} every {self.interval}s")
        self._report_loop()

    def stop(self, timeout: Optional[float] = None):
        """Wake both loops so they exit, then release the HTTP client."""
        self.stop_event.set()

        for t in self.threads:
            t.join(timeout=timeout)

        self.client.close()

    def _start_bandwidth_rotator(self):
        # Bytes counted before this run do not belong to its first interval
        self.store.reset_current_bandwidth()

        t = Thread(
            target=self._bandwidth_loop,
            daemon=True,
            name="Reporter-Bandwidth"
        )
        t.start()
        self.threads.append(t)

    # ------------------------------------------------------------------
    # Loops
    # ------------------------------------------------------------------

    def _wait_until(self, deadline: float) -> bool:
        """Sleep until deadline. Returns False if stop was requested."""
        delay = max(0.0, deadline - time.monotonic())
        return not self.stop_event.wait(delay)

    def _bandwidth_loop(self):
        start = time.monotonic()

        while self._wait_until(next_tick(start, self.bandwidth_interval, time.monotonic())):
            self._rotate()

        logger.debug("Bandwidth rotator stopped")

    def _report_loop(self):
        start = time.monotonic()
        deadline = start

        while self._wait_until(deadline):
            self.report_once()
            deadline = next_tick(start, self.interval, time.monotonic())

        logger.debug("Report loop stopped")

    def _rotate(self):
        self.store.rotate_bandwidth()
        with self._stats_lock:
            self._rotations += 1

    # ------------------------------------------------------------------
    # One cycle
    # ------------------------------------------------------------------

    def report_once(self) -> bool:
        """
        Snapshot the store and report it if the identity is complete.

        Returns:
            True if the collector accepted the report
        """
        status = self.store.snapshot()

        if not status.is_ready():
            logger.debug("skip update status")
            with self._stats_lock:
                self._reports_skipped += 1
            return False

        try:
            response = self.client.update_status(status)
        except TransportError as e:
            logger.error(f"update status to telemetry failed: {e}")
            with self._stats_lock:
                self._reports_failed += 1
            return False

        with self._stats_lock:
            self._last_report_ts = datetime.now().isoformat()
            if response.ok:
                self._reports_sent += 1
            else:
                self._protocol_errors += 1

        return response.ok

    def get_stats(self) -> dict:
        """Get reporting statistics."""
        with self._stats_lock:
            return {
                'reports_sent': self._reports_sent,
                'reports_failed': self._reports_failed,
                'protocol_errors': self._protocol_errors,
                'reports_skipped': self._reports_skipped,
                'rotations': self._rotations,
                'last_report_ts': self._last_report_ts,
            }


def start_update_status(url: str, interval: float, store: StatusStore):
    """Report store to url every interval seconds. Blocks forever."""
    Reporter(store, url, interval).run()
