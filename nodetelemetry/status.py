"""
Status Store
============
Thread-safe owner of the node's DeviceStatus.

The hosting application writes fields through the setters from any
thread; the reporter reads deep copies through snapshot(). Bandwidth
increments and window rotation share the same lock, so no increment
is lost across a rotation.
"""

import copy
from threading import Lock
from typing import Iterable

from .models import DeviceStatus, SyncChain
from .stats.bandwidth import BandwidthWindow


class StatusStore:
    """
    Single lock-guarded DeviceStatus.

    Setters accept any value without validation and never block
    beyond the short critical section.
    """

    def __init__(self):
        self._status = DeviceStatus()
        self._upload = BandwidthWindow()
        self._download = BandwidthWindow()
        self._lock = Lock()

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def set_device_id(self, device_id: str):
        with self._lock:
            self._status.device_id = device_id

    def set_device_owner(self, device_owner: str):
        with self._lock:
            self._status.device_owner = device_owner

    def set_device_version(self, device_version: str):
        with self._lock:
            self._status.device_version = device_version

    def set_peer_id(self, peer_id: str):
        with self._lock:
            self._status.peer_id = peer_id

    def set_identity(self, device_id: str, device_owner: str, peer_id: str):
        """Set all fields checked by the readiness gate at once."""
        with self._lock:
            self._status.device_id = device_id
            self._status.device_owner = device_owner
            self._status.peer_id = peer_id

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    def set_peers_count(self, peers_count: int):
        with self._lock:
            self._status.peers_count = peers_count

    def set_best_block_number(self, number: int):
        with self._lock:
            self._status.best_block_number = number

    def set_finalized_block_number(self, number: int):
        with self._lock:
            self._status.finalized_block_number = number

    def set_uptime(self, uptime: int):
        with self._lock:
            self._status.uptime = uptime

    def set_monitor_sync_status(self, monitor_type: int, chains: Iterable):
        """
        Set the monitoring mode and its per-chain sync heights.

        Args:
            monitor_type: Raw monitor mode byte
            chains: (chain_id, height) pairs, order kept
        """
        sync_chains = [SyncChain(*pair) for pair in chains]
        with self._lock:
            self._status.monitor_type = monitor_type
            self._status.monitor_sync_chains = sync_chains

    def set_errors(self, codes: Iterable[int]):
        codes = list(codes)
        with self._lock:
            self._status.errors = codes

    # ------------------------------------------------------------------
    # Bandwidth
    # ------------------------------------------------------------------

    def add_upload(self, num_bytes: int):
        """Add uploaded bytes to the current interval."""
        with self._lock:
            self._upload.add(num_bytes)

    def add_download(self, num_bytes: int):
        """Add downloaded bytes to the current interval."""
        with self._lock:
            self._download.add(num_bytes)

    def rotate_bandwidth(self):
        """Advance both bandwidth windows by one interval."""
        with self._lock:
            self._upload.rotate()
            self._download.rotate()

    def reset_current_bandwidth(self):
        """Zero the interval in progress of both windows, older slots kept."""
        with self._lock:
            self._upload.reset_current()
            self._download.reset_current()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def snapshot(self) -> DeviceStatus:
        """Deep copy of the current status, unaffected by later writes."""
        with self._lock:
            status = copy.deepcopy(self._status)
            status.upload_bandwidth = self._upload.to_list()
            status.download_bandwidth = self._download.to_list()
        return status
