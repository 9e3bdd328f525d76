"""
Bandwidth Window
================
Fixed-length history of per-interval byte counters.
"""

from collections import deque

from ..config import BANDWIDTH_SLOTS


class BandwidthWindow:
    """
    Trailing window of byte counts, one slot per interval.

    Slots are ordered oldest first; the last slot accumulates the
    interval in progress. Not thread-safe on its own: StatusStore
    serializes every access under its lock.
    """

    def __init__(self, slots: int = BANDWIDTH_SLOTS):
        """
        Initialize window.

        Args:
            slots: Number of interval slots kept
        """
        if slots <= 0:
            raise ValueError("slots must be positive")

        self.slots = slots
        self._buckets: deque = deque([0] * slots, maxlen=slots)

    def add(self, num_bytes: int):
        """
        Add bytes to the current interval.

        Args:
            num_bytes: Bytes observed
        """
        if not self._buckets:
            return
        self._buckets[-1] += num_bytes

    def rotate(self):
        """Close the current interval: drop the oldest slot, open a zero slot."""
        # maxlen evicts the head
        self._buckets.append(0)

    def reset_current(self):
        """Discard the interval in progress and restart it at zero."""
        if not self._buckets:
            return
        self._buckets.pop()
        self._buckets.append(0)

    @property
    def current(self) -> int:
        """Bytes accumulated in the interval in progress."""
        return self._buckets[-1]

    def total(self) -> int:
        """Bytes across the whole window."""
        return sum(self._buckets)

    def to_list(self) -> list:
        """Copy of the slots, oldest first."""
        return list(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)
