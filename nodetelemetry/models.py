"""
Node Telemetry Data Models
==========================
Device status snapshot and its JSON wire form.

Field names are part of the collector contract and are kept verbatim.
"""

from dataclasses import dataclass, field
from typing import Iterable, NamedTuple

from .config import BANDWIDTH_SLOTS
from .errors import StatusDecodeError


# Every wire field except peers_count must be present on decode
REQUIRED_FIELDS = (
    "device_id",
    "device_owner",
    "device_version",
    "peer_id",
    "best_block_number",
    "finalized_block_number",
    "upload_bandwidth",
    "download_bandwidth",
    "uptime",
    "monitor_type",
    "monitor_sync_chains",
    "errors",
)


class SyncChain(NamedTuple):
    """A monitored chain and the height it has synced to."""
    chain_id: int
    height: int


def _zero_window() -> list:
    return [0] * BANDWIDTH_SLOTS


def to_sync_chains(chains: Iterable) -> list:
    """Normalize (chain_id, height) pairs into SyncChain values."""
    result = []
    for item in chains:
        try:
            chain_id, height = item
        except (TypeError, ValueError):
            raise StatusDecodeError(f"sync chain must be a (chain_id, height) pair, got {item!r}")
        result.append(SyncChain(int(chain_id), int(height)))
    return result


@dataclass
class DeviceStatus:
    """
    Point-in-time status of the node.

    Identity strings are empty when unset. Bandwidth lists hold one
    byte counter per interval, oldest first; the last element is the
    interval currently being filled.
    """
    device_id: str = ""
    device_owner: str = ""
    device_version: str = ""
    peer_id: str = ""

    peers_count: int = 0
    best_block_number: int = 0
    finalized_block_number: int = 0

    upload_bandwidth: list = field(default_factory=_zero_window)
    download_bandwidth: list = field(default_factory=_zero_window)

    uptime: int = 0
    monitor_type: int = 0
    monitor_sync_chains: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    def is_ready(self) -> bool:
        """True when the identity is complete enough to be reported."""
        return bool(self.device_id and self.device_owner and self.peer_id)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "device_id": self.device_id,
            "device_owner": self.device_owner,
            "device_version": self.device_version,
            "peer_id": self.peer_id,
            "peers_count": self.peers_count,
            "best_block_number": self.best_block_number,
            "finalized_block_number": self.finalized_block_number,
            "upload_bandwidth": list(self.upload_bandwidth),
            "download_bandwidth": list(self.download_bandwidth),
            "uptime": self.uptime,
            "monitor_type": self.monitor_type,
            "monitor_sync_chains": [[c.chain_id, c.height] for c in self.monitor_sync_chains],
            "errors": list(self.errors),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DeviceStatus":
        """
        Build a status from its wire form.

        Raises:
            StatusDecodeError: a required field is missing or malformed
        """
        if not isinstance(data, dict):
            raise StatusDecodeError(f"status must be an object, got {type(data).__name__}")

        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            raise StatusDecodeError(f"status is missing fields: {', '.join(missing)}")

        try:
            return cls(
                device_id=str(data["device_id"]),
                device_owner=str(data["device_owner"]),
                device_version=str(data["device_version"]),
                peer_id=str(data["peer_id"]),
                peers_count=int(data.get("peers_count", 0)),
                best_block_number=int(data["best_block_number"]),
                finalized_block_number=int(data["finalized_block_number"]),
                upload_bandwidth=[int(v) for v in data["upload_bandwidth"]],
                download_bandwidth=[int(v) for v in data["download_bandwidth"]],
                uptime=int(data["uptime"]),
                monitor_type=int(data["monitor_type"]),
                monitor_sync_chains=to_sync_chains(data["monitor_sync_chains"]),
                errors=[int(code) for code in data["errors"]],
            )
        except StatusDecodeError:
            raise
        except (TypeError, ValueError) as e:
            raise StatusDecodeError(f"invalid status field: {e}") from e
