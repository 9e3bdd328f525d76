"""
Node Telemetry Test Fixtures
============================
Shared pytest fixtures for all test modules.
"""

import json

import httpx
import pytest
from pathlib import Path
import sys

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from nodetelemetry.config import TelemetryConfig
from nodetelemetry.models import DeviceStatus, SyncChain
from nodetelemetry.status import StatusStore


# ============================================================================
# CONFIG FIXTURES
# ============================================================================

@pytest.fixture
def default_config():
    """Default telemetry configuration."""
    return TelemetryConfig()


@pytest.fixture
def temp_config_file(tmp_path):
    """Temporary YAML config file."""
    config_content = """
collector:
  url: http://collector.test:9000
  interval_sec: 15
  timeout_sec: 5
bandwidth:
  interval_sec: 30
device:
  id: "0xabc"
  owner: alice
  version: 1.2.3
  peer_id: 12D3KooWpeer
"""
    config_file = tmp_path / "telemetry.yaml"
    config_file.write_text(config_content)
    return config_file


# ============================================================================
# STATUS FIXTURES
# ============================================================================

@pytest.fixture
def store():
    """Fresh status store."""
    return StatusStore()


@pytest.fixture
def ready_store():
    """Store with a complete identity."""
    s = StatusStore()
    s.set_identity("0xabc", "alice", "12D3KooWpeer")
    return s


@pytest.fixture
def sample_status():
    """Fully populated status snapshot."""
    upload = [0] * 30
    upload[-1] = 150
    return DeviceStatus(
        device_id="0xabc",
        device_owner="alice",
        device_version="1.2.3",
        peer_id="12D3KooWpeer",
        peers_count=8,
        best_block_number=1024,
        finalized_block_number=1000,
        upload_bandwidth=upload,
        uptime=3600,
        monitor_type=1,
        monitor_sync_chains=[SyncChain(1, 500), SyncChain(2, 700)],
        errors=[3, 7],
    )


# ============================================================================
# COLLECTOR FIXTURES
# ============================================================================

class FakeCollector:
    """
    Records JSON-RPC requests and answers with a canned body.

    Use as the handler of an httpx.MockTransport.
    """

    def __init__(self, body=None, raise_exc: Exception = None):
        self.body = body if body is not None else {"jsonrpc": "2.0", "result": {"ok": True}, "id": 1}
        self.raise_exc = raise_exc
        self.requests: list = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.raise_exc is not None:
            raise self.raise_exc
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(200, content=self.body)
        return httpx.Response(200, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def make_collector():
    """Factory for collectors with a custom reply."""
    return FakeCollector


@pytest.fixture
def collector():
    """Collector that accepts every report."""
    return FakeCollector()


@pytest.fixture
def failing_collector():
    """Collector that refuses connections."""
    return FakeCollector(raise_exc=httpx.ConnectError("connection refused"))
