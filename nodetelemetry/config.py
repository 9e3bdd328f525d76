"""
Node Telemetry Configuration Module
===================================
Central configuration with validation and YAML loading.

Sources (highest priority last):
  - Built-in defaults
  - YAML/JSON config file
  - NODETELEMETRY_* environment variables
  - CLI arguments (applied by __main__)
"""

import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional
import json
import logging

import yaml

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIG PATHS
# ============================================================================

CONFIG_DIR = Path(__file__).parent
DEFAULT_CONFIG_FILE = CONFIG_DIR / "config.yaml"
USER_CONFIG_FILE = Path.home() / ".nodetelemetry" / "config.yaml"


# ============================================================================
# COLLECTOR
# ============================================================================

DEFAULT_COLLECTOR_URL = "http://127.0.0.1:3030"

DEFAULT_REPORT_INTERVAL_SEC = 60
MIN_REPORT_INTERVAL_SEC = 1
MAX_REPORT_INTERVAL_SEC = 86400

HTTP_TIMEOUT_SEC = 30.0
MIN_HTTP_TIMEOUT_SEC = 1.0
MAX_HTTP_TIMEOUT_SEC = 300.0

JSONRPC_VERSION = "2.0"
UPDATE_STATUS_REQUEST_ID = 1
GET_STATUS_REQUEST_ID = 2


# ============================================================================
# BANDWIDTH WINDOW
# ============================================================================

# Slot count is part of the wire format and is not configurable
BANDWIDTH_SLOTS = 30
BANDWIDTH_INTERVAL_SEC = 60


# ============================================================================
# ENVIRONMENT
# ============================================================================

URL_ENV = "NODETELEMETRY_URL"
INTERVAL_ENV = "NODETELEMETRY_INTERVAL"


# ============================================================================
# CONFIG DATACLASS
# ============================================================================

@dataclass
class TelemetryConfig:
    """Main configuration container with validation."""

    # Collector
    collector_url: str = DEFAULT_COLLECTOR_URL
    report_interval_sec: int = DEFAULT_REPORT_INTERVAL_SEC
    http_timeout_sec: float = HTTP_TIMEOUT_SEC

    # Bandwidth window
    bandwidth_interval_sec: float = BANDWIDTH_INTERVAL_SEC

    # Identity seeds (empty = leave unset)
    device_id: str = ""
    device_owner: str = ""
    device_version: str = ""
    peer_id: str = ""

    def validate(self) -> list[str]:
        """Validates configuration. Returns list of errors."""
        errors = []

        if not self.collector_url.startswith(("http://", "https://")):
            errors.append(f"collector_url must be an http(s) URL, got {self.collector_url!r}")

        if not (MIN_REPORT_INTERVAL_SEC <= self.report_interval_sec <= MAX_REPORT_INTERVAL_SEC):
            errors.append(
                f"report_interval_sec must be between {MIN_REPORT_INTERVAL_SEC} and "
                f"{MAX_REPORT_INTERVAL_SEC}, got {self.report_interval_sec}"
            )

        if not (MIN_HTTP_TIMEOUT_SEC <= self.http_timeout_sec <= MAX_HTTP_TIMEOUT_SEC):
            errors.append(
                f"http_timeout_sec must be between {MIN_HTTP_TIMEOUT_SEC} and "
                f"{MAX_HTTP_TIMEOUT_SEC}, got {self.http_timeout_sec}"
            )

        if self.bandwidth_interval_sec <= 0:
            errors.append(f"bandwidth_interval_sec must be positive, got {self.bandwidth_interval_sec}")

        return errors

    def apply_env_overrides(self, environ: Optional[dict] = None) -> "TelemetryConfig":
        """Override collector settings from NODETELEMETRY_* variables."""
        env = os.environ if environ is None else environ

        url = env.get(URL_ENV)
        if url:
            self.collector_url = url

        interval = env.get(INTERVAL_ENV)
        if interval:
            try:
                self.report_interval_sec = int(interval)
            except ValueError:
                logger.warning(f"Ignoring invalid {INTERVAL_ENV}={interval!r}")

        return self

    @classmethod
    def from_yaml(cls, path: Path) -> "TelemetryConfig":
        """Load config from YAML file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        return cls._from_dict(data or {})

    @classmethod
    def from_json(cls, path: Path) -> "TelemetryConfig":
        """Load config from JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "TelemetryConfig":
        """Create config from dictionary."""
        config = cls()

        collector = data.get('collector') or {}
        if 'url' in collector:
            config.collector_url = str(collector['url'])
        if 'interval_sec' in collector:
            config.report_interval_sec = int(collector['interval_sec'])
        if 'timeout_sec' in collector:
            config.http_timeout_sec = float(collector['timeout_sec'])

        bandwidth = data.get('bandwidth') or {}
        if 'interval_sec' in bandwidth:
            config.bandwidth_interval_sec = float(bandwidth['interval_sec'])

        device = data.get('device') or {}
        if 'id' in device:
            config.device_id = str(device['id'])
        if 'owner' in device:
            config.device_owner = str(device['owner'])
        if 'version' in device:
            config.device_version = str(device['version'])
        if 'peer_id' in device:
            config.peer_id = str(device['peer_id'])

        return config


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def load_config(config_path: Optional[Path] = None) -> TelemetryConfig:
    """
    Load configuration with fallback chain:
    1. Explicit path
    2. User config (~/.nodetelemetry/config.yaml)
    3. Default config
    """
    paths_to_try = []

    if config_path:
        paths_to_try.append(config_path)

    paths_to_try.append(USER_CONFIG_FILE)
    paths_to_try.append(DEFAULT_CONFIG_FILE)

    for path in paths_to_try:
        if path.exists():
            try:
                if path.suffix in ('.yaml', '.yml'):
                    return TelemetryConfig.from_yaml(path)
                elif path.suffix == '.json':
                    return TelemetryConfig.from_json(path)
            except (OSError, ValueError, TypeError, AttributeError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config {path}: {e}")
                continue

    return TelemetryConfig()
