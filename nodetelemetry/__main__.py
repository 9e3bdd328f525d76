"""
Node Telemetry Main Entry Point
================================
Reports this node's status to a JSON-RPC telemetry collector.

Run with: python -m nodetelemetry
"""

import sys
import signal
import argparse
import logging
from pathlib import Path

from .config import (
    TelemetryConfig,
    load_config,
    MIN_REPORT_INTERVAL_SEC,
    MAX_REPORT_INTERVAL_SEC,
)
from .errors import TransportError
from .reporter import Reporter
from .rpc import RpcClient
from .status import StatusStore
from .utils import Console


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def validate_args(args) -> list[str]:
    """Bounds checks on numeric CLI inputs."""
    errors = []

    if args.interval is not None and not (
        MIN_REPORT_INTERVAL_SEC <= args.interval <= MAX_REPORT_INTERVAL_SEC
    ):
        errors.append(
            f"--interval must be between {MIN_REPORT_INTERVAL_SEC} and {MAX_REPORT_INTERVAL_SEC}"
        )

    return errors


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='nodetelemetry',
        description="Node Telemetry: periodic status reporter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m nodetelemetry --url http://127.0.0.1:3030 --interval 10
  python -m nodetelemetry --config telemetry.yaml
  python -m nodetelemetry --get-status          # query the collector once

Environment:
  NODETELEMETRY_URL, NODETELEMETRY_INTERVAL override the config file
        """
    )

    parser.add_argument('--url', '-u', type=str, default=None,
                        help='Collector URL')
    parser.add_argument('--interval', '-i', type=int, default=None,
                        help='Report interval in seconds')
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='Path to config file (YAML or JSON)')
    parser.add_argument('--device-id', type=str, default=None)
    parser.add_argument('--device-owner', type=str, default=None)
    parser.add_argument('--device-version', type=str, default=None)
    parser.add_argument('--peer-id', type=str, default=None)
    parser.add_argument('--get-status', action='store_true',
                        help='Query the collector once and exit')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')

    return parser


def resolve_config(args) -> TelemetryConfig:
    """Config file, then environment, then CLI arguments."""
    if args.config:
        config = load_config(Path(args.config))
    else:
        config = TelemetryConfig()

    config.apply_env_overrides()

    if args.url:
        config.collector_url = args.url
    if args.interval is not None:
        config.report_interval_sec = args.interval
    if args.device_id is not None:
        config.device_id = args.device_id
    if args.device_owner is not None:
        config.device_owner = args.device_owner
    if args.device_version is not None:
        config.device_version = args.device_version
    if args.peer_id is not None:
        config.peer_id = args.peer_id

    return config


def query_status(config: TelemetryConfig) -> int:
    """One get_status round trip. Returns the process exit code."""
    with RpcClient(config.collector_url, timeout=config.http_timeout_sec) as client:
        try:
            response = client.get_status()
        except TransportError as e:
            Console.print_error(str(e))
            return 1

    if response.error is not None:
        Console.print_error(f"Collector error: {response.error}")
        return 1

    Console.print_info(f"Collector status: {response.result}")
    return 0


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)

    validation_errors = validate_args(args)
    if validation_errors:
        for error in validation_errors:
            Console.print_error(error)
        sys.exit(1)

    config = resolve_config(args)

    config_errors = config.validate()
    if config_errors:
        for error in config_errors:
            Console.print_error(error)
        sys.exit(1)

    if args.get_status:
        sys.exit(query_status(config))

    store = StatusStore()
    store.set_identity(config.device_id, config.device_owner, config.peer_id)
    store.set_device_version(config.device_version)

    reporter = Reporter(
        store,
        config.collector_url,
        config.report_interval_sec,
        timeout=config.http_timeout_sec,
        bandwidth_interval=config.bandwidth_interval_sec,
    )

    def signal_handler(sig, frame):
        Console.print_info("Ctrl+C received, shutting down...")
        reporter.stop_event.set()

    signal.signal(signal.SIGINT, signal_handler)

    Console.print_banner()
    Console.print_config(config.collector_url, config.report_interval_sec, config.device_id)

    reporter.start()
    try:
        while not reporter.stop_event.wait(config.report_interval_sec):
            print(Console.format_stats(reporter.get_stats()))
    finally:
        reporter.stop(timeout=5.0)
        Console.print_summary(reporter.get_stats())


if __name__ == "__main__":
    main()
