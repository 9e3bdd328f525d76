"""
Console Output Utilities
========================
Formatted console output with colors.
"""


class Console:
    """
    Console output helper with ANSI colors.
    """

    # ANSI color codes
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"

    # Status indicators
    OK = f"{GREEN}[OK]{RESET}"
    WAIT = f"{YELLOW}[WAIT]{RESET}"
    FAIL = f"{RED}[FAIL]{RESET}"
    ALERT = f"{RED}[!]{RESET}"
    INFO = f"{BLUE}[*]{RESET}"

    @classmethod
    def print_banner(cls):
        """Print the startup banner."""
        print("=" * 60)
        print(f"  {cls.CYAN}{cls.BOLD}Node Telemetry Reporter{cls.RESET}")
        print("=" * 60)

    @classmethod
    def print_config(cls, url: str, interval: float, device_id: str):
        """Print configuration info."""
        print(f"  Collector: {cls.BOLD}{url}{cls.RESET}")
        print(f"  Interval: {interval}s")
        print(f"  Device: {device_id or '(unset)'}")
        print("=" * 60)
        print(f"{cls.INFO} Starting... Press Ctrl+C to stop.\n")

    @classmethod
    def format_stats(cls, stats: dict) -> str:
        """Format reporter stats as a single status line."""
        if stats.get('reports_failed', 0) > stats.get('reports_sent', 0):
            status = cls.FAIL
        elif stats.get('reports_sent', 0) == 0:
            status = cls.WAIT
        else:
            status = cls.OK

        return (
            f"{status} sent:{stats.get('reports_sent', 0)} "
            f"failed:{stats.get('reports_failed', 0)} "
            f"rpc-errors:{stats.get('protocol_errors', 0)} "
            f"skipped:{stats.get('reports_skipped', 0)} "
            f"| last: {stats.get('last_report_ts') or '-'}"
        )

    @classmethod
    def print_summary(cls, stats: dict):
        """Print session summary."""
        print("\n" + "=" * 60)
        print(f"  {cls.BOLD}SESSION SUMMARY{cls.RESET}")
        print("=" * 60)
        print(f"  {cls.format_stats(stats)}")
        print(f"  Bandwidth rotations: {stats.get('rotations', 0)}")
        print("=" * 60)

    @classmethod
    def print_error(cls, message: str):
        """Print error message."""
        print(f"\n{cls.ALERT} {cls.RED}{message}{cls.RESET}")

    @classmethod
    def print_info(cls, message: str):
        """Print info message."""
        print(f"{cls.INFO} {message}")
