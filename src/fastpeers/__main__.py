"""
Fast peer selection CLI entry point.

Ask a node for its active peers, time a TCP connect to each, and print
the fastest as a comma-separated persistent-peer list.

Usage::

    python -m fastpeers
    python -m fastpeers --rpc http://localhost:3030 --n 20 --ms 500
    python -m fastpeers --concurrency 1 --timeout 5

Options:
    --rpc          JSON-RPC endpoint of the node (default: http://localhost:3030)
    --n            Maximum number of peers to select (default: 30)
    --ms           Latency threshold in milliseconds (default: 1000)
    --timeout      Per-peer connect timeout in seconds (default: 3.0)
    --rpc-timeout  Deadline for the peer directory request (default: 3.0)
    --concurrency  Probes in flight at once; 1 scans sequentially (default: 16)
    --deadline     Optional limit in seconds for the whole probe phase
    --metrics-file Write Prometheus metrics to this file after the scan

The last line of standard output is the selected peer list.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from fastpeers.config import ProbeConfig
from fastpeers.exceptions import ConfigError, FastPeersError
from fastpeers.metrics import write_metrics
from fastpeers.pipeline import SelectionResult, run
from fastpeers.probe import (
    LATENCY_THRESHOLD_MS,
    MAX_CONCURRENT_PROBES,
    MAX_SELECTED_PEERS,
    PROBE_TIMEOUT,
)
from fastpeers.rpc import DEFAULT_FETCH_DEADLINE, DEFAULT_RPC_URL

logger = logging.getLogger(__name__)

LOG_DATE_FORMAT = "%H:%M:%S"
"""Scans take seconds, so log lines carry the time of day only."""

PLAIN_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
"""Layout used with --no-color, e.g. when stderr is captured to a file."""


class ColoredFormatter(logging.Formatter):
    """
    Scan log formatter with ANSI colors.

    Failed probes are logged at WARNING and the fatal fetch error at
    CRITICAL, so the level color is what makes unreachable peers stand out
    in a long scan.
    """

    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Render time, level, logger and message, each in its own color."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = f"{self.CYAN}{self.formatTime(record, self.datefmt)}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        return f"{timestamp} {levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """
    Send scan diagnostics to stderr.

    Stdout is reserved for the report, whose last line is meant to be piped
    into a node's config. ``verbose`` adds the per-connect debug lines from
    the prober.
    """
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if no_color:
        handler.setFormatter(logging.Formatter(PLAIN_LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    else:
        handler.setFormatter(ColoredFormatter(datefmt=LOG_DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def format_report(result: SelectionResult) -> list[str]:
    """
    Render a scan result as report lines.

    The ranking comes first, then tier totals, and the joined peer list last
    so it can be picked up with ``tail -n 1``.
    """
    lines = [
        f"# {rank}  {peer.address}  speed: {peer.latency * 1000:.1f}ms"
        for rank, peer in enumerate(result.selection, start=1)
        if peer.latency is not None
    ]
    lines += [
        f"total active peers: {result.total}",
        f"total unreachable peers: {len(result.classification.unreachable)}",
        f"total slow peers: {len(result.classification.slow)}",
        f"total fast peers: {len(result.classification.fast)}",
        f"total selected peers: {len(result.selection)}",
        result.persistent_peers,
    ]
    return lines


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fastpeers",
        description="Select the fastest active peers of a node",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--rpc",
        default=DEFAULT_RPC_URL,
        help=f"JSON-RPC endpoint of the node (default: {DEFAULT_RPC_URL})",
    )
    parser.add_argument(
        "--n",
        type=int,
        default=MAX_SELECTED_PEERS,
        help=f"Maximum number of peers to select (default: {MAX_SELECTED_PEERS})",
    )
    parser.add_argument(
        "--ms",
        type=int,
        default=LATENCY_THRESHOLD_MS,
        help=f"Latency threshold in milliseconds (default: {LATENCY_THRESHOLD_MS})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=PROBE_TIMEOUT,
        help=f"Per-peer connect timeout in seconds (default: {PROBE_TIMEOUT})",
    )
    parser.add_argument(
        "--rpc-timeout",
        type=float,
        default=DEFAULT_FETCH_DEADLINE,
        help=f"Deadline for the peer directory request (default: {DEFAULT_FETCH_DEADLINE})",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=MAX_CONCURRENT_PROBES,
        help=f"Probes in flight at once (default: {MAX_CONCURRENT_PROBES})",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        default=None,
        help="Limit in seconds for the whole probe phase",
    )
    parser.add_argument(
        "--metrics-file",
        default=None,
        help="Write Prometheus metrics to this file after the scan",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Bad parameters are rejected before any network traffic.
    try:
        config = ProbeConfig.create(
            rpc_url=args.rpc,
            n=args.n,
            threshold_ms=args.ms,
            probe_timeout=args.timeout,
            fetch_timeout=args.rpc_timeout,
            concurrency=args.concurrency,
            deadline=args.deadline,
        )
    except ConfigError as e:
        parser.error(e.message)

    setup_logging(args.verbose, args.no_color)
    logger.info("rpc: %s", config.rpc_url)

    try:
        result = asyncio.run(run(config))
    except FastPeersError as e:
        # Without a peer directory there is nothing to report.
        logger.critical("Failed to fetch peers info: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)
    finally:
        # Failed fetches are counted too, so export on every exit path.
        if args.metrics_file is not None:
            write_metrics(args.metrics_file)
            logger.info("Metrics written to %s", args.metrics_file)

    for line in format_report(result):
        print(line)


if __name__ == "__main__":
    main()
