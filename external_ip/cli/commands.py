"""
CLI command entry points for external_ip.

These functions are registered as console scripts in pyproject.toml.
"""

import argparse
import sys
from pathlib import Path

from external_ip.cli.logging import setup_logging
from external_ip.config import get_settings
from external_ip.consensus import default_consensus
from external_ip.context import Context
from external_ip.exceptions import ConfigurationError, ContextError, NoConsensusError

EXIT_NO_CONSENSUS = 1
EXIT_TIMEOUT = 2
EXIT_CONFIG = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="external-ip",
        description="Resolve the external IP address by weighted consensus of public providers.",
    )
    parser.add_argument(
        "-p",
        "--protocol",
        type=int,
        choices=(0, 4, 6),
        default=None,
        help="Address family: 0 (any, default), 4 (IPv4) or 6 (IPv6)",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help="Give up after this many seconds (default from EXTERNAL_IP_TIMEOUT, else 30)",
    )
    parser.add_argument(
        "-d",
        "--details",
        action="store_true",
        help="Print the vote tally after the address",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log per-voter failures",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Also write debug logs to a timestamped file in this directory",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the external-ip command."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        level = "DEBUG" if args.verbose else settings.log_level
        logger = setup_logging(level=level, log_dir=args.log_dir)

        consensus = default_consensus(timeout=args.timeout, protocol=args.protocol)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    logger.debug(f"Resolving with {consensus!r}")

    try:
        with Context.with_timeout(consensus.timeout) as ctx:
            result = consensus.resolve(ctx)
    except NoConsensusError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_NO_CONSENSUS
    except ContextError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_TIMEOUT

    print(result.ip)
    if args.details:
        for address, weight in sorted(result.tally.items(), key=lambda x: (-x[1], x[0])):
            print(f"  {address}\t{weight}")
        if result.tie:
            print("  (tie broken by voter order)")

    return 0


def run_external_ip():
    """Console script wrapper for main()."""
    sys.exit(main())


if __name__ == "__main__":
    run_external_ip()
