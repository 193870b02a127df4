"""
Command-line entry point.

    kmerscan PATH [PATH ...] [-k K] [--log-level LEVEL] [--json-logs]

Prints the total number of k-mer positions found under the given paths.
Unreadable or unrecognised inputs count as zero and never fail the run.
"""

from __future__ import annotations

import argparse
import asyncio
import importlib.metadata as md
import sys
from collections.abc import Sequence

from core.exceptions import ValidationError
from core.logging import logger_kmer as logger
from core.logging import setup_logging, use_json_logging
from core.settings import get_settings
from kmerscan.scanner import build_targets, scan


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def _project_version() -> str:
    try:
        return md.version("kmerscan")
    except md.PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="kmerscan",
        description=(
            "Count k-mer positions in every FASTA file found under the given paths, "
            "including files inside (nested) tar archives."
        ),
    )
    parser.add_argument("paths", nargs="+", metavar="PATH", help="Files or directories to scan")
    parser.add_argument(
        "-k",
        "--k",
        dest="k",
        type=_positive_int,
        default=settings.KMER_K,
        help=f"k-mer length (default: {settings.KMER_K}, env KMER_K)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help=f"Diagnostics level on stderr (default: {settings.LOG_LEVEL})",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit diagnostics as JSON lines")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_project_version()}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    if args.log_level or args.json_logs:
        setup_logging(args.log_level or settings.LOG_LEVEL, use_json=args.json_logs or use_json_logging)

    try:
        targets = build_targets(args.paths, args.k)
    except ValidationError as exc:
        logger.error("Invalid arguments", extra={"error": exc.to_dict()})
        print(f"kmerscan: error: {exc.message}: {exc.details}", file=sys.stderr)
        return 2

    report = asyncio.run(scan(targets))
    print(report.total)
    return 0


if __name__ == "__main__":
    sys.exit(main())
