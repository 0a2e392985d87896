"""Command-line entrypoint for socorro-digest."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from app.config import Settings, get_settings
from core.exceptions import (
    ConfigurationError,
    InvalidRequestError,
    ProviderNotFoundError,
    UpstreamError,
)
from core.models import (
    CRASH_PING_FACETS,
    DEFAULT_CRASH_PINGS_LIMIT,
    Channel,
    CrashPingFilters,
    OutputFormat,
    SearchParams,
)
from core.pipeline import Pipeline
from integrations.registry import IntegrationRegistry

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_REQUEST = 1
EXIT_UPSTREAM = 2
EXIT_INTERNAL = 3

# "json" is an alias for structured.
FORMAT_CHOICES: dict[str, OutputFormat] = {
    "compact": OutputFormat.COMPACT,
    "json": OutputFormat.STRUCTURED,
    "structured": OutputFormat.STRUCTURED,
    "markdown": OutputFormat.MARKDOWN,
}


def _non_negative(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="socorro-digest",
        description="Query Mozilla's Socorro crash reporting system and summarize the results.",
    )
    parser.add_argument(
        "--format",
        choices=sorted(FORMAT_CHOICES),
        default="compact",
        help="Output format (default: compact)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    crash = sub.add_parser("crash", help="Fetch details about a specific crash")
    crash.add_argument("crash_id", help="Crash ID (UUID) or full crash-stats report URL")
    crash.add_argument("--depth", type=_non_negative, default=None,
                       help="Stack frames to show per thread (default: 10)")
    crash.add_argument("--all-threads", action="store_true",
                       help="Show stacks from all threads, not just the crashing thread")
    crash.add_argument("--full", action="store_true",
                       help="Dump every public field as JSON (skips the API token)")

    search = sub.add_parser("search", help="Search and aggregate crashes")
    search.add_argument("--signature", help="Crash signature (~ prefix for contains match)")
    search.add_argument("--product", default="Firefox")
    search.add_argument("--version")
    search.add_argument("--platform")
    search.add_argument("--cpu-arch")
    search.add_argument("--channel", dest="release_channel")
    search.add_argument("--platform-version")
    search.add_argument("--process-type")
    search.add_argument("--days", type=_non_negative, default=7)
    search.add_argument("--limit", type=_non_negative, default=None,
                        help="Individual crashes to list (default: 10, or 0 with --facet)")
    search.add_argument("--facet", dest="facets", action="append", default=[],
                        help="Aggregate by field (repeatable)")
    search.add_argument("--facets-size", type=_non_negative, default=None,
                        help="Buckets per facet (default: 50)")
    search.add_argument("--sort", default="-date", help="Sort field, - prefix for descending")

    corr = sub.add_parser("correlations", help="Show over-represented attributes for a signature")
    corr.add_argument("--signature", required=True)
    corr.add_argument("--channel", default=Channel.RELEASE.value,
                      choices=[c.value for c in Channel])

    pings = sub.add_parser("crash-pings", help="Count one day's crash pings by a facet")
    pings.add_argument("--date", help="Day to query, YYYY-MM-DD (default: yesterday, UTC)")
    pings.add_argument("--channel")
    pings.add_argument("--os")
    pings.add_argument("--process")
    pings.add_argument("--version")
    pings.add_argument("--signature", help="Crash signature (~ prefix for contains match)")
    pings.add_argument("--arch")
    pings.add_argument("--facet", default="signature", choices=CRASH_PING_FACETS,
                       help="Field to count by (default: signature)")
    pings.add_argument("--limit", type=_non_negative, default=DEFAULT_CRASH_PINGS_LIMIT,
                       help="Values to show (default: 10)")
    pings.add_argument("--stack", metavar="CRASH_ID",
                       help="Show the stack of one crash ping instead of counts")

    return parser


async def run(args: argparse.Namespace, settings: Settings) -> str:
    pipeline = Pipeline(settings, IntegrationRegistry(settings))
    fmt = FORMAT_CHOICES[args.format]

    if args.command == "crash":
        return await pipeline.crash(
            args.crash_id,
            fmt=fmt,
            depth=args.depth,
            all_threads=args.all_threads,
            full=args.full,
        )
    if args.command == "search":
        params = SearchParams(
            signature=args.signature,
            product=args.product,
            version=args.version,
            platform=args.platform,
            cpu_arch=args.cpu_arch,
            release_channel=args.release_channel,
            platform_version=args.platform_version,
            process_type=args.process_type,
            days=args.days,
            limit=args.limit,
            facets=args.facets,
            facets_size=args.facets_size,
            sort=args.sort,
        )
        return await pipeline.search(params, fmt=fmt)
    if args.command == "crash-pings":
        if args.stack:
            return await pipeline.crash_ping_stack(args.stack, date=args.date, fmt=fmt)
        filters = CrashPingFilters(
            channel=args.channel,
            os=args.os,
            process=args.process,
            version=args.version,
            signature=args.signature,
            arch=args.arch,
        )
        return await pipeline.crash_pings(
            date=args.date, filters=filters, facet=args.facet, limit=args.limit, fmt=fmt
        )
    return await pipeline.correlations(args.signature, channel=args.channel, fmt=fmt)


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        output = asyncio.run(run(args, _load_settings()))
    except (InvalidRequestError, ConfigurationError, ProviderNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID_REQUEST
    except UpstreamError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UPSTREAM
    except Exception as e:
        logger.exception("Internal error")
        print(f"Internal error: {e}", file=sys.stderr)
        return EXIT_INTERNAL

    sys.stdout.write(output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
