"""
Command line entry point for the event discovery service.

Run with: python -m servers.event_discovery Austin --start 2025-06-01 --end 2025-06-03

Provider credentials come from the environment (TICKETMASTER_API_KEY,
SEATGEEK_CLIENT_ID, PREDICTHQ_ACCESS_TOKEN, SERPAPI_KEY, ...).
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

import structlog

from .service import EventDiscoveryService


def configure_logging(verbose: bool) -> None:
    """Send structlog output to stderr so stdout stays valid JSON."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find local events for a city")
    parser.add_argument("city", help="Destination city, e.g. 'Austin'")
    parser.add_argument("--start", help="Start date (YYYY-MM-DD), defaults to today")
    parser.add_argument("--end", help="End date (YYYY-MM-DD), defaults to start + 7 days")
    parser.add_argument(
        "--live-only",
        action="store_true",
        help="Only query providers, do not fall back to generated events",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> dict:
    service = EventDiscoveryService.from_env()

    if args.live_only:
        result = await service.fetch_all_events(args.city, args.start, args.end)
    else:
        result = await service.discover(args.city, args.start, args.end)

    return result.model_dump(exclude_none=True)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args.verbose)
    output = asyncio.run(run(args))
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
