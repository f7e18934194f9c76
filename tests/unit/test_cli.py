"""Tests for the command line entry point."""

import json

import pytest
import structlog

from servers.event_discovery.__main__ import main, parse_args, run

CREDENTIAL_VARS = [
    "TICKETMASTER_API_KEY",
    "SEATGEEK_CLIENT_ID",
    "SEATGEEK_CLIENT_SECRET",
    "PREDICTHQ_ACCESS_TOKEN",
    "SERPAPI_KEY",
]


@pytest.fixture
def no_credentials(monkeypatch):
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)


def test_parse_args():
    args = parse_args(["Austin", "--start", "2025-06-01", "--end", "2025-06-03", "--live-only"])

    assert args.city == "Austin"
    assert args.start == "2025-06-01"
    assert args.end == "2025-06-03"
    assert args.live_only is True
    assert args.verbose is False


@pytest.mark.asyncio
async def test_run_falls_back_without_credentials(no_credentials):
    output = await run(parse_args(["Austin", "--start", "2025-06-01", "--end", "2025-06-03"]))

    assert output["sources"] == ["Local Events"]
    assert 1 <= output["total_count"] <= 9


@pytest.mark.asyncio
async def test_live_only_without_credentials_is_empty(no_credentials):
    output = await run(parse_args(["Austin", "--live-only"]))

    assert output["events"] == []
    assert output["sources"] == []
    assert output["total_count"] == 0


def test_main_prints_json(no_credentials, capsys):
    """Logs go to stderr, leaving stdout as parseable JSON."""
    try:
        main(["Austin", "--start", "2025-06-01", "--end", "2025-06-01"])
    finally:
        structlog.reset_defaults()

    printed = json.loads(capsys.readouterr().out)
    assert printed["cached"] is False
    assert all(event["date"] == "2025-06-01" for event in printed["events"])
