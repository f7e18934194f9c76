"""Tests for concurrent aggregation, merge and sort."""

import time

import httpx
import pytest
from structlog.testing import capture_logs

from servers.event_discovery.aggregator import aggregate, gather_sources, sort_events
from tests.stubs import StubSource


class TestSortEvents:
    """Tests for chronological ordering."""

    def test_orders_by_date(self, make_event):
        events = [
            make_event(name="B", date="2025-06-02", time="10:00"),
            make_event(name="A", date="2025-06-01", time="09:00"),
            make_event(name="C", date="2025-06-03", time="08:00"),
        ]

        ordered = sort_events(events)

        assert [e.date for e in ordered] == ["2025-06-01", "2025-06-02", "2025-06-03"]

    def test_orders_by_time_within_day(self, make_event):
        events = [
            make_event(name="Late", time="21:00"),
            make_event(name="Unknown", time=None),
            make_event(name="Early", time="09:30"),
        ]

        ordered = sort_events(events)

        assert [e.name for e in ordered] == ["Unknown", "Early", "Late"]

    def test_undated_events_keep_their_position(self, make_event):
        events = [
            make_event(name="C", date="2025-06-03"),
            make_event(name="Undated", date=None),
            make_event(name="A", date="2025-06-01"),
        ]

        ordered = sort_events(events)

        assert [e.name for e in ordered] == ["A", "Undated", "C"]

    def test_stable_for_equal_keys(self, make_event):
        events = [make_event(name="First"), make_event(name="Second")]
        assert [e.name for e in sort_events(events)] == ["First", "Second"]


class TestGatherSources:
    """Tests for settle-all fan-out."""

    @pytest.mark.asyncio
    async def test_one_result_per_source(self, make_event):
        sources = [
            StubSource("Ticketmaster", events=[make_event()]),
            StubSource("SeatGeek", error=httpx.ConnectError("refused")),
        ]

        results = await gather_sources(sources, "Austin", "2025-06-01", "2025-06-03")

        assert [r.source for r in results] == ["Ticketmaster", "SeatGeek"]
        assert [r.status for r in results] == ["success", "error"]

    @pytest.mark.asyncio
    async def test_adapter_that_raises_becomes_error_result(self, make_event):
        class BrokenSource(StubSource):
            async def fetch(self, city, start_date, end_date):
                raise RuntimeError("adapter bug")

        sources = [BrokenSource("Broken"), StubSource("SeatGeek", events=[make_event()])]

        results = await gather_sources(sources, "Austin", "2025-06-01", "2025-06-03")

        assert results[0].status == "error"
        assert "adapter bug" in results[0].error_message
        assert results[1].ok

    @pytest.mark.asyncio
    async def test_sources_run_concurrently(self, make_event):
        sources = [
            StubSource(f"Slow{i}", events=[make_event(name=f"E{i}")], delay=0.2)
            for i in range(4)
        ]

        started = time.monotonic()
        results = await gather_sources(sources, "Austin", "2025-06-01", "2025-06-03")
        elapsed = time.monotonic() - started

        assert all(r.ok for r in results)
        assert elapsed < 0.6

    @pytest.mark.asyncio
    async def test_slow_source_is_cut_off_at_deadline(self, make_event):
        sources = [
            StubSource("Stalled", events=[make_event(name="Never")], delay=5.0, timeout=0.1),
            StubSource("Fast", events=[make_event(name="Fast")]),
        ]

        started = time.monotonic()
        results = await gather_sources(sources, "Austin", "2025-06-01", "2025-06-03")
        elapsed = time.monotonic() - started

        assert results[0].status == "timeout"
        assert results[0].events == []
        assert results[1].ok
        assert elapsed < 1.0


class TestAggregate:
    """Tests for the full aggregation pipeline."""

    @pytest.mark.asyncio
    async def test_partial_failure_isolation(self, make_event):
        working = StubSource(
            "SeatGeek",
            events=[
                make_event(name="One", date="2025-06-01"),
                make_event(name="Two", date="2025-06-02"),
                make_event(name="Three", date="2025-06-03"),
            ],
        )
        failing = StubSource("Ticketmaster", error=httpx.ConnectError("network down"))

        events, results = await aggregate(
            [failing, working], "Austin", "2025-06-01", "2025-06-03"
        )

        assert [e.name for e in events] == ["One", "Two", "Three"]
        assert {r.source: r.status for r in results} == {
            "Ticketmaster": "error",
            "SeatGeek": "success",
        }

    @pytest.mark.asyncio
    async def test_merges_across_sources(self, make_event):
        tm = StubSource("Ticketmaster", events=[
            make_event(name="Jazz Night", image=None, source="Ticketmaster"),
        ])
        sg = StubSource("SeatGeek", events=[
            make_event(name="jazz night", image="https://img.example.com/j.jpg", source="SeatGeek"),
            make_event(name="Rodeo", date="2025-06-02", source="SeatGeek"),
        ])

        events, _ = await aggregate([tm, sg], "Austin", "2025-06-01", "2025-06-03")

        assert len(events) == 2
        jazz = events[0]
        assert jazz.source == "Ticketmaster"
        assert jazz.image == "https://img.example.com/j.jpg"

    @pytest.mark.asyncio
    async def test_sorted_output(self, make_event):
        source = StubSource("PredictHQ", events=[
            make_event(name="B", date="2025-06-02", time="10:00"),
            make_event(name="A", date="2025-06-01", time="09:00"),
            make_event(name="C", date="2025-06-03", time="08:00"),
        ])

        events, _ = await aggregate([source], "Austin", "2025-06-01", "2025-06-03")

        assert [e.date for e in events] == ["2025-06-01", "2025-06-02", "2025-06-03"]

    @pytest.mark.asyncio
    async def test_no_sources(self):
        events, results = await aggregate([], "Austin", "2025-06-01", "2025-06-03")
        assert events == []
        assert results == []

    @pytest.mark.asyncio
    async def test_merges_are_logged_with_audit_summary(self, make_event):
        tm = StubSource("Ticketmaster", events=[make_event(name="Jazz Night", image=None)])
        sg = StubSource("SeatGeek", events=[
            make_event(name="JAZZ NIGHT", image="https://img.example.com/j.jpg", source="SeatGeek"),
        ])

        with capture_logs() as logs:
            await aggregate([tm, sg], "Austin", "2025-06-01", "2025-06-03")

        audit = [entry for entry in logs if entry["event"] == "dedup_audit"]
        assert len(audit) == 1
        assert audit[0]["log_level"] == "debug"
        assert "Duplicates removed: 1" in audit[0]["summary"]
        assert "enriched: image" in audit[0]["summary"]

    @pytest.mark.asyncio
    async def test_no_audit_log_without_duplicates(self, make_event):
        source = StubSource("Ticketmaster", events=[make_event()])

        with capture_logs() as logs:
            await aggregate([source], "Austin", "2025-06-01", "2025-06-03")

        assert not [entry for entry in logs if entry["event"] == "dedup_audit"]
