"""Tests for Tracker."""

import asyncio
from datetime import datetime, timezone

import pytest

from chat_engine.tracker import Tracker


class TestTrackerTrack:
    """Tests for Tracker.track() method."""

    @pytest.mark.asyncio
    async def test_track_creates_event(self, trace_tracker):
        """Test that track() creates a TraceEvent."""
        await trace_tracker.track(
            event_type="test_event",
            actor="test_actor",
            data={"key": "value"},
        )

        events = trace_tracker.get_events()
        assert len(events) == 1
        assert events[0].event_type == "test_event"
        assert events[0].actor == "test_actor"
        assert events[0].data == {"key": "value"}
        assert events[0].id

    @pytest.mark.asyncio
    async def test_track_generates_timestamp(self, trace_tracker):
        """Test that track() stamps events in UTC."""
        before = datetime.now(timezone.utc)
        await trace_tracker.track(event_type="test_event", actor="test_actor", data={})
        after = datetime.now(timezone.utc)

        events = trace_tracker.get_events()
        assert before <= events[0].timestamp <= after

    @pytest.mark.asyncio
    async def test_capacity_drops_oldest(self):
        """Test that the ring keeps only the newest events."""
        tracker = Tracker(capacity=2)
        for i in range(3):
            await tracker.track(event_type=f"e{i}", actor="a", data={})

        assert [e.event_type for e in tracker.get_events()] == ["e1", "e2"]


class TestTrackerQuery:
    """Tests for Tracker.get_events() filters."""

    @pytest.mark.asyncio
    async def test_filter_by_type_and_actor(self, trace_tracker):
        """Test filtering by event type and actor."""
        await trace_tracker.track(event_type="exchange_started", actor="controller", data={})
        await trace_tracker.track(event_type="attempt_failed", actor="controller", data={})
        await trace_tracker.track(event_type="exchange_started", actor="other", data={})

        events = trace_tracker.get_events(event_types=["exchange_started"], actor="controller")

        assert len(events) == 1
        assert events[0].actor == "controller"

    @pytest.mark.asyncio
    async def test_filter_after(self, trace_tracker):
        """Test that only events newer than ``after`` are returned."""
        await trace_tracker.track(event_type="old", actor="a", data={})
        cutoff = trace_tracker.get_events()[0].timestamp
        await asyncio.sleep(0.001)
        await trace_tracker.track(event_type="new", actor="a", data={})

        events = trace_tracker.get_events(after=cutoff)

        assert [e.event_type for e in events] == ["new"]

    @pytest.mark.asyncio
    async def test_limit_keeps_latest(self, trace_tracker):
        """Test that limit returns the most recent events."""
        for i in range(5):
            await trace_tracker.track(event_type=f"e{i}", actor="a", data={})

        events = trace_tracker.get_events(limit=2)

        assert [e.event_type for e in events] == ["e3", "e4"]

    @pytest.mark.asyncio
    async def test_clear(self, trace_tracker):
        """Test that clear() drops every event."""
        await trace_tracker.track(event_type="e", actor="a", data={})
        trace_tracker.clear()
        assert trace_tracker.get_events() == []
