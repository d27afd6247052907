"""Tracker implementation for creating TraceEvents."""

import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Protocol

from ..models import TraceEvent

DEFAULT_CAPACITY = 1000


class ITracker(Protocol):
    """Creating TraceEvents for exchange lifecycle observability."""

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create a TraceEvent and keep it."""
        ...


class Tracker:
    """Keeps the most recent TraceEvents in memory."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self._events: deque[TraceEvent] = deque(maxlen=capacity)

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create TraceEvent and keep it in the ring."""
        self._events.append(
            TraceEvent(
                id=str(uuid.uuid4()),
                event_type=event_type,
                actor=actor,
                data=data,
                timestamp=datetime.now(timezone.utc),
            )
        )

    def get_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Events in chronological order, filtered."""
        result = []
        for event in self._events:
            if after and event.timestamp <= after:
                continue
            if event_types and event.event_type not in event_types:
                continue
            if actor and event.actor != actor:
                continue
            result.append(event)
        return result[-limit:] if limit else result

    def clear(self) -> None:
        self._events.clear()
