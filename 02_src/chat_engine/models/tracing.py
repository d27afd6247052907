"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A single observability event for an exchange."""

    id: str
    event_type: str  # e.g. "exchange_started", "attempt_failed"
    actor: str  # component that created this event
    data: dict
    timestamp: datetime
