"""ConnectionStatusTracker module."""

from .tracker import ConnectionStatusTracker, IConnectionStatusTracker, StatusListener

__all__ = ["ConnectionStatusTracker", "IConnectionStatusTracker", "StatusListener"]
