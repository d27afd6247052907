"""Connection status model."""

from enum import Enum


class ConnectionStatus(str, Enum):
    """Availability of the transport as seen by the UI."""

    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"
