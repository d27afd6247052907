"""Core data models for the chat exchange engine."""

from .catalog import ModelCatalogEntry
from .exchange import (
    TERMINAL_STATES,
    EngineState,
    ExchangeConfig,
    ExchangeResult,
    SessionState,
    StreamingSession,
    TransportKind,
)
from .messages import Attachment, Message, extension_of, new_message_id
from .status import ConnectionStatus
from .tracing import TraceEvent

__all__ = [
    # Messages
    "Message",
    "Attachment",
    "extension_of",
    "new_message_id",
    # Exchange
    "ExchangeConfig",
    "ExchangeResult",
    "EngineState",
    "SessionState",
    "StreamingSession",
    "TransportKind",
    "TERMINAL_STATES",
    # Catalog
    "ModelCatalogEntry",
    # Status
    "ConnectionStatus",
    # Tracing
    "TraceEvent",
]
