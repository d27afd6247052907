"""Chat exchange engine."""

from .app import Application, IApplication
from .catalog import IModelCatalog, ModelCatalog
from .composer import IRequestComposer, Payload, RequestComposer
from .config import Settings
from .conversation import ConversationHistory
from .errors import (
    EngineError,
    ExchangeCancelled,
    ExchangeInProgress,
    FallbackLoadError,
    FallbackTimeout,
    ModelRejected,
    StreamIOError,
    StreamStalled,
    TransportUnavailable,
)
from .gateway import IScriptHost, ITransportGateway, ModuleScriptHost, TransportGateway
from .models import (
    Attachment,
    ConnectionStatus,
    EngineState,
    ExchangeConfig,
    ExchangeResult,
    Message,
    ModelCatalogEntry,
    SessionState,
    StreamingSession,
    TraceEvent,
    TransportKind,
)
from .status import ConnectionStatusTracker, IConnectionStatusTracker
from .streaming import (
    CancellationToken,
    ExternalBridge,
    IStreamingSessionController,
    StreamBuffer,
    StreamingSessionController,
)
from .tracker import ITracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Models
    "Message",
    "Attachment",
    "ExchangeConfig",
    "ExchangeResult",
    "EngineState",
    "SessionState",
    "StreamingSession",
    "TransportKind",
    "ModelCatalogEntry",
    "ConnectionStatus",
    "TraceEvent",
    # Errors
    "EngineError",
    "TransportUnavailable",
    "StreamStalled",
    "StreamIOError",
    "ModelRejected",
    "FallbackTimeout",
    "FallbackLoadError",
    "ExchangeCancelled",
    "ExchangeInProgress",
    # Components
    "IScriptHost",
    "ModuleScriptHost",
    "ITransportGateway",
    "TransportGateway",
    "IModelCatalog",
    "ModelCatalog",
    "IRequestComposer",
    "RequestComposer",
    "Payload",
    "IStreamingSessionController",
    "StreamingSessionController",
    "CancellationToken",
    "ExternalBridge",
    "StreamBuffer",
    "IConnectionStatusTracker",
    "ConnectionStatusTracker",
    "ConversationHistory",
    "ITracker",
    "Tracker",
]
