"""StreamingSessionController module."""

from .bridge import ExternalBridge
from .buffer import StreamBuffer, UpdateCallback
from .classify import classify_error, is_recoverable
from .controller import (
    EMPTY_RESPONSE_NOTICE,
    FAILURE_NOTICE,
    STALL_NOTICE,
    CancellationToken,
    IStreamingSessionController,
    StreamingSessionController,
)
from .postprocess import INCOMPLETE_NOTICE, PostProcessor, flag_possibly_incomplete

__all__ = [
    "StreamingSessionController",
    "IStreamingSessionController",
    "CancellationToken",
    "ExternalBridge",
    "StreamBuffer",
    "UpdateCallback",
    "classify_error",
    "is_recoverable",
    "PostProcessor",
    "flag_possibly_incomplete",
    "EMPTY_RESPONSE_NOTICE",
    "STALL_NOTICE",
    "FAILURE_NOTICE",
    "INCOMPLETE_NOTICE",
]
