"""Classification of transport failures into the engine's error taxonomy."""

import asyncio

from ..errors import EngineError, ModelRejected, StreamIOError

_REJECTION_HINTS = (
    "quota",
    "permission",
    "forbidden",
    "unauthorized",
    "not signed in",
    "unsupported",
    "not supported",
    "invalid model",
    "model not found",
    "not_found",
    "no such model",
    "malformed",
    "invalid request",
    "invalid_request",
    "bad request",
    "insufficient",
    "credit",
)

_RECOVERABLE_HINTS = (
    "timeout",
    "timed out",
    "temporar",
    "retry",
    "try again",
    "network",
    "connection",
    "econnreset",
    "socket",
    "unavailable",
    "overloaded",
    "rate limit",
    "rate_limit",
    "too many requests",
    "aborted",
    "reset by peer",
)

_REJECTION_STATUS = frozenset({400, 401, 402, 403, 404, 413, 422})
_RECOVERABLE_STATUS = frozenset({408, 409, 425, 429, 500, 502, 503, 504, 529})


def _status_code(exc: BaseException) -> int | None:
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def is_recoverable(exc: BaseException) -> bool:
    """Whether retrying the whole exchange may succeed."""
    return getattr(classify_error(exc), "recoverable", False)


def classify_error(exc: BaseException) -> EngineError:
    """Map any exception raised by the transport onto the error taxonomy.

    HTTP-like status codes win over message text; message hints decide
    when no status is available.
    """
    if isinstance(exc, EngineError):
        return exc

    message = str(exc) or type(exc).__name__

    status = _status_code(exc)
    if status in _REJECTION_STATUS:
        return ModelRejected(message, cause=exc)
    if status in _RECOVERABLE_STATUS:
        return StreamIOError(message, recoverable=True, cause=exc)

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return StreamIOError(message, recoverable=True, cause=exc)
    if isinstance(exc, PermissionError):
        return ModelRejected(message, cause=exc)

    lowered = message.lower()
    if any(hint in lowered for hint in _REJECTION_HINTS):
        return ModelRejected(message, cause=exc)
    if any(hint in lowered for hint in _RECOVERABLE_HINTS):
        return StreamIOError(message, recoverable=True, cause=exc)

    return StreamIOError(message, recoverable=False, cause=exc)
