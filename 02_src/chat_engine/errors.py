"""Error taxonomy for the exchange engine."""


class EngineError(Exception):
    """Base class for every failure the engine reports to its caller."""

    kind = "Error"
    recoverable = False

    def __init__(self, message: str = "", *, cause: BaseException | None = None):
        super().__init__(message or self.kind)
        self.message = message or self.kind
        self.cause = cause

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "message": self.message,
            "recoverable": self.recoverable,
        }


class TransportUnavailable(EngineError):
    """The gateway SDK never became usable."""

    kind = "TransportUnavailable"
    recoverable = True


class StreamStalled(EngineError):
    """No chunk arrived within the inactivity window."""

    kind = "StreamStalled"
    recoverable = True


class StreamIOError(EngineError):
    """Network, connection or abort failure while iterating the stream."""

    kind = "StreamIOError"

    def __init__(
        self,
        message: str = "",
        *,
        recoverable: bool = False,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.recoverable = recoverable


class ModelRejected(EngineError):
    """The gateway refused the request for this model (quota, permission, ...)."""

    kind = "ModelRejected"


class FallbackTimeout(EngineError):
    """The fallback transport did not answer in time."""

    kind = "FallbackTimeout"


class FallbackLoadError(EngineError):
    """The fallback transport could not be loaded or called."""

    kind = "FallbackLoadError"


class ExchangeCancelled(EngineError):
    """The caller stopped the exchange."""

    kind = "ExchangeCancelled"


class ExchangeInProgress(EngineError):
    """A send was attempted while another exchange is still active."""

    kind = "ExchangeInProgress"
