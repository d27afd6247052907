"""Exchange-related data models."""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum

from ..config import MAX_SYSTEM_PROMPT_CHARS
from ..errors import EngineError
from .messages import Message


class SessionState(str, Enum):
    """Lifecycle of one streaming exchange."""

    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    STALLED = "stalled"
    RETRYING = "retrying"
    COMPLETED = "completed"
    FAILED_FINAL = "failed_final"


TERMINAL_STATES = frozenset({SessionState.COMPLETED, SessionState.FAILED_FINAL})


class TransportKind(str, Enum):
    """Which path carried the exchange."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ExchangeConfig:
    """Per-exchange settings supplied by the caller."""

    model_id: str
    system_prompt: str = ""
    temperature: float = 1.0
    test_mode: bool = False

    def __post_init__(self) -> None:
        if not self.model_id:
            raise ValueError("model_id must not be empty")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(
                f"temperature must be between 0.0 and 2.0, got {self.temperature}"
            )
        if self.system_prompt is None:
            object.__setattr__(self, "system_prompt", "")
        if len(self.system_prompt) > MAX_SYSTEM_PROMPT_CHARS:
            raise ValueError(
                f"system prompt exceeds {MAX_SYSTEM_PROMPT_CHARS} characters"
            )


@dataclass
class StreamingSession:
    """Mutable bookkeeping for the exchange currently in flight."""

    config: ExchangeConfig
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    attempt: int = 0
    bytes_received: int = 0
    last_activity_at: float = field(default_factory=time.monotonic)
    state: SessionState = SessionState.IDLE
    transport: TransportKind = TransportKind.PRIMARY

    def touch(self, received: int = 0) -> None:
        """Record activity on the stream."""
        self.bytes_received += received
        self.last_activity_at = time.monotonic()


@dataclass
class ExchangeResult:
    """Terminal outcome of an exchange.

    ``message`` always holds the text the user ended up seeing; on failure
    it is the partial output followed by the failure marker.
    """

    request_id: str
    state: SessionState
    message: Message
    attempts: int
    transport: TransportKind
    error: EngineError | None = None

    @property
    def ok(self) -> bool:
        return self.state is SessionState.COMPLETED

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "state": self.state.value,
            "attempts": self.attempts,
            "transport": self.transport.value,
            "message": {
                "id": self.message.id,
                "role": self.message.role,
                "content": self.message.content,
                "created_at": self.message.created_at.isoformat(),
            },
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass
class EngineState:
    """Process-wide flags owned by one engine instance."""

    script_requested: bool = False
    fallback_mode: bool = False
