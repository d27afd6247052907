"""In-memory transcript of the current session."""

from ..models import Message


class ConversationHistory:
    """Append-only list of Messages for one session."""

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def add(self, message: Message) -> None:
        """Append a message to the transcript."""
        self._messages.append(message)

    def get_all(self) -> list[Message]:
        """Get all messages in order."""
        return self._messages.copy()

    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def clear(self) -> None:
        """Start a new session."""
        self._messages.clear()
