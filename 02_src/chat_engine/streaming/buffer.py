"""StreamBuffer: accumulates streamed text and re-emits full snapshots."""

import inspect
from typing import Awaitable, Callable, Union

from ..logging_config import get_logger

logger = get_logger(__name__)

UpdateCallback = Callable[[str], Union[Awaitable[None], None]]


class StreamBuffer:
    """Full-so-far text of one exchange.

    Every change is reported to the callback as the whole buffer, never as
    a delta, so a consumer that simply replaces its view stays correct
    under duplicate or repeated deliveries.
    """

    def __init__(self, on_update: UpdateCallback | None = None):
        self._on_update = on_update
        self._text = ""
        self._replace_on_next_chunk = False

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    async def append(self, text: str) -> None:
        """Append streamed text and emit the snapshot."""
        if self._replace_on_next_chunk:
            # A retried attempt starts over with its own answer
            self._text = ""
            self._replace_on_next_chunk = False
        self._text += text
        await self._emit()

    async def mark(self, notice: str) -> None:
        """Append a visible diagnostic notice on its own paragraph."""
        if self._text and not self._text.endswith("\n\n"):
            self._text += "\n\n" if not self._text.endswith("\n") else "\n"
        self._text += notice
        await self._emit()

    def restart(self) -> None:
        """Keep the current text until the next attempt produces output."""
        self._replace_on_next_chunk = True

    @property
    def restart_pending(self) -> bool:
        """True when the current attempt has not produced any text yet."""
        return self._replace_on_next_chunk

    def clear(self) -> None:
        self._text = ""
        self._replace_on_next_chunk = False

    async def _emit(self) -> None:
        if self._on_update is None:
            return
        result = self._on_update(self._text)
        if inspect.isawaitable(result):
            await result
