"""ExternalBridge: the fallback transport.

The SDK is injected fresh and asked for a callback-driven completion. The
answer travels back through a one-shot future keyed by a correlation id,
and streamed chunks through a handler registered under the same id, so
nothing leaks into the shared namespace.
"""

import asyncio
import inspect
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from ..composer import Payload
from ..config import FALLBACK_TIMEOUT_SECONDS
from ..errors import FallbackLoadError, FallbackTimeout
from ..gateway import IScriptHost
from ..gateway.responses import TextResponse, part_text
from ..logging_config import get_logger

logger = get_logger(__name__)

ChunkHandler = Callable[[str], Any]


@dataclass
class _PendingRequest:
    future: asyncio.Future
    on_chunk: ChunkHandler | None


class ExternalBridge:
    """Correlation-id keyed request/response channel over a fresh SDK load."""

    def __init__(
        self,
        host: IScriptHost,
        script_src: str,
        global_name: str,
        timeout: float = FALLBACK_TIMEOUT_SECONDS,
    ):
        self._host = host
        self._script_src = script_src
        self._global_name = global_name
        self._timeout = timeout
        self._pending: dict[str, _PendingRequest] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def request(
        self,
        payload: Payload,
        on_chunk: ChunkHandler | None = None,
        timeout: float | None = None,
    ) -> TextResponse:
        """Run one request through the fallback path.

        Raises FallbackLoadError when the SDK cannot be loaded or called and
        FallbackTimeout when no answer arrives in time; the in-flight call is
        cancelled in both cases.
        """
        timeout = self._timeout if timeout is None else timeout
        correlation_id = f"exchange_callback_{uuid.uuid4().hex}"
        loop = asyncio.get_running_loop()
        self._pending[correlation_id] = _PendingRequest(loop.create_future(), on_chunk)

        call_task = asyncio.create_task(self._call(correlation_id, payload))
        try:
            response = await asyncio.wait_for(self._pending[correlation_id].future, timeout)
        except asyncio.TimeoutError:
            logger.warning("Fallback request %s timed out after %.0fs", correlation_id, timeout)
            raise FallbackTimeout(f"Fallback request timed out after {timeout:.0f}s") from None
        finally:
            call_task.cancel()
            entry = self._pending.pop(correlation_id, None)
            if entry is not None and not entry.future.done():
                entry.future.cancel()

        return TextResponse(response)

    async def _call(self, correlation_id: str, payload: Payload) -> None:
        try:
            await self._host.inject(self._script_src, fresh=True)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._reject(correlation_id, FallbackLoadError(f"Failed to load gateway SDK: {e}", cause=e))
            return

        ai = getattr(self._host.namespace.get(self._global_name), "ai", None)
        completion = getattr(ai, "completion", None)
        if not callable(completion):
            self._reject(correlation_id, FallbackLoadError("Fallback completion entry point not available"))
            return

        options = {
            "messages": [{"role": "user", "content": payload.user_content}],
            "model": payload.model,
            "stream": True,
            "temperature": payload.temperature,
            "test_mode": payload.test_mode,
            "on_stream_update": lambda update: self._dispatch_chunk(correlation_id, update),
        }
        if payload.system_prompt:
            options["system_prompt"] = payload.system_prompt

        try:
            result = completion(options)
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._reject(correlation_id, FallbackLoadError(str(e) or "Error calling fallback completion", cause=e))
            return

        self._resolve(correlation_id, result if isinstance(result, str) else part_text(result))

    def _dispatch_chunk(self, correlation_id: str, update: Any) -> None:
        entry = self._pending.get(correlation_id)
        if entry is None or entry.on_chunk is None:
            return
        text = part_text(update)
        if text:
            entry.on_chunk(text)

    def _resolve(self, correlation_id: str, text: str) -> None:
        entry = self._pending.get(correlation_id)
        if entry is not None and not entry.future.done():
            entry.future.set_result(text)

    def _reject(self, correlation_id: str, error: Exception) -> None:
        entry = self._pending.get(correlation_id)
        if entry is not None and not entry.future.done():
            entry.future.set_exception(error)
