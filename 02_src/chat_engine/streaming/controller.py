"""StreamingSessionController: runs one exchange from send to terminal state."""

import asyncio
from typing import AsyncIterator, Iterable, Protocol

from ..composer import Payload
from ..config import (
    FALLBACK_TIMEOUT_SECONDS,
    LOAD_TIMEOUT_SECONDS,
    MAX_RETRIES,
    RETRY_BACKOFF_SECONDS,
    STALL_TIMEOUT_SECONDS,
)
from ..errors import (
    EngineError,
    ExchangeCancelled,
    StreamStalled,
    TransportUnavailable,
)
from ..gateway import ITransportGateway
from ..gateway.responses import Chunk, iter_chunks
from ..logging_config import get_logger
from ..models import (
    EngineState,
    ExchangeConfig,
    ExchangeResult,
    Message,
    SessionState,
    StreamingSession,
    TransportKind,
)
from ..tracker import ITracker
from .bridge import ExternalBridge
from .buffer import StreamBuffer, UpdateCallback
from .classify import classify_error
from .postprocess import PostProcessor

logger = get_logger(__name__)

EMPTY_RESPONSE_NOTICE = "⚠️ The model returned an empty response."
STALL_NOTICE = "⚠️ No data received for {seconds:.0f}s, the response stream stalled."
FAILURE_NOTICE = "⚠️ {kind}: {message}"

# How long to wait for an abandoned read to acknowledge cancellation
_ABANDON_GRACE_SECONDS = 1.0


class CancellationToken:
    """Cooperative stop signal checked between chunks.

    The primary stream cannot be aborted upstream; cancelling only makes the
    engine stop consuming it.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


class _PrimaryExhausted(Exception):
    def __init__(self, last_error: EngineError):
        super().__init__(last_error.message)
        self.last_error = last_error


class IStreamingSessionController(Protocol):
    """Runs a composed exchange to completion."""

    async def run(
        self,
        payload: Payload,
        config: ExchangeConfig,
        on_update: UpdateCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ExchangeResult:
        """Send, stream, retry and fall back; always returns a terminal result."""
        ...


class StreamingSessionController:
    """State machine for one exchange.

    Idle -> Sending -> Streaming -> Completed, with Stalled/Retrying loops on
    recoverable failures and a single fallback attempt once the primary
    transport has used its retry budget.
    """

    def __init__(
        self,
        gateway: ITransportGateway,
        bridge: ExternalBridge,
        state: EngineState | None = None,
        tracker: ITracker | None = None,
        max_retries: int = MAX_RETRIES,
        retry_backoff: float = RETRY_BACKOFF_SECONDS,
        stall_timeout: float = STALL_TIMEOUT_SECONDS,
        load_timeout: float = LOAD_TIMEOUT_SECONDS,
        fallback_timeout: float = FALLBACK_TIMEOUT_SECONDS,
        post_processors: Iterable[PostProcessor] = (),
    ):
        self._gateway = gateway
        self._bridge = bridge
        self._state = state if state is not None else EngineState()
        self._tracker = tracker
        self._max_retries = max(1, max_retries)
        self._retry_backoff = retry_backoff
        self._stall_timeout = stall_timeout
        self._load_timeout = load_timeout
        self._fallback_timeout = fallback_timeout
        self._post_processors = list(post_processors)
        self._session: StreamingSession | None = None

    @property
    def active_session(self) -> StreamingSession | None:
        """The exchange in flight, if any. Informational only, not a lock."""
        return self._session

    async def run(
        self,
        payload: Payload,
        config: ExchangeConfig,
        on_update: UpdateCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ExchangeResult:
        session = StreamingSession(config=config)
        buffer = StreamBuffer(on_update)
        token = cancel_token or CancellationToken()
        self._session = session

        logger.info(
            "Exchange started",
            extra={"context": {"request_id": session.request_id, "model": config.model_id}},
        )
        await self._track(
            "exchange_started",
            {
                "request_id": session.request_id,
                "model": config.model_id,
                "role_array": payload.is_role_array,
                "test_mode": config.test_mode,
            },
        )

        try:
            try:
                await self._run_primary(session, payload, buffer, token)
            except _PrimaryExhausted as exhausted:
                logger.warning(
                    "Primary transport exhausted after %d attempts: %s",
                    session.attempt + 1,
                    exhausted.last_error.message,
                )
                await self._run_fallback(session, payload, buffer, token)
        except EngineError as e:
            return await self._fail(session, buffer, e)
        finally:
            self._session = None

        return await self._complete(session, buffer)

    async def _run_primary(
        self,
        session: StreamingSession,
        payload: Payload,
        buffer: StreamBuffer,
        token: CancellationToken,
    ) -> None:
        while True:
            session.state = SessionState.SENDING
            if self._state.fallback_mode and not self._gateway.probe():
                raise _PrimaryExhausted(TransportUnavailable("Gateway SDK unavailable, fallback mode active"))

            try:
                await self._attempt(session, payload, buffer, token)
            except EngineError as e:
                if not e.recoverable:
                    raise
                if session.attempt + 1 >= self._max_retries:
                    raise _PrimaryExhausted(e) from e

                session.attempt += 1
                session.state = SessionState.RETRYING
                logger.warning(
                    "Retrying exchange (%d/%d) after %s: %s",
                    session.attempt,
                    self._max_retries - 1,
                    e.kind,
                    e.message,
                )
                await self._track(
                    "attempt_failed",
                    {
                        "request_id": session.request_id,
                        "attempt": session.attempt,
                        "error": e.to_dict(),
                    },
                )
                buffer.restart()
                await self._sleep_or_cancel(self._retry_backoff, token)
                continue

            if self._state.fallback_mode:
                logger.info("Primary transport answered, leaving fallback mode")
                self._state.fallback_mode = False
            return

    async def _attempt(
        self,
        session: StreamingSession,
        payload: Payload,
        buffer: StreamBuffer,
        token: CancellationToken,
    ) -> None:
        if token.cancelled:
            raise ExchangeCancelled("Exchange cancelled")

        if not self._gateway.probe():
            logger.info("Gateway SDK not available, trying to load it")
            if not await self._gateway.ensure_loaded(self._load_timeout):
                raise TransportUnavailable("Gateway SDK could not be loaded")

        try:
            response = await asyncio.wait_for(self._gateway.chat(payload), self._stall_timeout)
        except EngineError:
            raise
        except asyncio.TimeoutError:
            raise StreamStalled(
                f"Gateway did not accept the request within {self._stall_timeout:.0f}s"
            ) from None
        except Exception as e:
            raise classify_error(e) from e

        session.state = SessionState.STREAMING
        await self._consume(session, iter_chunks(response), buffer, token)

    async def _consume(
        self,
        session: StreamingSession,
        source: AsyncIterator[Chunk],
        buffer: StreamBuffer,
        token: CancellationToken,
    ) -> None:
        chunks = source.__aiter__()
        cancel_wait = asyncio.ensure_future(token.wait())
        try:
            while True:
                next_chunk = asyncio.ensure_future(chunks.__anext__())
                done, _ = await asyncio.wait(
                    {next_chunk, cancel_wait},
                    timeout=self._stall_timeout,
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if next_chunk not in done:
                    await self._abandon(next_chunk)
                    if cancel_wait in done:
                        raise ExchangeCancelled("Exchange cancelled")
                    session.state = SessionState.STALLED
                    await buffer.mark(STALL_NOTICE.format(seconds=self._stall_timeout))
                    raise StreamStalled(
                        f"No data received for {self._stall_timeout:.0f}s"
                    )

                try:
                    chunk = next_chunk.result()
                except StopAsyncIteration:
                    return
                except EngineError:
                    raise
                except Exception as e:
                    raise classify_error(e) from e

                session.touch(len(chunk.text.encode("utf-8")))
                await buffer.append(chunk.text)

                if token.cancelled:
                    raise ExchangeCancelled("Exchange cancelled")
        finally:
            cancel_wait.cancel()
            await self._close(chunks)

    @staticmethod
    async def _abandon(task: asyncio.Future) -> None:
        """Stop listening to a pending read."""
        task.cancel()
        await asyncio.wait({task}, timeout=_ABANDON_GRACE_SECONDS)

    @staticmethod
    async def _close(chunks: AsyncIterator[Chunk]) -> None:
        aclose = getattr(chunks, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as e:
            logger.debug("Ignoring error while closing stream: %s", e)

    async def _run_fallback(
        self,
        session: StreamingSession,
        payload: Payload,
        buffer: StreamBuffer,
        token: CancellationToken,
    ) -> None:
        session.transport = TransportKind.FALLBACK
        session.state = SessionState.SENDING
        self._state.fallback_mode = True
        buffer.restart()
        await self._track("fallback_engaged", {"request_id": session.request_id})

        updates: asyncio.Queue[str] = asyncio.Queue()
        request = asyncio.ensure_future(
            self._bridge.request(payload, on_chunk=updates.put_nowait, timeout=self._fallback_timeout)
        )
        cancel_wait = asyncio.ensure_future(token.wait())
        streamed = False
        try:
            session.state = SessionState.STREAMING
            while True:
                getter = asyncio.ensure_future(updates.get())
                done, _ = await asyncio.wait(
                    {getter, request, cancel_wait}, return_when=asyncio.FIRST_COMPLETED
                )
                if getter in done:
                    text = getter.result()
                    session.touch(len(text.encode("utf-8")))
                    await buffer.append(text)
                    streamed = True
                    continue

                getter.cancel()
                if cancel_wait in done and not request.done():
                    request.cancel()
                    raise ExchangeCancelled("Exchange cancelled")
                break

            while not updates.empty():
                await buffer.append(updates.get_nowait())
                streamed = True

            response = request.result()
        finally:
            cancel_wait.cancel()

        if not streamed and response.text:
            await buffer.append(response.text)

    async def _sleep_or_cancel(self, delay: float, token: CancellationToken) -> None:
        try:
            await asyncio.wait_for(token.wait(), delay)
        except asyncio.TimeoutError:
            return
        raise ExchangeCancelled("Exchange cancelled")

    async def _complete(self, session: StreamingSession, buffer: StreamBuffer) -> ExchangeResult:
        if buffer.restart_pending or not buffer.text.strip():
            buffer.clear()
            await buffer.mark(EMPTY_RESPONSE_NOTICE)
        else:
            text = buffer.text
            for post_process in self._post_processors:
                notice = post_process(text)
                if notice:
                    await buffer.mark(notice)

        session.state = SessionState.COMPLETED
        result = ExchangeResult(
            request_id=session.request_id,
            state=session.state,
            message=Message(role="assistant", content=buffer.text),
            attempts=session.attempt + 1,
            transport=session.transport,
        )
        logger.info(
            "Exchange completed",
            extra={
                "context": {
                    "request_id": session.request_id,
                    "attempts": result.attempts,
                    "transport": session.transport.value,
                    "bytes": session.bytes_received,
                }
            },
        )
        await self._track(
            "exchange_completed",
            {
                "request_id": session.request_id,
                "attempts": result.attempts,
                "transport": session.transport.value,
                "bytes_received": session.bytes_received,
            },
        )
        return result

    async def _fail(
        self, session: StreamingSession, buffer: StreamBuffer, error: EngineError
    ) -> ExchangeResult:
        await buffer.mark(FAILURE_NOTICE.format(kind=error.kind, message=error.message))
        session.state = SessionState.FAILED_FINAL
        logger.error(
            "Exchange failed: %s: %s",
            error.kind,
            error.message,
            extra={"context": {"request_id": session.request_id, "attempts": session.attempt + 1}},
        )
        await self._track(
            "exchange_failed",
            {
                "request_id": session.request_id,
                "attempts": session.attempt + 1,
                "transport": session.transport.value,
                "error": error.to_dict(),
            },
        )
        return ExchangeResult(
            request_id=session.request_id,
            state=session.state,
            message=Message(role="assistant", content=buffer.text),
            attempts=session.attempt + 1,
            transport=session.transport,
            error=error,
        )

    async def _track(self, event_type: str, data: dict) -> None:
        if self._tracker is None:
            return
        try:
            await self._tracker.track(event_type=event_type, actor="streaming_controller", data=data)
        except Exception as e:
            logger.error(f"Tracker error for {event_type}: {e}", exc_info=True)
