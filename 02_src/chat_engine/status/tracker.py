"""ConnectionStatusTracker: loading/loaded/error derived from gateway probes."""

import asyncio
import inspect
from typing import Awaitable, Callable, Protocol, Union

from ..config import DETECTION_WINDOW_SECONDS
from ..gateway import ITransportGateway
from ..logging_config import get_logger
from ..models import ConnectionStatus

logger = get_logger(__name__)

StatusListener = Callable[[ConnectionStatus], Union[Awaitable[None], None]]


class IConnectionStatusTracker(Protocol):
    """Connection status exposed to the UI."""

    @property
    def status(self) -> ConnectionStatus:
        """Current status."""
        ...

    async def start(self) -> ConnectionStatus:
        """Run the initial detection window."""
        ...

    async def retry(self) -> ConnectionStatus:
        """Re-enter loading and detect again, re-injecting the SDK."""
        ...


class ConnectionStatusTracker:
    """State machine: loading -> loaded | error, error -> loading on retry."""

    def __init__(
        self,
        gateway: ITransportGateway,
        detection_window: float = DETECTION_WINDOW_SECONDS,
    ):
        self._gateway = gateway
        self._detection_window = detection_window
        self._status = ConnectionStatus.LOADING
        self._listeners: list[StatusListener] = []
        self._detecting: asyncio.Task | None = None

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    def subscribe(self, listener: StatusListener) -> None:
        """Call ``listener`` on every status change."""
        self._listeners.append(listener)

    async def start(self) -> ConnectionStatus:
        return await self._detect(force=False)

    async def retry(self) -> ConnectionStatus:
        logger.info("Connection retry requested")
        return await self._detect(force=True)

    async def _detect(self, force: bool) -> ConnectionStatus:
        # Concurrent callers share one detection run
        if self._detecting is not None and not self._detecting.done():
            return await asyncio.shield(self._detecting)

        self._detecting = asyncio.create_task(self._run_detection(force))
        return await asyncio.shield(self._detecting)

    async def _run_detection(self, force: bool) -> ConnectionStatus:
        await self._set(ConnectionStatus.LOADING)
        try:
            loaded = await self._gateway.ensure_loaded(self._detection_window, force=force)
        except Exception as e:
            logger.error(f"Connection detection failed: {e}", exc_info=True)
            loaded = False

        await self._set(ConnectionStatus.LOADED if loaded else ConnectionStatus.ERROR)
        return self._status

    async def _set(self, status: ConnectionStatus) -> None:
        if status is self._status:
            return
        self._status = status

        logger.info("Connection status: %s", status.value)
        results = await asyncio.gather(
            *[self._notify(listener, status) for listener in self._listeners],
            return_exceptions=True,
        )
        for i, result in enumerate(results):
            if isinstance(result, Exception):
                logger.error("Error in status listener %s: %s", i, result)

    @staticmethod
    async def _notify(listener: StatusListener, status: ConnectionStatus) -> None:
        result = listener(status)
        if inspect.isawaitable(result):
            await result
