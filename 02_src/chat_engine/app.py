"""Application bootstrap and lifecycle management."""

import asyncio
from typing import Iterable, Protocol

from .catalog import ModelCatalog
from .composer import RequestComposer
from .config import Settings
from .conversation import ConversationHistory
from .diagnostics import collect_diagnostics
from .errors import ExchangeInProgress
from .gateway import IScriptHost, ModuleScriptHost, TransportGateway
from .logging_config import get_logger
from .models import (
    Attachment,
    ConnectionStatus,
    EngineState,
    ExchangeConfig,
    ExchangeResult,
    Message,
    ModelCatalogEntry,
)
from .status import ConnectionStatusTracker
from .streaming import (
    CancellationToken,
    ExternalBridge,
    StreamingSessionController,
    UpdateCallback,
    flag_possibly_incomplete,
)
from .tracker import Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Engine operations offered to the UI collaborator."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def send_exchange(
        self,
        user_text: str,
        attachments: Iterable[Attachment],
        config: ExchangeConfig,
        on_update: UpdateCallback | None = None,
    ) -> ExchangeResult:
        """Run one exchange, streaming snapshots to ``on_update``."""
        ...

    async def list_models(self, force_refresh: bool = False) -> list[ModelCatalogEntry]:
        """Model catalog for model selection."""
        ...

    def get_connection_status(self) -> ConnectionStatus:
        """Current connection status."""
        ...

    async def retry_connection(self) -> ConnectionStatus:
        """User-triggered reconnection."""
        ...


class Application:
    """Main application bootstrap.

    Also the caller-side gate for the one-exchange-at-a-time contract: the
    controller itself holds no lock.
    """

    def __init__(self, settings: Settings | None = None, host: IScriptHost | None = None):
        self._settings = settings or Settings.from_env()
        self._host = host

        # Components (will be initialized in start())
        self._state: EngineState | None = None
        self._gateway: TransportGateway | None = None
        self._tracker: Tracker | None = None
        self._composer: RequestComposer | None = None
        self._controller: StreamingSessionController | None = None
        self._catalog: ModelCatalog | None = None
        self._status: ConnectionStatusTracker | None = None
        self._conversation: ConversationHistory | None = None

        self._detection_task: asyncio.Task | None = None
        self._active_exchange: CancellationToken | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        settings = self._settings
        logger.info("Starting application")

        # 1. Script host and shared engine flags
        host = self._host or ModuleScriptHost(global_name=settings.sdk_global)
        self._state = EngineState()

        # 2. Gateway (depends on host + state)
        self._gateway = TransportGateway(
            host,
            self._state,
            script_src=settings.sdk_src,
            global_name=settings.sdk_global,
            poll_interval=settings.probe_interval,
        )

        # 3. Tracker (no dependencies)
        self._tracker = Tracker()

        # 4. Exchange pipeline (composer, fallback bridge, controller)
        self._composer = RequestComposer()
        bridge = ExternalBridge(
            host,
            script_src=settings.sdk_src,
            global_name=settings.sdk_global,
            timeout=settings.fallback_timeout,
        )
        post_processors = [flag_possibly_incomplete] if settings.flag_incomplete else []
        self._controller = StreamingSessionController(
            self._gateway,
            bridge,
            state=self._state,
            tracker=self._tracker,
            max_retries=settings.max_retries,
            retry_backoff=settings.retry_backoff,
            stall_timeout=settings.stall_timeout,
            load_timeout=settings.load_timeout,
            fallback_timeout=settings.fallback_timeout,
            post_processors=post_processors,
        )

        # 5. Catalog and connection status (depend on gateway)
        self._catalog = ModelCatalog(self._gateway, ttl=settings.catalog_ttl)
        self._status = ConnectionStatusTracker(
            self._gateway, detection_window=settings.detection_window
        )
        self._status.subscribe(self._on_status_change)

        self._conversation = ConversationHistory()

        # Detection runs in the background; the status starts as loading
        self._detection_task = asyncio.create_task(self._status.start())
        await self._catalog.start(settings.catalog_refresh_interval)
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._active_exchange:
            self._active_exchange.cancel()
        if self._catalog:
            await self._catalog.stop()
        if self._detection_task and not self._detection_task.done():
            self._detection_task.cancel()
            try:
                await self._detection_task
            except asyncio.CancelledError:
                pass
        logger.info("Application stopped")

    async def send_exchange(
        self,
        user_text: str,
        attachments: Iterable[Attachment],
        config: ExchangeConfig,
        on_update: UpdateCallback | None = None,
    ) -> ExchangeResult:
        """Compose, send and stream one exchange; appends both turns to the transcript."""
        if self._active_exchange is not None:
            raise ExchangeInProgress("Another exchange is still streaming")

        token = CancellationToken()
        self._active_exchange = token
        try:
            payload = self.composer.compose(user_text, list(attachments), config)
            self.conversation.add(Message(role="user", content=user_text))

            result = await self.controller.run(payload, config, on_update, token)
            self.conversation.add(result.message)
            return result
        finally:
            self._active_exchange = None

    @property
    def exchange_active(self) -> bool:
        return self._active_exchange is not None

    def cancel_exchange(self) -> bool:
        """Stop consuming the active exchange. Returns False when none is active."""
        if self._active_exchange is None:
            return False
        self._active_exchange.cancel()
        return True

    async def list_models(self, force_refresh: bool = False) -> list[ModelCatalogEntry]:
        return await self.catalog.list(force_refresh=force_refresh)

    def get_connection_status(self) -> ConnectionStatus:
        return self.status_tracker.status

    async def retry_connection(self) -> ConnectionStatus:
        return await self.status_tracker.retry()

    async def diagnostics(self) -> dict:
        """Client info and connectivity report."""
        return await collect_diagnostics(self.gateway)

    async def _on_status_change(self, status: ConnectionStatus) -> None:
        if status is ConnectionStatus.LOADED and self._catalog is not None:
            await self._catalog.list(force_refresh=True)

    @property
    def gateway(self) -> TransportGateway:
        """Get gateway instance."""
        if not self._gateway:
            raise RuntimeError("Application not started")
        return self._gateway

    @property
    def composer(self) -> RequestComposer:
        if not self._composer:
            raise RuntimeError("Application not started")
        return self._composer

    @property
    def controller(self) -> StreamingSessionController:
        if not self._controller:
            raise RuntimeError("Application not started")
        return self._controller

    @property
    def catalog(self) -> ModelCatalog:
        if not self._catalog:
            raise RuntimeError("Application not started")
        return self._catalog

    @property
    def status_tracker(self) -> ConnectionStatusTracker:
        if not self._status:
            raise RuntimeError("Application not started")
        return self._status

    @property
    def tracker(self) -> Tracker:
        """Get trace tracker instance."""
        if not self._tracker:
            raise RuntimeError("Application not started")
        return self._tracker

    @property
    def conversation(self) -> ConversationHistory:
        """Get conversation transcript."""
        if self._conversation is None:
            raise RuntimeError("Application not started")
        return self._conversation
