"""TransportGateway: availability detection and calls into the gateway SDK."""

import asyncio
import inspect
import time
from typing import Any, Protocol

from ..composer import Payload
from ..config import DEFAULT_SDK_GLOBAL, DEFAULT_SDK_SRC, PROBE_INTERVAL_SECONDS
from ..errors import TransportUnavailable
from ..logging_config import get_logger
from ..models import EngineState
from .host import IScriptHost
from .responses import Response, decode_response

logger = get_logger(__name__)

_KNOWN_METHODS = ("chat", "completion", "list_models", "txt2img", "img2txt")


class ITransportGateway(Protocol):
    """Access to the dynamically loaded gateway SDK."""

    def probe(self) -> bool:
        """Whether the SDK chat entry point exists and is callable."""
        ...

    async def ensure_loaded(self, timeout: float, force: bool = False) -> bool:
        """Inject the SDK if needed and wait for it. Never raises."""
        ...

    async def chat(self, payload: Payload) -> Response:
        """Send a composed payload through the SDK."""
        ...

    async def list_models(self) -> Any:
        """Raw model list from the SDK."""
        ...


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class TransportGateway:
    """Wraps the SDK published in the script host's namespace."""

    def __init__(
        self,
        host: IScriptHost,
        state: EngineState | None = None,
        script_src: str = DEFAULT_SDK_SRC,
        global_name: str = DEFAULT_SDK_GLOBAL,
        poll_interval: float = PROBE_INTERVAL_SECONDS,
    ):
        self._host = host
        self._state = state if state is not None else EngineState()
        self._script_src = script_src
        self._global_name = global_name
        self._poll_interval = poll_interval
        self._load_task: asyncio.Task | None = None

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def host(self) -> IScriptHost:
        return self._host

    @property
    def script_src(self) -> str:
        return self._script_src

    @property
    def global_name(self) -> str:
        return self._global_name

    def sdk(self) -> Any:
        """The SDK object, or None when it is not installed."""
        return self._host.namespace.get(self._global_name)

    def probe(self) -> bool:
        try:
            sdk = self.sdk()
            ai = getattr(sdk, "ai", None) if sdk is not None else None
            return ai is not None and callable(getattr(ai, "chat", None))
        except Exception:
            return False

    def available_methods(self) -> list[str]:
        """Names of the known SDK entry points that are callable."""
        sdk = self.sdk()
        ai = getattr(sdk, "ai", None) if sdk is not None else None
        if ai is None:
            return []
        return [name for name in _KNOWN_METHODS if callable(getattr(ai, name, None))]

    async def ensure_loaded(self, timeout: float, force: bool = False) -> bool:
        if self.probe() and not force:
            return True

        if force or not (self._state.script_requested or self._host.has_loader(self._script_src)):
            logger.info("Requesting gateway SDK %s", self._script_src)
            self._load_task = self._host.inject(self._script_src, fresh=force)
            self._state.script_requested = True
        else:
            logger.debug("Gateway SDK already requested, waiting for it")

        deadline = time.monotonic() + timeout
        while True:
            if self.probe():
                logger.info("Gateway SDK available")
                return True
            if self._load_failed():
                return False
            if time.monotonic() >= deadline:
                logger.warning("Timed out after %.1fs waiting for gateway SDK", timeout)
                return False
            await asyncio.sleep(self._poll_interval)

    def _load_failed(self) -> bool:
        task = self._load_task
        if task is None or not task.done():
            return False
        return task.cancelled() or task.exception() is not None

    async def chat(self, payload: Payload) -> Response:
        if not self.probe():
            raise TransportUnavailable("Gateway SDK is not loaded")

        ai = self.sdk().ai
        logger.debug(
            "Calling gateway chat",
            extra={"context": {"model": payload.model, "role_array": payload.is_role_array}},
        )
        raw = await _resolve(ai.chat(payload.prompt, payload.test_mode, payload.options()))
        return decode_response(raw)

    async def list_models(self) -> Any:
        if not self.probe():
            raise TransportUnavailable("Gateway SDK is not loaded")

        ai = self.sdk().ai
        list_models = getattr(ai, "list_models", None)
        if not callable(list_models):
            raise TransportUnavailable("Gateway SDK has no list_models entry point")
        return await _resolve(list_models())

    async def is_signed_in(self) -> bool:
        """Boolean signed-in flag reported by the SDK."""
        try:
            auth = getattr(self.sdk(), "auth", None)
            check = getattr(auth, "is_signed_in", None)
            if not callable(check):
                return False
            return bool(await _resolve(check()))
        except Exception as e:
            logger.warning("Signed-in check failed: %s", e)
            return False
