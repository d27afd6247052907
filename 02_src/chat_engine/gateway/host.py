"""Script host: the global namespace the gateway SDK installs itself into."""

import asyncio
import importlib
import inspect
import sys
from types import ModuleType
from typing import Any, Protocol

from ..logging_config import get_logger

logger = get_logger(__name__)


class IScriptHost(Protocol):
    """Loader plus global namespace shared with the injected SDK."""

    namespace: dict[str, Any]

    def has_loader(self, src: str) -> bool:
        """Whether a load of ``src`` was already requested."""
        ...

    def inject(self, src: str, fresh: bool = False) -> "asyncio.Task[None]":
        """Start loading ``src`` in the background and return the load task."""
        ...


class ModuleScriptHost:
    """Loads SDK modules by dotted path.

    A loaded module must expose ``install(namespace, global_name)``, which
    publishes the SDK object under ``global_name`` (its own default when
    None). Imports run on a worker thread so a slow import never blocks the
    event loop.
    """

    def __init__(self, namespace: dict[str, Any] | None = None, global_name: str | None = None):
        self.namespace: dict[str, Any] = namespace if namespace is not None else {}
        self._global_name = global_name
        self._loaders: dict[str, asyncio.Task] = {}

    def has_loader(self, src: str) -> bool:
        return src in self._loaders

    def inject(self, src: str, fresh: bool = False) -> "asyncio.Task[None]":
        logger.debug("Injecting SDK %s (fresh=%s)", src, fresh)
        task = asyncio.create_task(self._load(src, fresh))
        task.add_done_callback(self._log_failure)
        self._loaders[src] = task
        return task

    async def _load(self, src: str, fresh: bool) -> None:
        module = await asyncio.to_thread(self._import, src, fresh)
        install = getattr(module, "install", None)
        if not callable(install):
            raise ImportError(f"SDK module {src!r} does not define install()")

        result = install(self.namespace, self._global_name)
        if inspect.isawaitable(result):
            await result

    @staticmethod
    def _import(src: str, fresh: bool) -> ModuleType:
        if fresh and src in sys.modules:
            return importlib.reload(sys.modules[src])
        return importlib.import_module(src)

    @staticmethod
    def _log_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("SDK load failed: %s", exc)
