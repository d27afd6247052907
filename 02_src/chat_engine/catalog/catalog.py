"""ModelCatalog: cached list of models usable through the gateway."""

import asyncio
import time
from typing import Any, Callable, Protocol

from ..config import CATALOG_TTL_SECONDS
from ..gateway import ITransportGateway
from ..logging_config import get_logger
from ..models import ModelCatalogEntry
from .fallback_models import FALLBACK_MODELS

logger = get_logger(__name__)

# (token, provider); first match wins, so more specific tokens come first
_PROVIDER_TOKENS: tuple[tuple[str, str], ...] = (
    ("claude", "anthropic"),
    ("anthropic", "anthropic"),
    ("gpt", "openai"),
    ("openai", "openai"),
    ("gemini", "google"),
    ("gemma", "google"),
    ("llama", "meta"),
    ("deepseek", "deepseek"),
    ("mistral", "mistral"),
    ("pixtral", "mistral"),
    ("codestral", "mistral"),
    ("grok", "xai"),
)
_OPENAI_REASONING_PREFIXES = ("o1", "o3", "o4")

_ID_KEYS = ("id", "model_id", "name")
_LABEL_KEYS = ("display_name", "displayName", "name")


class MalformedCatalog(ValueError):
    """The gateway returned something that is not a usable model list."""


class IModelCatalog(Protocol):
    """Cached model lookups."""

    async def list(self, force_refresh: bool = False) -> list[ModelCatalogEntry]:
        """Return the catalog, refreshing it when stale."""
        ...


def infer_provider(model_id: str) -> str:
    """Guess the vendor from tokens in the model id."""
    lowered = model_id.lower()
    for token, provider in _PROVIDER_TOKENS:
        if token in lowered:
            return provider
    if lowered.startswith(_OPENAI_REASONING_PREFIXES):
        return "openai"
    return "unknown"


def _field(item: Any, keys: tuple[str, ...]) -> str | None:
    for key in keys:
        if isinstance(item, dict):
            value = item.get(key)
        else:
            value = getattr(item, key, None)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def normalize_entry(item: Any) -> ModelCatalogEntry | None:
    """Build an entry from one vendor record, or None when it has no id."""
    if isinstance(item, str):
        model_id = item.strip()
        if not model_id:
            return None
        return ModelCatalogEntry(model_id, model_id, infer_provider(model_id))

    model_id = _field(item, _ID_KEYS)
    if model_id is None:
        return None

    label = None
    for key in _LABEL_KEYS:
        candidate = _field(item, (key,))
        # "name" may be the id itself; only use it when it reads differently
        if candidate and candidate != model_id:
            label = candidate
            break

    return ModelCatalogEntry(
        id=model_id,
        display_name=label or model_id,
        provider=_field(item, ("provider",)) or infer_provider(model_id),
        description=_field(item, ("description",)),
    )


def normalize_models(raw: Any) -> list[ModelCatalogEntry]:
    """Normalize a raw model list; raises MalformedCatalog when unusable."""
    if isinstance(raw, dict):
        for key in ("models", "data"):
            if isinstance(raw.get(key), list):
                raw = raw[key]
                break
    if not isinstance(raw, list):
        raise MalformedCatalog(f"expected a list of models, got {type(raw).__name__}")

    entries: list[ModelCatalogEntry] = []
    seen: set[str] = set()
    for item in raw:
        entry = normalize_entry(item)
        if entry is None or entry.id in seen:
            continue
        seen.add(entry.id)
        entries.append(entry)

    if not entries:
        raise MalformedCatalog("model list contained no usable entries")
    return entries


class ModelCatalog:
    """Model list with a time-to-live cache and a built-in fallback table."""

    def __init__(
        self,
        gateway: ITransportGateway,
        ttl: float = CATALOG_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._gateway = gateway
        self._ttl = ttl
        self._clock = clock

        self._entries: list[ModelCatalogEntry] | None = None
        self._fetched_at: float | None = None
        self._source = "none"
        self._refresh_task: asyncio.Task | None = None
        self._inflight: asyncio.Task | None = None

    @property
    def source(self) -> str:
        """Where the cached entries came from: none, live or fallback."""
        return self._source

    def is_fresh(self) -> bool:
        if self._entries is None or self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self._ttl

    # Helpers annotated with list[...] sit above list(), which shadows the
    # builtin in this class body

    def _store(self, entries: list[ModelCatalogEntry], source: str) -> None:
        self._entries = entries
        self._fetched_at = self._clock()
        self._source = source

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _refresh(self) -> list[ModelCatalogEntry]:
        try:
            raw = await self._gateway.list_models()
            entries = normalize_models(raw)
        except Exception as e:
            logger.warning("Model catalog refresh failed: %s", e)
            if self._entries:
                # Keep serving what we have
                return self._entries
            self._store(list(FALLBACK_MODELS), "fallback")
            return self._entries

        self._store(entries, "live")
        logger.info("Model catalog refreshed with %d models", len(entries))
        return self._entries

    async def list(self, force_refresh: bool = False) -> list[ModelCatalogEntry]:
        if self.is_fresh() and not force_refresh:
            return self._entries

        # Overlapping callers share one fetch
        if self._inflight is None:
            self._inflight = asyncio.create_task(self._refresh())
            self._inflight.add_done_callback(self._clear_inflight)
        return await asyncio.shield(self._inflight)

    def get(self, model_id: str) -> ModelCatalogEntry | None:
        """Cached entry for a model id, falling back to the built-in table."""
        for entry in self._entries or FALLBACK_MODELS:
            if entry.id == model_id:
                return entry
        return None

    def display_name(self, model_id: str) -> str:
        entry = self.get(model_id)
        return entry.display_name if entry else model_id

    async def start(self, interval: float | None = None) -> None:
        """Start refreshing the catalog in the background."""
        if self._refresh_task is not None:
            return
        self._refresh_task = asyncio.create_task(self._refresh_timer(interval or self._ttl))

    async def stop(self) -> None:
        """Stop the background refresh."""
        if self._refresh_task is None:
            return
        self._refresh_task.cancel()
        try:
            await self._refresh_task
        except asyncio.CancelledError:
            pass
        self._refresh_task = None

    async def _refresh_timer(self, interval: float) -> None:
        while True:
            try:
                await self.list(force_refresh=True)
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Model catalog timer error: {e}", exc_info=True)
                await asyncio.sleep(interval)
