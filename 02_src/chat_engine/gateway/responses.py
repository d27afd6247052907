"""Normalisation of the shapes the gateway SDK may return."""

import json
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Union

from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Chunk:
    """One piece of streamed text."""

    text: str


@dataclass(frozen=True)
class TextResponse:
    """The whole answer as one string."""

    text: str


@dataclass(frozen=True)
class StreamResponse:
    """An async iterable of chunk-like parts."""

    source: AsyncIterable[Any]


@dataclass(frozen=True)
class StructuredResponse:
    """A message object carrying a list of content parts."""

    content: list[Any]


Response = Union[TextResponse, StreamResponse, StructuredResponse]


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def part_text(part: Any) -> str:
    """Text carried by a stream part or content item, or ''."""
    if part is None:
        return ""
    if isinstance(part, str):
        return part
    text = _get(part, "text")
    if isinstance(text, str):
        return text
    delta = _get(part, "delta")
    if delta is not None:
        return part_text(delta)
    return ""


def _structured_content(raw: Any) -> list[Any] | None:
    message = _get(raw, "message")
    container = message if message is not None else raw
    content = _get(container, "content")
    if isinstance(content, list):
        return content
    if isinstance(content, str):
        return [content]
    return None


def decode_response(raw: Any) -> Response:
    """Decode whatever the SDK returned into one of the Response variants."""
    if raw is None:
        return TextResponse("")
    if isinstance(raw, str):
        return TextResponse(raw)
    if hasattr(raw, "__aiter__"):
        return StreamResponse(raw)

    content = _structured_content(raw)
    if content is not None:
        return StructuredResponse(content)

    logger.warning("Unrecognised response shape %s, using its text form", type(raw).__name__)
    try:
        return TextResponse(json.dumps(raw, default=str))
    except (TypeError, ValueError):
        return TextResponse(str(raw))


async def iter_chunks(response: Response) -> AsyncIterator[Chunk]:
    """Yield the non-empty chunks of any response variant in order."""
    if isinstance(response, TextResponse):
        if response.text:
            yield Chunk(response.text)
        return

    if isinstance(response, StructuredResponse):
        for item in response.content:
            text = part_text(item)
            if text:
                yield Chunk(text)
        return

    iterator = response.source.__aiter__()
    try:
        async for part in iterator:
            text = part_text(part)
            if text:
                yield Chunk(text)
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            try:
                await aclose()
            except Exception as e:
                logger.debug("Ignoring error while closing stream: %s", e)
