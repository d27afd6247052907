"""Tests for response decoding and chunk normalisation."""

from types import SimpleNamespace

import pytest

from chat_engine.gateway import (
    Chunk,
    StreamResponse,
    StructuredResponse,
    TextResponse,
    decode_response,
    iter_chunks,
)
from chat_engine.gateway.responses import part_text


async def collect(response):
    return [chunk async for chunk in iter_chunks(response)]


class TestDecodeResponse:
    """Tests for decode_response()."""

    def test_string(self):
        """Test that a string becomes a text response."""
        assert decode_response("hello") == TextResponse("hello")

    def test_none(self):
        """Test that None becomes an empty text response."""
        assert decode_response(None) == TextResponse("")

    def test_async_iterable(self):
        """Test that anything async-iterable is a stream."""

        async def gen():
            yield {"text": "a"}

        source = gen()
        response = decode_response(source)
        assert isinstance(response, StreamResponse)
        assert response.source is source

    def test_message_with_content_list(self):
        """Test the message.content[] object shape."""
        raw = {"message": {"content": [{"type": "text", "text": "Hi"}]}}
        assert decode_response(raw) == StructuredResponse([{"type": "text", "text": "Hi"}])

    def test_object_with_content_attribute(self):
        """Test that attribute access works as well as dict keys."""
        raw = SimpleNamespace(content=[SimpleNamespace(text="Hi")])
        response = decode_response(raw)
        assert isinstance(response, StructuredResponse)
        assert response.content[0].text == "Hi"

    def test_unknown_shape_serialised(self):
        """Test that an unrecognised shape falls back to its JSON text."""
        assert decode_response({"answer": 42}) == TextResponse('{"answer": 42}')


class TestPartText:
    """Tests for part_text()."""

    @pytest.mark.parametrize(
        "part,expected",
        [
            ("plain", "plain"),
            ({"text": "t"}, "t"),
            ({"delta": {"text": "d"}}, "d"),
            (SimpleNamespace(text="attr"), "attr"),
            ({"type": "image"}, ""),
            (None, ""),
        ],
    )
    def test_part_text(self, part, expected):
        """Test text extraction from the known part shapes."""
        assert part_text(part) == expected


class TestIterChunks:
    """Tests for iter_chunks()."""

    @pytest.mark.asyncio
    async def test_text_response_single_chunk(self):
        """Test that a text response yields one chunk."""
        assert await collect(TextResponse("whole")) == [Chunk("whole")]

    @pytest.mark.asyncio
    async def test_empty_text_yields_nothing(self):
        """Test that an empty text response yields no chunks."""
        assert await collect(TextResponse("")) == []

    @pytest.mark.asyncio
    async def test_structured_response_in_order(self):
        """Test that content parts are yielded in order, skipping empty ones."""
        response = StructuredResponse([{"text": "a"}, {"type": "tool_use"}, {"text": "b"}])
        assert await collect(response) == [Chunk("a"), Chunk("b")]

    @pytest.mark.asyncio
    async def test_stream_response_skips_empty_parts(self):
        """Test that empty stream parts are dropped."""

        async def gen():
            yield {"text": "Hel"}
            yield {"text": ""}
            yield "lo"

        assert await collect(StreamResponse(gen())) == [Chunk("Hel"), Chunk("lo")]

    @pytest.mark.asyncio
    async def test_stream_closed_when_abandoned(self):
        """Test that breaking out of the chunks closes the upstream iterator."""
        closed = []

        async def gen():
            try:
                yield {"text": "a"}
                yield {"text": "b"}
            finally:
                closed.append(True)

        chunks = iter_chunks(StreamResponse(gen()))
        assert await chunks.__anext__() == Chunk("a")
        await chunks.aclose()

        assert closed == [True]

    @pytest.mark.asyncio
    async def test_stream_error_propagates(self):
        """Test that an error raised mid-stream reaches the consumer."""

        async def gen():
            yield {"text": "a"}
            raise ConnectionError("network down")

        with pytest.raises(ConnectionError):
            await collect(StreamResponse(gen()))
