"""TransportGateway module."""

from .gateway import ITransportGateway, TransportGateway
from .host import IScriptHost, ModuleScriptHost
from .responses import (
    Chunk,
    Response,
    StreamResponse,
    StructuredResponse,
    TextResponse,
    decode_response,
    iter_chunks,
)

__all__ = [
    "ITransportGateway",
    "TransportGateway",
    "IScriptHost",
    "ModuleScriptHost",
    "Chunk",
    "Response",
    "TextResponse",
    "StreamResponse",
    "StructuredResponse",
    "decode_response",
    "iter_chunks",
]
