"""RequestComposer module."""

from .composer import IRequestComposer, Payload, RequestComposer, format_attachment

__all__ = ["IRequestComposer", "Payload", "RequestComposer", "format_attachment"]
