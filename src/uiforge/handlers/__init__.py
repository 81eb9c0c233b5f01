"""Request handlers."""

from .chat import ChatHandler, format_sse

__all__ = ["ChatHandler", "format_sse"]
