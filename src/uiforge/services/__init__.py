"""Persistence services."""

from .storage import ConversationStore, InMemoryConversationStore, StoredMessage, UIVersion

__all__ = [
    "ConversationStore",
    "InMemoryConversationStore",
    "StoredMessage",
    "UIVersion",
]
