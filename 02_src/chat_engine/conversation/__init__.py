"""Conversation module."""

from .history import ConversationHistory

__all__ = ["ConversationHistory"]
