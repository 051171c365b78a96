"""Chat module for Marginalia.

Provides per-book conversation threads with the AI reading companion.
"""

from .models import ChatMessage, ChatRole, ChatSession, MessageStatus
from .service import ChatService

__all__ = ["ChatMessage", "ChatRole", "ChatService", "ChatSession", "MessageStatus"]
