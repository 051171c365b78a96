"""Data models for book chat threads."""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from ..notes.models import parse_datetime

TITLE_PREVIEW_LENGTH = 50


class ChatRole(Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class MessageStatus(Enum):
    """Delivery status of a chat message."""

    SENDING = "sending"
    SENT = "sent"
    ERROR = "error"


@dataclass
class ChatMessage:
    """A single message in a book chat thread."""

    role: ChatRole
    content: str
    book_id: str | None = None
    session_id: str | None = None
    status: MessageStatus = MessageStatus.SENT
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    referenced_note_ids: list[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "session_id": self.session_id,
            "role": self.role.value,
            "content": self.content,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "referenced_note_ids": list(self.referenced_note_ids),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            book_id=data.get("book_id"),
            session_id=data.get("session_id"),
            role=ChatRole(data["role"]),
            content=data.get("content", ""),
            status=MessageStatus(data.get("status", "sent")),
            created_at=parse_datetime(data.get("created_at")),
            referenced_note_ids=list(data.get("referenced_note_ids", [])),
        )


@dataclass
class ChatSession:
    """A conversation thread about one book.

    Attributes:
        book_id: Book the thread belongs to
        title: Explicit title ("" until the first message is sent)
        messages: Messages in send order
        created_at: Creation time
        updated_at: Time of the last message
        id: Thread identifier
    """

    book_id: str
    title: str = ""
    messages: list[ChatMessage] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def display_title(self) -> str:
        """Explicit title, else a preview of the first user message."""
        if self.title:
            return self.title

        for message in self.messages:
            if message.role == ChatRole.USER:
                preview = message.content[:TITLE_PREVIEW_LENGTH]
                if len(preview) < len(message.content):
                    return f"{preview}..."
                return preview

        return "New conversation"

    @property
    def message_count(self) -> int:
        """Number of messages, system messages excluded."""
        return sum(1 for m in self.messages if m.role != ChatRole.SYSTEM)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "title": self.title,
            "messages": [m.to_dict() for m in self.messages],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatSession":
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            book_id=data.get("book_id", ""),
            title=data.get("title", ""),
            messages=[ChatMessage.from_dict(m) for m in data.get("messages", [])],
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )


__all__ = ["ChatMessage", "ChatRole", "ChatSession", "MessageStatus"]
