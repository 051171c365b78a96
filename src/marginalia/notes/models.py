"""Data models for reading notes.

Defines the Note entity together with its NoteType and NoteSource enums.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class NoteType(Enum):
    """Semantic type of a note."""

    THOUGHT = "thought"
    QUOTE = "quote"
    QUESTION = "question"

    @property
    def display_name(self) -> str:
        """Human readable label, also used as the chat prefix."""
        return self.value.capitalize()


class NoteSource(Enum):
    """How the note was captured."""

    VOICE = "voice"
    CAMERA = "camera"
    MANUAL = "manual"


def _new_id() -> str:
    return str(uuid.uuid4())


def parse_datetime(value: Any) -> datetime:
    """Accept datetimes or ISO strings, always returning an aware UTC value."""
    if value is None:
        return datetime.now(UTC)
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


@dataclass
class Note:
    """A note attached to a book, optionally within a reading session.

    Attributes:
        book_id: Owning book
        content: Cleaned note text
        type: Note type, fixed at creation
        source: Capture source
        session_id: Reading session the note was taken in (if any)
        page: Page number the note refers to (if known)
        ai_response: Answer from the AI service (questions only)
        created_at: Creation time
        updated_at: Last modification time
        id: Note identifier
    """

    book_id: str
    content: str
    type: NoteType = NoteType.THOUGHT
    source: NoteSource = NoteSource.MANUAL
    session_id: str | None = None
    page: int | None = None
    ai_response: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary for the durable store."""
        return {
            "id": self.id,
            "book_id": self.book_id,
            "session_id": self.session_id,
            "content": self.content,
            "type": self.type.value,
            "source": self.source.value,
            "page": self.page,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "ai_response": self.ai_response,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Note":
        """Create from a stored record."""
        return cls(
            id=data.get("id") or _new_id(),
            book_id=data.get("book_id", ""),
            session_id=data.get("session_id"),
            content=data.get("content", ""),
            type=NoteType(data.get("type", "thought")),
            source=NoteSource(data.get("source", "manual")),
            page=data.get("page"),
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
            ai_response=data.get("ai_response"),
        )


__all__ = ["Note", "NoteSource", "NoteType", "parse_datetime"]
