"""Data models for reading sessions.

Defines the ReadingSession entity and its derived values.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from ..notes.models import parse_datetime


@dataclass
class ReadingSession:
    """A time-bounded stretch of reading a single book.

    Attributes:
        book_id: Book being read
        start_time: When reading began
        start_page: Page the reader started on
        end_time: When the session ended (None while active)
        end_page: Page the reader stopped on
        note_ids: Notes taken during the session, in insertion order
        key_insight: AI summary of the session
        is_active: True until the session is ended
        id: Session identifier
    """

    book_id: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    start_page: int = 0
    end_time: datetime | None = None
    end_page: int | None = None
    note_ids: list[str] = field(default_factory=list)
    key_insight: str | None = None
    is_active: bool = True
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def end(
        self,
        end_time: datetime | None = None,
        end_page: int | None = None,
        key_insight: str | None = None,
    ) -> None:
        """Mark the session as ended.

        Args:
            end_time: When the session ended (defaults to now)
            end_page: Page the reader stopped on
            key_insight: Optional session insight
        """
        self.is_active = False
        self.end_time = end_time or datetime.now(UTC)
        if end_page is not None:
            self.end_page = end_page
        if key_insight is not None:
            self.key_insight = key_insight

    def add_note(self, note_id: str) -> bool:
        """Append a note id unless already present.

        Returns:
            True if the id was appended
        """
        if note_id in self.note_ids:
            return False
        self.note_ids.append(note_id)
        return True

    @property
    def duration(self) -> timedelta:
        """Elapsed reading time, up to now while still active."""
        end = self.end_time or datetime.now(UTC)
        return end - self.start_time

    @property
    def pages_read(self) -> int:
        """Pages read, never negative."""
        end = self.end_page if self.end_page is not None else self.start_page
        return max(0, end - self.start_page)

    @property
    def notes_count(self) -> int:
        return len(self.note_ids)

    @property
    def formatted_duration(self) -> str:
        """Duration as MM:SS, or HH:MM:SS from one hour up."""
        total_seconds = int(self.duration.total_seconds())
        hours, remainder = divmod(total_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)
        if hours > 0:
            return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        return f"{minutes:02d}:{seconds:02d}"

    @property
    def summary(self) -> str:
        """Short description such as "12 pages • 3 notes"."""
        parts: list[str] = []
        if self.pages_read > 0:
            parts.append(f"{self.pages_read} page{'s' if self.pages_read != 1 else ''}")
        if self.notes_count > 0:
            parts.append(f"{self.notes_count} note{'s' if self.notes_count != 1 else ''}")
        return " • ".join(parts) if parts else "Reading session"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary for the durable store."""
        return {
            "id": self.id,
            "book_id": self.book_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "start_page": self.start_page,
            "end_page": self.end_page,
            "note_ids": list(self.note_ids),
            "key_insight": self.key_insight,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReadingSession":
        """Create from a stored record."""
        end_time = data.get("end_time")
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            book_id=data.get("book_id", ""),
            start_time=parse_datetime(data.get("start_time")),
            end_time=parse_datetime(end_time) if end_time else None,
            start_page=data.get("start_page", 0),
            end_page=data.get("end_page"),
            note_ids=list(data.get("note_ids", [])),
            key_insight=data.get("key_insight"),
            is_active=data.get("is_active", False),
        )


__all__ = ["ReadingSession"]
