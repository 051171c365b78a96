"""Data models for books."""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from ..notes.models import parse_datetime


class ReadingStatus(Enum):
    """Where the reader is with a book."""

    WANT_TO_READ = "want_to_read"
    READING = "reading"
    FINISHED = "finished"
    ABANDONED = "abandoned"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").capitalize()


@dataclass
class Book:
    """A book in the reader's library.

    Attributes:
        title: Book title
        author: Author name(s)
        isbn: ISBN-13 or ISBN-10, if known
        summary: Publisher description
        page_count: Total pages, if known
        current_page: Last page the reader reached
        status: Reading status
        date_added: When the book was added to the library
        date_started: When reading started
        date_finished: When the reader reached the last page
        id: Book identifier
    """

    title: str
    author: str
    isbn: str | None = None
    cover_url: str | None = None
    summary: str | None = None
    publisher: str | None = None
    published_year: int | None = None
    page_count: int | None = None
    current_page: int = 0
    status: ReadingStatus = ReadingStatus.WANT_TO_READ
    date_added: datetime = field(default_factory=lambda: datetime.now(UTC))
    date_started: datetime | None = None
    date_finished: datetime | None = None
    rating: int | None = None
    genres: list[str] = field(default_factory=list)
    language: str = "en"
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def reading_progress(self) -> float:
        """Fraction of the book read, 0.0 when the page count is unknown."""
        if not self.page_count:
            return 0.0
        return self.current_page / self.page_count

    @property
    def progress_text(self) -> str:
        if self.page_count:
            return f"{self.current_page} of {self.page_count} pages"
        return f"{self.current_page} pages"

    def context(self) -> str:
        """Book description handed to the AI service."""
        lines = [f'Book: "{self.title}" by {self.author}.']
        if self.summary:
            lines.append(f"Description: {self.summary}")
        if self.page_count:
            lines.append(f"The reader is on page {self.current_page} of {self.page_count}.")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "cover_url": self.cover_url,
            "summary": self.summary,
            "publisher": self.publisher,
            "published_year": self.published_year,
            "page_count": self.page_count,
            "current_page": self.current_page,
            "status": self.status.value,
            "date_added": self.date_added.isoformat(),
            "date_started": self.date_started.isoformat() if self.date_started else None,
            "date_finished": self.date_finished.isoformat() if self.date_finished else None,
            "rating": self.rating,
            "genres": list(self.genres),
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Book":
        date_started = data.get("date_started")
        date_finished = data.get("date_finished")
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            title=data.get("title", ""),
            author=data.get("author", ""),
            isbn=data.get("isbn"),
            cover_url=data.get("cover_url"),
            summary=data.get("summary"),
            publisher=data.get("publisher"),
            published_year=data.get("published_year"),
            page_count=data.get("page_count"),
            current_page=data.get("current_page", 0),
            status=ReadingStatus(data.get("status", "want_to_read")),
            date_added=parse_datetime(data.get("date_added")),
            date_started=parse_datetime(date_started) if date_started else None,
            date_finished=parse_datetime(date_finished) if date_finished else None,
            rating=data.get("rating"),
            genres=list(data.get("genres", [])),
            language=data.get("language", "en"),
        )


@dataclass
class BookSummary:
    """A catalog lookup result, not yet in the library."""

    title: str
    author: str
    isbn: str | None = None
    cover_url: str | None = None
    summary: str | None = None
    publisher: str | None = None
    published_year: int | None = None
    page_count: int | None = None
    genres: list[str] = field(default_factory=list)
    language: str = "en"

    def to_book(self) -> Book:
        """Create a library book from this result."""
        return Book(
            title=self.title,
            author=self.author,
            isbn=self.isbn,
            cover_url=self.cover_url,
            summary=self.summary,
            publisher=self.publisher,
            published_year=self.published_year,
            page_count=self.page_count,
            genres=list(self.genres),
            language=self.language,
        )


__all__ = ["Book", "BookSummary", "ReadingStatus"]
