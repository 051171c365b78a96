"""Book library for Marginalia.

Holds the reader's books, tracks reading progress and cascades deletion to
the notes, sessions and chats of a book.
"""

import copy
import csv
import io
import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

from ..storage import DurableStore, EntityKind, StoreError
from .models import Book, ReadingStatus

logger = logging.getLogger(__name__)


class BookNotFoundError(LookupError):
    """Raised when updating a book that is not in the library."""

    pass


class BookLibrary:
    """Owns the book collection."""

    def __init__(self, store: DurableStore) -> None:
        """Initialize the library and load persisted books.

        Args:
            store: Durable store for the books collection
        """
        self._store = store
        self._lock = threading.RLock()
        self._delete_hooks: list[Callable[[str], object]] = []
        self._books: list[Book] = self._load()

    def _load(self) -> list[Book]:
        try:
            return [Book.from_dict(r) for r in self._store.load_all(EntityKind.BOOKS)]
        except (StoreError, ValueError, KeyError) as e:
            logger.error(f"Could not load books, starting empty: {e}")
            return []

    def _persist(self) -> None:
        """Write all books. Must hold self._lock."""
        try:
            self._store.save_all(EntityKind.BOOKS, [b.to_dict() for b in self._books])
        except StoreError as e:
            logger.error(f"Could not save books, keeping in-memory state: {e}")

    def _index(self, book_id: str) -> int | None:
        for i, book in enumerate(self._books):
            if book.id == book_id:
                return i
        return None

    def on_delete(self, hook: Callable[[str], object]) -> None:
        """Register a callback run with the book id after a book is deleted."""
        self._delete_hooks.append(hook)

    def add(self, book: Book) -> Book:
        """Add a book, or replace the stored book with the same id."""
        with self._lock:
            index = self._index(book.id)
            if index is None:
                self._books.insert(0, copy.deepcopy(book))
                logger.info(f"Added book '{book.title}' by {book.author}")
            else:
                self._books[index] = copy.deepcopy(book)
            self._persist()
            return copy.deepcopy(book)

    def update(self, book: Book) -> Book:
        """Replace a stored book.

        Raises:
            BookNotFoundError: If the book is not in the library
        """
        with self._lock:
            index = self._index(book.id)
            if index is None:
                raise BookNotFoundError(f"Book not found: {book.id}")
            self._books[index] = copy.deepcopy(book)
            self._persist()
            return copy.deepcopy(book)

    def get(self, book_id: str) -> Book | None:
        with self._lock:
            index = self._index(book_id)
            return copy.deepcopy(self._books[index]) if index is not None else None

    def delete(self, book_id: str) -> bool:
        """Delete a book and everything attached to it.

        Returns:
            True if the book existed
        """
        with self._lock:
            index = self._index(book_id)
            if index is None:
                return False
            book = self._books.pop(index)
            self._persist()

        logger.info(f"Deleted book '{book.title}'")
        for hook in self._delete_hooks:
            hook(book_id)
        return True

    def all(self) -> list[Book]:
        with self._lock:
            return copy.deepcopy(self._books)

    def by_status(self, status: ReadingStatus) -> list[Book]:
        return [b for b in self.all() if b.status == status]

    def search_local(self, query: str) -> list[Book]:
        """Case-insensitive title/author search; a blank query returns all."""
        books = self.all()
        if not query:
            return books
        needle = query.lower()
        return [b for b in books if needle in b.title.lower() or needle in b.author.lower()]

    def find_by_title(self, title: str) -> Book | None:
        """Exact title match, ignoring case."""
        for book in self.all():
            if book.title.lower() == title.lower():
                return book
        return None

    def apply_progress(self, book_id: str, end_page: int | None) -> Book | None:
        """Record the page a reading session ended on.

        Reaching the last page marks the book FINISHED; the first progress on
        a WANT_TO_READ book marks it READING. Pages <= 0 are ignored.

        Returns:
            The updated book, or None if unknown or nothing changed
        """
        if end_page is None or end_page <= 0:
            return None

        with self._lock:
            index = self._index(book_id)
            if index is None:
                return None

            book = self._books[index]
            book.current_page = end_page
            now = datetime.now(UTC)
            if book.page_count and end_page >= book.page_count:
                book.status = ReadingStatus.FINISHED
                book.date_finished = now
            elif book.status == ReadingStatus.WANT_TO_READ:
                book.status = ReadingStatus.READING
                book.date_started = now
            self._persist()

            logger.info(f"'{book.title}': {book.progress_text} ({book.status.value})")
            return copy.deepcopy(book)

    def import_csv(self, text: str) -> list[Book]:
        """Add books from CSV text with a header row: title, author[, isbn].

        Rows with fewer than two columns are skipped.

        Returns:
            Books added
        """
        added: list[Book] = []
        rows = csv.reader(io.StringIO(text), skipinitialspace=True)
        next(rows, None)

        for row in rows:
            columns = [c.strip() for c in row]
            if len(columns) < 2 or not columns[0]:
                continue
            isbn = columns[2] if len(columns) > 2 and columns[2] else None
            added.append(self.add(Book(title=columns[0], author=columns[1], isbn=isbn)))

        return added


__all__ = ["BookLibrary", "BookNotFoundError"]
