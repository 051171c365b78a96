"""Note store for persisting and querying notes.

Owns the in-memory note collection and writes it through to a durable
store. Field patches on a note are serialized per note, so an AI answer
arriving while the note is edited only replaces the field it touches.
"""

import copy
import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from ..storage import DurableStore, EntityKind, StoreError
from .models import Note, NoteType

logger = logging.getLogger(__name__)

_UNSET = object()


class NoteStore:
    """Thread-safe note collection backed by a durable store.

    Notes are kept newest first. Every accessor returns copies, so callers
    can only change a stored note through the patch methods.
    """

    def __init__(self, store: DurableStore) -> None:
        """Initialize note store and load persisted notes.

        Args:
            store: Durable store for the notes collection
        """
        self._store = store
        self._lock = threading.RLock()
        self._note_locks: dict[str, threading.Lock] = {}
        self._note_locks_guard = threading.Lock()
        self._notes: list[Note] = self._load()

    def _load(self) -> list[Note]:
        try:
            records = self._store.load_all(EntityKind.NOTES)
            return [Note.from_dict(record) for record in records]
        except (StoreError, ValueError, KeyError) as e:
            logger.error(f"Could not load notes, starting empty: {e}")
            return []

    def _persist(self) -> None:
        """Write the whole collection. Must hold self._lock."""
        try:
            self._store.save_all(EntityKind.NOTES, [note.to_dict() for note in self._notes])
        except StoreError as e:
            logger.error(f"Could not save notes, keeping in-memory state: {e}")

    @contextmanager
    def _note_lock(self, note_id: str) -> Iterator[None]:
        with self._note_locks_guard:
            lock = self._note_locks.setdefault(note_id, threading.Lock())
        with lock:
            yield

    def _forget_locks(self, note_ids: Iterable[str]) -> None:
        with self._note_locks_guard:
            for note_id in note_ids:
                self._note_locks.pop(note_id, None)

    def _find(self, note_id: str) -> Note | None:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def add(self, note: Note) -> Note:
        """Insert a note at the front of the collection and persist it."""
        with self._lock:
            self._notes.insert(0, copy.copy(note))
            self._persist()
        logger.info(f"Saved {note.source.value} {note.type.value} note {note.id}")
        return copy.copy(note)

    def get(self, note_id: str) -> Note | None:
        """Get a note by ID, or None if unknown."""
        with self._lock:
            note = self._find(note_id)
            return copy.copy(note) if note else None

    def patch(
        self,
        note_id: str,
        *,
        content: object = _UNSET,
        page: object = _UNSET,
        ai_response: object = _UNSET,
    ) -> Note | None:
        """Update selected fields of a note in place.

        Fields left out are not touched, so concurrent patches of different
        fields on the same note never overwrite each other. The note type is
        never recomputed.

        Args:
            note_id: Note to patch
            content: New content text
            page: New page number
            ai_response: New AI answer

        Returns:
            The patched note, or None if the note does not exist
        """
        with self._note_lock(note_id), self._lock:
            note = self._find(note_id)
            if note is None:
                logger.debug(f"Patch of unknown note {note_id} ignored")
                self._forget_locks([note_id])
                return None

            if content is not _UNSET:
                note.content = content  # type: ignore[assignment]
            if page is not _UNSET:
                note.page = page  # type: ignore[assignment]
            if ai_response is not _UNSET:
                note.ai_response = ai_response  # type: ignore[assignment]
            note.updated_at = datetime.now(UTC)

            self._persist()
            return copy.copy(note)

    def patch_ai_response(self, note_id: str, ai_response: str) -> Note | None:
        """Attach an AI answer to a note."""
        return self.patch(note_id, ai_response=ai_response)

    def touch(self, note_id: str) -> Note | None:
        """Refresh a note's update timestamp."""
        return self.patch(note_id)

    def delete(self, note_id: str) -> bool:
        """Remove a note.

        Returns:
            True if a note was removed
        """
        with self._lock:
            before = len(self._notes)
            self._notes = [note for note in self._notes if note.id != note_id]
            removed = len(self._notes) != before
            if removed:
                self._persist()
        self._forget_locks([note_id])
        return removed

    def delete_for_book(self, book_id: str) -> int:
        """Remove every note of a book.

        Returns:
            Number of notes removed
        """
        with self._lock:
            doomed = [note.id for note in self._notes if note.book_id == book_id]
            self._notes = [note for note in self._notes if note.book_id != book_id]
            removed = len(doomed)
            if removed:
                self._persist()
        self._forget_locks(doomed)

        if removed:
            logger.info(f"Deleted {removed} notes of book {book_id}")
        return removed

    def all(self) -> list[Note]:
        """All notes, newest first."""
        with self._lock:
            return [copy.copy(note) for note in self._notes]

    def for_book(self, book_id: str, note_type: NoteType | None = None) -> list[Note]:
        """Notes of a book, optionally of one type."""
        return [
            note
            for note in self.all()
            if note.book_id == book_id and (note_type is None or note.type == note_type)
        ]

    def for_session(self, session_id: str) -> list[Note]:
        """Notes taken during a reading session."""
        return [note for note in self.all() if note.session_id == session_id]

    def of_type(self, note_type: NoteType) -> list[Note]:
        """Notes of one type across all books."""
        return [note for note in self.all() if note.type == note_type]

    def search(self, query: str, book_id: str | None = None) -> list[Note]:
        """Case-insensitive substring search over note content.

        Args:
            query: Text to look for
            book_id: Optional book filter

        Returns:
            Matching notes, newest first
        """
        query_lower = query.lower()
        return [
            note
            for note in self.all()
            if (book_id is None or note.book_id == book_id)
            and query_lower in note.content.lower()
        ]

    def count_by_type(self, book_id: str) -> dict[NoteType, int]:
        """Number of notes of each type for a book."""
        counts = {note_type: 0 for note_type in NoteType}
        for note in self.for_book(book_id):
            counts[note.type] += 1
        return counts


__all__ = ["NoteStore"]
