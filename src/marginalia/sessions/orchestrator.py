"""Reading session orchestration.

Starts and ends reading sessions and attaches notes to them while keeping
at most one session active across all books.
"""

import copy
import logging
import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from ..storage import DurableStore, EntityKind, StoreError
from . import stats
from .models import ReadingSession

logger = logging.getLogger(__name__)


@dataclass
class StartResult:
    """Result of starting a reading session."""

    session: ReadingSession
    previous_session: ReadingSession | None  # Force-ended session, if any


class SessionOrchestrator:
    """Owns the reading session collection and the single-active invariant.

    Every state change runs under one lock, so finding the active session,
    ending it and creating the new one is a single check-and-set even when
    sessions are started concurrently for different books.
    """

    def __init__(self, store: DurableStore) -> None:
        """Initialize orchestrator and load persisted sessions.

        Args:
            store: Durable store for the sessions collection
        """
        self._store = store
        self._lock = threading.RLock()
        self._sessions: list[ReadingSession] = self._load()
        self._active_id: str | None = self._repair_active()

    def _load(self) -> list[ReadingSession]:
        try:
            records = self._store.load_all(EntityKind.SESSIONS)
            return [ReadingSession.from_dict(record) for record in records]
        except (StoreError, ValueError, KeyError) as e:
            logger.error(f"Could not load reading sessions, starting empty: {e}")
            return []

    def _repair_active(self) -> str | None:
        """Keep only the newest active session from a loaded collection."""
        active = [s for s in self._sessions if s.is_active]
        if not active:
            return None

        newest = max(active, key=lambda s: s.start_time)
        stale = [s for s in active if s is not newest]
        for session in stale:
            session.end()
            logger.warning(f"Ended stale active session {session.id} found on load")
        if stale:
            self._persist()
        return newest.id

    def _persist(self) -> None:
        """Write the whole collection. Must hold self._lock."""
        try:
            self._store.save_all(
                EntityKind.SESSIONS, [session.to_dict() for session in self._sessions]
            )
        except StoreError as e:
            logger.error(f"Could not save reading sessions, keeping in-memory state: {e}")

    def _find(self, session_id: str) -> ReadingSession | None:
        for session in self._sessions:
            if session.id == session_id:
                return session
        return None

    def start_session(self, book_id: str, start_page: int = 0) -> StartResult:
        """Start a reading session for a book.

        Any session still active, for any book, is ended first.

        Args:
            book_id: Book being read
            start_page: Page the reader starts on

        Returns:
            StartResult with the new session and the force-ended one, if any
        """
        with self._lock:
            previous: ReadingSession | None = None
            now = datetime.now(UTC)

            for session in self._sessions:
                if session.is_active:
                    session.end(end_time=now)
                    previous = copy.deepcopy(session)
                    logger.info(
                        f"Ended session {session.id} for book {session.book_id} "
                        f"({session.formatted_duration}) before starting a new one"
                    )

            session = ReadingSession(book_id=book_id, start_time=now, start_page=start_page)
            self._sessions.insert(0, session)
            self._active_id = session.id
            self._persist()

            logger.info(f"Started reading session {session.id} for book {book_id}")
            return StartResult(session=copy.deepcopy(session), previous_session=previous)

    def end_session(
        self,
        session_id: str,
        end_page: int | None = None,
        key_insight: str | None = None,
    ) -> ReadingSession | None:
        """End a reading session.

        The record is updated even if it is not the current active session;
        the active pointer is only cleared when the ids match.

        Args:
            session_id: Session to end
            end_page: Page the reader stopped on
            key_insight: Optional session insight

        Returns:
            The ended session, or None if the id is unknown
        """
        with self._lock:
            session = self._find(session_id)
            if session is None:
                logger.debug(f"End of unknown session {session_id} ignored")
                return None

            session.end(end_page=end_page, key_insight=key_insight)
            if self._active_id == session_id:
                self._active_id = None
            self._persist()

            logger.info(f"Ended reading session {session_id}: {session.summary}")
            return copy.deepcopy(session)

    def attach_note(self, session_id: str, note_id: str) -> bool:
        """Append a note to a session's note list.

        Args:
            session_id: Session to attach to
            note_id: Note to attach

        Returns:
            True if the note was appended; False for unknown sessions and
            notes already attached
        """
        with self._lock:
            session = self._find(session_id)
            if session is None:
                logger.debug(f"Attach to unknown session {session_id} ignored")
                return False

            appended = session.add_note(note_id)
            if appended:
                self._persist()
            return appended

    def delete_session(self, session_id: str) -> bool:
        """Remove a session record."""
        with self._lock:
            session = self._find(session_id)
            if session is None:
                return False
            self._sessions.remove(session)
            if self._active_id == session_id:
                self._active_id = None
            self._persist()
            return True

    def delete_for_book(self, book_id: str) -> int:
        """Remove every session of a book.

        Returns:
            Number of sessions removed
        """
        with self._lock:
            doomed = [s for s in self._sessions if s.book_id == book_id]
            if not doomed:
                return 0
            self._sessions = [s for s in self._sessions if s.book_id != book_id]
            if self._active_id in {s.id for s in doomed}:
                self._active_id = None
            self._persist()
            return len(doomed)

    @property
    def active_session(self) -> ReadingSession | None:
        """The single active session, if any."""
        with self._lock:
            if self._active_id is None:
                return None
            session = self._find(self._active_id)
            return copy.deepcopy(session) if session else None

    def get(self, session_id: str) -> ReadingSession | None:
        """Get a session by ID."""
        with self._lock:
            session = self._find(session_id)
            return copy.deepcopy(session) if session else None

    def all(self) -> list[ReadingSession]:
        """All sessions, newest first."""
        with self._lock:
            return copy.deepcopy(self._sessions)

    def sessions_for_book(self, book_id: str) -> list[ReadingSession]:
        """Sessions of one book, newest first."""
        return [s for s in self.all() if s.book_id == book_id]

    def recent_sessions(self, limit: int = 10) -> list[ReadingSession]:
        """The most recent sessions."""
        return self.all()[:limit]

    def sessions_today(self) -> list[ReadingSession]:
        """Sessions started today (local date)."""
        today = datetime.now().astimezone().date()
        return [s for s in self.all() if s.start_time.astimezone().date() == today]

    def total_reading_time(self, book_id: str | None = None) -> timedelta:
        return stats.total_reading_time(self.all(), book_id)

    def total_pages_read(self, book_id: str | None = None) -> int:
        return stats.total_pages_read(self.all(), book_id)

    def average_session_duration(self, book_id: str | None = None) -> timedelta:
        return stats.average_session_duration(self.all(), book_id)

    def session_count(self, book_id: str | None = None) -> int:
        return stats.session_count(self.all(), book_id)

    def formatted_total_time(self, book_id: str | None = None) -> str:
        """Total reading time as "1 h 5 min"."""
        return stats.format_total_time(self.total_reading_time(book_id))


__all__ = ["SessionOrchestrator", "StartResult"]
