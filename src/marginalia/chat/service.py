"""Chat service for Marginalia.

Keeps one conversation thread per book and asks the answer service for the
assistant's reply to every user message.
"""

import copy
import logging
import threading
from datetime import UTC, datetime

from ..ai import AIServiceError, AnswerService
from ..storage import DurableStore, EntityKind, StoreError
from .models import TITLE_PREVIEW_LENGTH, ChatMessage, ChatRole, ChatSession, MessageStatus

logger = logging.getLogger(__name__)


class ChatService:
    """Owns chat threads and serializes their mutation per book.

    Two messages for the same book are handled one after the other, so a
    reply always sees the thread including the message it answers. Threads
    of different books progress independently.
    """

    def __init__(self, store: DurableStore, answers: AnswerService) -> None:
        """Initialize the service and load persisted threads.

        Args:
            store: Durable store for the chat collection
            answers: AI service producing assistant replies
        """
        self._store = store
        self._answers = answers
        self._lock = threading.RLock()
        self._book_locks: dict[str, threading.Lock] = {}
        self._sessions: list[ChatSession] = self._load()

    def _load(self) -> list[ChatSession]:
        try:
            return [ChatSession.from_dict(r) for r in self._store.load_all(EntityKind.CHATS)]
        except (StoreError, ValueError, KeyError) as e:
            logger.error(f"Could not load chat sessions, starting empty: {e}")
            return []

    def _persist(self) -> None:
        """Write all threads. Must hold self._lock."""
        try:
            self._store.save_all(EntityKind.CHATS, [s.to_dict() for s in self._sessions])
        except StoreError as e:
            logger.error(f"Could not save chat sessions, keeping in-memory state: {e}")

    def _book_lock(self, book_id: str) -> threading.Lock:
        with self._lock:
            return self._book_locks.setdefault(book_id, threading.Lock())

    def _find(self, session_id: str) -> ChatSession | None:
        for session in self._sessions:
            if session.id == session_id:
                return session
        return None

    def _create_locked(self, book_id: str) -> ChatSession:
        session = ChatSession(book_id=book_id)
        self._sessions.insert(0, session)
        self._persist()
        logger.debug(f"Created chat session {session.id} for book {book_id}")
        return session

    def create_session(self, book_id: str) -> ChatSession:
        """Start a new conversation thread for a book."""
        with self._lock:
            return copy.deepcopy(self._create_locked(book_id))

    def get(self, session_id: str) -> ChatSession | None:
        with self._lock:
            session = self._find(session_id)
            return copy.deepcopy(session) if session else None

    def sessions_for(self, book_id: str) -> list[ChatSession]:
        """Threads of one book, newest first."""
        with self._lock:
            return [copy.deepcopy(s) for s in self._sessions if s.book_id == book_id]

    def thread_for(self, book_id: str) -> ChatSession | None:
        """The running thread of a book, if one exists."""
        sessions = self.sessions_for(book_id)
        return sessions[0] if sessions else None

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._find(session_id)
            if session is None:
                return False
            self._sessions.remove(session)
            self._persist()
            if not any(s.book_id == session.book_id for s in self._sessions):
                self._book_locks.pop(session.book_id, None)
            return True

    def delete_for_book(self, book_id: str) -> int:
        """Remove every thread of a book.

        Returns:
            Number of threads removed
        """
        with self._lock:
            before = len(self._sessions)
            self._sessions = [s for s in self._sessions if s.book_id != book_id]
            removed = before - len(self._sessions)
            if removed:
                self._persist()
            self._book_locks.pop(book_id, None)
            return removed

    def send_message(
        self,
        content: str,
        book_id: str,
        book_context: str,
        note_ids: list[str] | None = None,
        session_id: str | None = None,
    ) -> ChatSession:
        """Append a user message to the book's thread and get the reply.

        The thread is session_id when given and known, else the book's
        running thread, else a new one.

        Args:
            content: User message text
            book_id: Book the message is about
            book_context: Book description handed to the AI
            note_ids: Notes the message refers to
            session_id: Explicit thread to post to

        Returns:
            The updated thread

        Raises:
            AIServiceError: If no reply could be produced; the user message
                stays in the thread with status ERROR
        """
        with self._book_lock(book_id):
            with self._lock:
                session = self._find(session_id) if session_id else None
                if session is None:
                    session = next((s for s in self._sessions if s.book_id == book_id), None)
                if session is None:
                    session = self._create_locked(book_id)

                user_message = ChatMessage(
                    role=ChatRole.USER,
                    content=content,
                    book_id=book_id,
                    session_id=session.id,
                    status=MessageStatus.SENT,
                    referenced_note_ids=list(note_ids or []),
                )
                session.messages.append(user_message)
                session.updated_at = datetime.now(UTC)
                self._persist()
                history = copy.deepcopy(session.messages)

            try:
                reply = self._answers.reply(history, book_context)
            except AIServiceError:
                with self._lock:
                    user_message.status = MessageStatus.ERROR
                    self._persist()
                raise

            with self._lock:
                session.messages.append(
                    ChatMessage(
                        role=ChatRole.ASSISTANT,
                        content=reply,
                        book_id=book_id,
                        session_id=session.id,
                    )
                )
                if not session.title:
                    session.title = content[:TITLE_PREVIEW_LENGTH]
                session.updated_at = datetime.now(UTC)
                self._persist()

                logger.debug(f"Chat session {session.id}: {session.message_count} messages")
                return copy.deepcopy(session)


__all__ = ["ChatService"]
