"""Fan-out of persisted notes to chat and the AI service.

After a note is stored, it is forwarded to the book's chat thread and, for
questions, answered by the AI service. Both run on a thread pool and never
block the caller; their failures are logged and swallowed.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures

from ..ai import AIServiceError, AnswerService
from ..books import BookLibrary
from ..chat import ChatService
from ..notes import Note, NoteStore, NoteType

logger = logging.getLogger(__name__)


def chat_text(note: Note) -> str:
    """Chat message for a note, e.g. "Quote: ..."."""
    return f"{note.type.display_name}: {note.content}"


class FanoutCoordinator:
    """Dispatches the side effects of a new note.

    Dispatched tasks belong to the coordinator, not to the capture that
    produced the note: stopping capture never cancels them.
    """

    def __init__(
        self,
        chat: ChatService,
        answers: AnswerService,
        notes: NoteStore,
        books: BookLibrary,
        executor: ThreadPoolExecutor | None = None,
        max_workers: int = 4,
    ) -> None:
        """Initialize the coordinator.

        Args:
            chat: Chat threads to forward notes to
            answers: AI service answering questions
            notes: Store patched with AI answers
            books: Library providing book context
            executor: Thread pool to run on (created if None)
            max_workers: Pool size when creating the executor
        """
        self._chat = chat
        self._answers = answers
        self._notes = notes
        self._books = books
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="fanout"
        )
        self._lock = threading.RLock()
        self._pending: set[Future] = set()
        self._closed = False

    def book_context(self, book_id: str) -> str:
        book = self._books.get(book_id)
        return book.context() if book else ""

    def dispatch(self, note: Note) -> list[Future]:
        """Start the chat forward and, for questions, the AI answer.

        Returns:
            Futures of the started tasks (empty after shutdown)
        """
        with self._lock:
            if self._closed:
                logger.warning(f"Fan-out is shut down, note {note.id} not dispatched")
                return []

            futures = [self._executor.submit(self.forward_to_chat, note)]
            if note.type == NoteType.QUESTION:
                futures.append(self._executor.submit(self.answer_question, note))

            for future in futures:
                self._pending.add(future)
                future.add_done_callback(self._discard)
        return futures

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def forward_to_chat(self, note: Note) -> bool:
        """Post the note to its book's chat thread.

        Returns:
            True if the message was delivered and answered
        """
        try:
            self._chat.send_message(
                chat_text(note),
                book_id=note.book_id,
                book_context=self.book_context(note.book_id),
                note_ids=[note.id],
            )
            return True
        except AIServiceError as e:
            logger.warning(f"Chat forward of note {note.id} failed: {e}")
        except Exception as e:
            logger.warning(f"Chat forward of note {note.id} failed unexpectedly: {e}")
        return False

    def answer_question(self, note: Note) -> str | None:
        """Ask the AI service and attach the answer to the note.

        Returns:
            The answer, or None if the AI call failed
        """
        note_context = f"The reader is on page {note.page}." if note.page else None
        try:
            answer = self._answers.answer(
                note.content, self.book_context(note.book_id), note_context
            )
        except AIServiceError as e:
            logger.warning(f"AI answer for note {note.id} failed: {e}")
            return None
        except Exception as e:
            logger.warning(f"AI answer for note {note.id} failed unexpectedly: {e}")
            return None

        if self._notes.patch_ai_response(note.id, answer) is None:
            logger.debug(f"Note {note.id} was deleted before its answer arrived")
        else:
            logger.info(f"Answered question note {note.id}")
        return answer

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until all dispatched tasks finished.

        Returns:
            True if nothing is pending anymore
        """
        with self._lock:
            pending = set(self._pending)
        _done, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting notes; drain running tasks if wait."""
        with self._lock:
            self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
        elif wait:
            self.wait()


__all__ = ["FanoutCoordinator", "chat_text"]
