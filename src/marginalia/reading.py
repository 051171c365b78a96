"""Reading loop for Marginalia.

Ties one reading session of one book to voice capture, typed questions and
scanned quotes, and closes the session with progress and a key insight.
"""

import logging
from typing import TYPE_CHECKING

from .ai import AIServiceError
from .books import BookNotFoundError
from .notes import Note
from .ocr import OCRService, extract_quote
from .sessions import ReadingSession

if TYPE_CHECKING:
    from .app import Marginalia

logger = logging.getLogger(__name__)


class ReadingLoop:
    """Runs a reading session for one book at a time.

    Example:
        loop = ReadingLoop(app)
        loop.begin(book.id)
        loop.toggle_recording()          # start dictating
        notes = loop.toggle_recording()  # stop, notes are created
        loop.finish(end_page=42)
    """

    def __init__(self, app: "Marginalia", segment_utterances: bool = False) -> None:
        """Initialize the loop.

        Args:
            app: Wired application
            segment_utterances: Split transcripts at "quote:"-style labels
        """
        self._app = app
        self._segment = segment_utterances
        self._book_id: str | None = None
        self._session_id: str | None = None
        self.current_page = 0

    @property
    def book_id(self) -> str | None:
        return self._book_id

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def is_reading(self) -> bool:
        return self._session_id is not None

    @property
    def is_recording(self) -> bool:
        return self._app.capture.is_listening

    def _page(self) -> int | None:
        return self.current_page if self.current_page > 0 else None

    def _require_session(self) -> str:
        if self._book_id is None or self._session_id is None:
            raise RuntimeError("No reading session in progress, call begin() first")
        return self._book_id

    def begin(self, book_id: str) -> ReadingSession:
        """Start a reading session at the book's current page.

        Raises:
            BookNotFoundError: If the book is not in the library
        """
        book = self._app.books.get(book_id)
        if book is None:
            raise BookNotFoundError(f"Book not found: {book_id}")

        result = self._app.sessions.start_session(book.id, start_page=book.current_page)
        if result.previous_session is not None:
            logger.info(f"Previous session {result.previous_session.id} was ended")

        self._book_id = book.id
        self._session_id = result.session.id
        self.current_page = book.current_page
        return result.session

    def dictate(self, text: str) -> list[Note]:
        """Run a final transcript through the note pipeline."""
        book_id = self._require_session()
        pipeline = self._app.pipeline

        if self._segment:
            return pipeline.capture_segmented_utterance(
                text, book_id, self._session_id, self._page()
            )
        note = pipeline.capture_final_utterance(text, book_id, self._session_id, self._page())
        return [note] if note else []

    def toggle_recording(self) -> list[Note]:
        """Start capture, or stop it and turn the transcript into notes.

        Returns:
            Notes created when stopping (empty when starting)

        Raises:
            CaptureError: If capture cannot start
        """
        self._require_session()
        capture = self._app.capture

        if capture.is_listening:
            final = capture.stop()
            return self.dictate(final) if final else []

        capture.start()
        return []

    def ask(self, text: str) -> Note | None:
        """Ask a typed question about the book."""
        book_id = self._require_session()
        return self._app.pipeline.ask_question(text, book_id, self._session_id, self._page())

    def scan(self, text: str) -> Note | None:
        """Save recognized page text as a quote."""
        book_id = self._require_session()
        quote = extract_quote(text)
        return self._app.pipeline.capture_camera_text(
            quote, book_id, self._session_id, self._page()
        )

    def scan_image(self, image: bytes, ocr: OCRService) -> Note | None:
        """Recognize a page photo and save it as a quote.

        Raises:
            OCRError: If no text could be recognized
        """
        return self.scan(ocr.recognize_text(image))

    def finish(self, end_page: int | None = None) -> ReadingSession | None:
        """End the reading session.

        Pending dictation is saved, book progress is updated and, when the
        session has notes, the AI is asked for its key insight. An AI
        failure ends the session without an insight.

        Returns:
            The ended session, or None if none was running
        """
        if self._book_id is None or self._session_id is None:
            return None

        if self.is_recording:
            self.toggle_recording()

        book_id, session_id = self._book_id, self._session_id
        self._app.books.apply_progress(book_id, end_page)

        insight = None
        notes = self._app.notes.for_session(session_id)
        if notes:
            book = self._app.books.get(book_id)
            try:
                insight = self._app.answers.session_insight(
                    book.context() if book else "", list(reversed(notes))
                )
            except AIServiceError as e:
                logger.warning(f"No key insight for session {session_id}: {e}")

        ended = self._app.sessions.end_session(session_id, end_page=end_page, key_insight=insight)
        self._book_id = None
        self._session_id = None
        return ended


__all__ = ["ReadingLoop"]
