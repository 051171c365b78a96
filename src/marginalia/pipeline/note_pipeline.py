"""Note pipeline for Marginalia.

Turns a finalized utterance, a typed question or scanned page text into a
stored note, links it to the reading session and hands it to the fan-out.
"""

import logging

from ..notes import Note, NoteSource, NoteStore, NoteType, classify, clean_trigger_words, segment
from ..sessions import SessionOrchestrator
from .fanout import FanoutCoordinator

logger = logging.getLogger(__name__)


class NotePipeline:
    """Creates notes and runs their follow-up steps in order.

    For every note: persist, then attach to the session, then dispatch
    the fan-out. Only persistence and attachment happen on the caller's
    thread.
    """

    def __init__(
        self,
        notes: NoteStore,
        sessions: SessionOrchestrator,
        fanout: FanoutCoordinator,
    ) -> None:
        self._notes = notes
        self._sessions = sessions
        self._fanout = fanout

    def _commit(self, note: Note) -> Note:
        stored = self._notes.add(note)
        if note.session_id:
            self._sessions.attach_note(note.session_id, stored.id)
        self._fanout.dispatch(stored)
        return stored

    def capture_final_utterance(
        self,
        text: str,
        book_id: str,
        session_id: str | None = None,
        page: int | None = None,
    ) -> Note | None:
        """Create a voice note from a final transcript.

        The type is classified from the raw text before trigger words are
        stripped from the content.

        Args:
            text: Final transcript
            book_id: Book being read
            session_id: Active reading session, if any
            page: Current page, if known

        Returns:
            The stored note, or None for a blank utterance. A bare trigger word
            such as "quote" still makes a note, with empty content.
        """
        if not text.strip():
            logger.debug("Blank utterance ignored")
            return None

        note_type = classify(text)
        content = clean_trigger_words(text)

        return self._commit(
            Note(
                book_id=book_id,
                content=content,
                type=note_type,
                source=NoteSource.VOICE,
                session_id=session_id,
                page=page,
            )
        )

    def capture_segmented_utterance(
        self,
        text: str,
        book_id: str,
        session_id: str | None = None,
        page: int | None = None,
    ) -> list[Note]:
        """Split a transcript at its labels and create one voice note per part.

        Returns:
            Stored notes in utterance order
        """
        created: list[Note] = []
        for content, note_type in segment(text):
            created.append(
                self._commit(
                    Note(
                        book_id=book_id,
                        content=content,
                        type=note_type,
                        source=NoteSource.VOICE,
                        session_id=session_id,
                        page=page,
                    )
                )
            )
        return created

    def ask_question(
        self,
        text: str,
        book_id: str,
        session_id: str | None = None,
        page: int | None = None,
    ) -> Note | None:
        """Create a typed question note; the text is kept as entered."""
        if not text.strip():
            return None

        return self._commit(
            Note(
                book_id=book_id,
                content=text.strip(),
                type=NoteType.QUESTION,
                source=NoteSource.MANUAL,
                session_id=session_id,
                page=page,
            )
        )

    def capture_camera_text(
        self,
        text: str,
        book_id: str,
        session_id: str | None = None,
        page: int | None = None,
    ) -> Note | None:
        """Create a quote note from scanned page text (never sent to the AI)."""
        if not text.strip():
            return None

        return self._commit(
            Note(
                book_id=book_id,
                content=text.strip(),
                type=NoteType.QUOTE,
                source=NoteSource.CAMERA,
                session_id=session_id,
                page=page,
            )
        )


__all__ = ["NotePipeline"]
