"""Application wiring for Marginalia.

Builds the stores, services and the capture pipeline from configuration.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .ai import AnswerService, create_answer_service
from .audio import create_audio_capture
from .books import BookLibrary
from .capture import CaptureController, PermissionProvider
from .chat import ChatService
from .notes import NoteStore
from .pipeline import FanoutCoordinator, NotePipeline
from .sessions import SessionOrchestrator
from .storage import DurableStore, create_store
from .stt import create_recognizer

if TYPE_CHECKING:
    from .config import MarginaliaConfig

logger = logging.getLogger(__name__)


@dataclass
class Marginalia:
    """The wired application: shared stores and the services using them."""

    store: DurableStore
    books: BookLibrary
    notes: NoteStore
    sessions: SessionOrchestrator
    chat: ChatService
    answers: AnswerService
    fanout: FanoutCoordinator
    pipeline: NotePipeline
    capture: CaptureController

    @classmethod
    def from_config(
        cls,
        config: "MarginaliaConfig",
        use_mocks: bool = False,
        store: DurableStore | None = None,
        permissions: PermissionProvider | None = None,
    ) -> "Marginalia":
        """Create the application from configuration.

        Args:
            config: Marginalia configuration
            use_mocks: Use mock audio, recognizer and AI implementations
            store: Durable store to use instead of the configured one
            permissions: Permission provider for voice capture

        Returns:
            Wired Marginalia instance
        """
        store = store if store is not None else create_store(config.storage)

        books = BookLibrary(store)
        notes = NoteStore(store)
        sessions = SessionOrchestrator(store)
        answers = create_answer_service(config.ai, use_mock=use_mocks)
        chat = ChatService(store, answers)

        books.on_delete(notes.delete_for_book)
        books.on_delete(sessions.delete_for_book)
        books.on_delete(chat.delete_for_book)

        fanout = FanoutCoordinator(
            chat, answers, notes, books, max_workers=config.fanout.max_workers
        )
        pipeline = NotePipeline(notes, sessions, fanout)

        capture = CaptureController(
            audio=create_audio_capture(config.audio, use_mock=use_mocks),
            recognizer=create_recognizer(config.stt, use_mock=use_mocks),
            permissions=permissions,
            vocabulary_hints=config.capture.vocabulary_hints,
        )

        logger.debug(f"Marginalia wired (storage={config.storage.backend}, mocks={use_mocks})")
        return cls(
            store=store,
            books=books,
            notes=notes,
            sessions=sessions,
            chat=chat,
            answers=answers,
            fanout=fanout,
            pipeline=pipeline,
            capture=capture,
        )

    def close(self, wait: bool = True) -> None:
        """Stop capture and let dispatched fan-out tasks finish."""
        self.capture.stop()
        self.fanout.shutdown(wait=wait)

    def __enter__(self) -> "Marginalia":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()


__all__ = ["Marginalia"]
