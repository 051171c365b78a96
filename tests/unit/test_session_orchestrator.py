"""Unit tests for the reading session orchestrator.

Tests the single active session rule across books.
"""

import threading
from datetime import UTC, datetime, timedelta

import pytest

from marginalia.sessions import ReadingSession, SessionOrchestrator, StartResult
from marginalia.storage import EntityKind, InMemoryStore


class TestSessionOrchestrator:
    """Test starting, ending and attaching notes to sessions."""

    @pytest.fixture
    def backend(self) -> InMemoryStore:
        return InMemoryStore()

    @pytest.fixture
    def orchestrator(self, backend: InMemoryStore) -> SessionOrchestrator:
        return SessionOrchestrator(backend)

    def test_start_session(self, orchestrator: SessionOrchestrator) -> None:
        """Test starting a session with no previous one."""
        result = orchestrator.start_session("b1", start_page=12)

        assert isinstance(result, StartResult)
        assert result.session.is_active
        assert result.session.start_page == 12
        assert result.previous_session is None
        assert orchestrator.active_session.id == result.session.id

    def test_start_ends_previous(self, orchestrator: SessionOrchestrator) -> None:
        """Test starting a session for another book ends the first."""
        first = orchestrator.start_session("b1").session

        result = orchestrator.start_session("b2")

        assert result.previous_session is not None
        assert result.previous_session.id == first.id
        assert not result.previous_session.is_active
        assert not orchestrator.get(first.id).is_active
        assert orchestrator.active_session.id == result.session.id

    def test_previous_ended_when_new_starts(self, orchestrator: SessionOrchestrator) -> None:
        """Test the old session ends at the new session's start time."""
        orchestrator.start_session("b1")

        result = orchestrator.start_session("b1")

        assert result.previous_session.end_time == result.session.start_time

    def test_end_session(self, orchestrator: SessionOrchestrator) -> None:
        """Test ending the active session."""
        session = orchestrator.start_session("b1", start_page=10).session

        ended = orchestrator.end_session(session.id, end_page=25, key_insight="Insight")

        assert not ended.is_active
        assert ended.pages_read == 15
        assert ended.key_insight == "Insight"
        assert orchestrator.active_session is None

    def test_end_unknown_session(self, orchestrator: SessionOrchestrator) -> None:
        """Test ending an unknown id does nothing."""
        active = orchestrator.start_session("b1").session

        assert orchestrator.end_session("missing") is None
        assert orchestrator.active_session.id == active.id

    def test_end_inactive_session_keeps_active_pointer(
        self, orchestrator: SessionOrchestrator
    ) -> None:
        """Test ending an old session leaves the current one active."""
        old = orchestrator.start_session("b1").session
        current = orchestrator.start_session("b2").session

        orchestrator.end_session(old.id, end_page=40)

        assert orchestrator.active_session.id == current.id
        assert orchestrator.get(old.id).end_page == 40

    def test_attach_note(self, orchestrator: SessionOrchestrator) -> None:
        """Test notes are appended once, in order."""
        session = orchestrator.start_session("b1").session

        assert orchestrator.attach_note(session.id, "n1") is True
        assert orchestrator.attach_note(session.id, "n2") is True
        assert orchestrator.attach_note(session.id, "n1") is False

        assert orchestrator.get(session.id).note_ids == ["n1", "n2"]

    def test_attach_to_unknown_session(self, orchestrator: SessionOrchestrator) -> None:
        assert orchestrator.attach_note("missing", "n1") is False

    def test_persisted(self, backend: InMemoryStore, orchestrator: SessionOrchestrator) -> None:
        """Test sessions survive a reload."""
        session = orchestrator.start_session("b1").session
        orchestrator.attach_note(session.id, "n1")

        reloaded = SessionOrchestrator(backend)

        assert reloaded.active_session.id == session.id
        assert reloaded.active_session.note_ids == ["n1"]

    def test_repairs_multiple_active_on_load(self, backend: InMemoryStore) -> None:
        """Test only the newest active session survives a load."""
        now = datetime.now(UTC)
        old = ReadingSession(book_id="b1", start_time=now - timedelta(hours=2))
        new = ReadingSession(book_id="b2", start_time=now - timedelta(minutes=5))
        backend.save_all(EntityKind.SESSIONS, [new.to_dict(), old.to_dict()])

        orchestrator = SessionOrchestrator(backend)

        assert orchestrator.active_session.id == new.id
        assert not orchestrator.get(old.id).is_active
        active = [r for r in backend.load_all(EntityKind.SESSIONS) if r["is_active"]]
        assert [r["id"] for r in active] == [new.id]

    def test_queries(self, orchestrator: SessionOrchestrator) -> None:
        """Test listing sessions."""
        orchestrator.start_session("b1")
        orchestrator.start_session("b2")
        latest = orchestrator.start_session("b1").session

        assert orchestrator.all()[0].id == latest.id
        assert len(orchestrator.sessions_for_book("b1")) == 2
        assert len(orchestrator.recent_sessions(limit=2)) == 2
        assert len(orchestrator.sessions_today()) == 3
        assert orchestrator.session_count() == 3
        assert orchestrator.session_count("b2") == 1

    def test_delete_for_book(self, orchestrator: SessionOrchestrator) -> None:
        """Test deleting a book's sessions clears the active pointer."""
        orchestrator.start_session("b2")
        orchestrator.start_session("b1")

        assert orchestrator.delete_for_book("b1") == 1
        assert orchestrator.active_session is None
        assert orchestrator.session_count() == 1

    def test_delete_session(self, orchestrator: SessionOrchestrator) -> None:
        session = orchestrator.start_session("b1").session

        assert orchestrator.delete_session(session.id) is True
        assert orchestrator.delete_session(session.id) is False
        assert orchestrator.active_session is None

    def test_concurrent_starts_leave_one_active(self, orchestrator: SessionOrchestrator) -> None:
        """Test parallel starts for different books never leave two active."""
        barrier = threading.Barrier(8)

        def start(book_id: str) -> None:
            barrier.wait()
            for _ in range(10):
                orchestrator.start_session(book_id)

        threads = [threading.Thread(target=start, args=(f"b{i}",)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        active = [s for s in orchestrator.all() if s.is_active]
        assert len(active) == 1
        assert orchestrator.active_session.id == active[0].id
        assert orchestrator.session_count() == 80
