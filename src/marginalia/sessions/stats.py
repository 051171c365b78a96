"""Reading statistics folded over session collections."""

from collections.abc import Iterable
from datetime import timedelta

from .models import ReadingSession


def _filter(sessions: Iterable[ReadingSession], book_id: str | None) -> list[ReadingSession]:
    return [s for s in sessions if book_id is None or s.book_id == book_id]


def total_reading_time(
    sessions: Iterable[ReadingSession], book_id: str | None = None
) -> timedelta:
    """Sum of session durations, active sessions counted up to now."""
    return sum((s.duration for s in _filter(sessions, book_id)), timedelta())


def total_pages_read(sessions: Iterable[ReadingSession], book_id: str | None = None) -> int:
    """Sum of pages read."""
    return sum(s.pages_read for s in _filter(sessions, book_id))


def average_session_duration(
    sessions: Iterable[ReadingSession], book_id: str | None = None
) -> timedelta:
    """Mean duration of finished sessions, zero when there are none."""
    finished = [s for s in _filter(sessions, book_id) if not s.is_active]
    if not finished:
        return timedelta()
    return sum((s.duration for s in finished), timedelta()) / len(finished)


def session_count(sessions: Iterable[ReadingSession], book_id: str | None = None) -> int:
    """Number of sessions."""
    return len(_filter(sessions, book_id))


def format_total_time(total: timedelta) -> str:
    """Format a duration as "1 h 5 min" or "5 min"."""
    total_seconds = int(total.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours} h {minutes} min"
    return f"{minutes} min"


__all__ = [
    "average_session_duration",
    "format_total_time",
    "session_count",
    "total_pages_read",
    "total_reading_time",
]
