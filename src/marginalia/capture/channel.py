"""Latest-value channel for live transcripts.

A single slot holding the most recent transcript. Publishing replaces the
value; readers only ever see the newest text and never a backlog.
"""

import threading
from collections.abc import Callable, Iterator

from .errors import CaptureError


class TranscriptChannel:
    """Thread-safe latest-value slot shared by a producer and its readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._value = ""
        self._version = 0
        self._closed = False
        self._error: CaptureError | None = None

    def publish(self, text: str) -> None:
        """Replace the held transcript. Ignored once closed."""
        with self._cond:
            if self._closed:
                return
            self._value = text
            self._version += 1
            self._cond.notify_all()

    def close(self, error: CaptureError | None = None) -> None:
        """End the channel, optionally with the error that ended capture."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._error = error
            self._cond.notify_all()

    @property
    def latest(self) -> str:
        with self._cond:
            return self._value

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    @property
    def error(self) -> CaptureError | None:
        with self._cond:
            return self._error

    def wait_for(self, predicate: Callable[[str], bool], timeout: float | None = None) -> bool:
        """Block until the held transcript satisfies predicate.

        Returns:
            True if it did, False on timeout or when the channel closed first
        """
        with self._cond:
            self._cond.wait_for(lambda: predicate(self._value) or self._closed, timeout)
            return predicate(self._value)

    def updates(self, timeout: float | None = None) -> Iterator[str]:
        """Iterate transcripts with latest-value semantics.

        Values published between two reads are skipped, only the newest is
        delivered. Iteration ends when the channel closes, or when no new
        value arrives within timeout.

        Raises:
            CaptureError: If the channel was closed with an error
        """
        seen = 0
        while True:
            with self._cond:
                arrived = self._cond.wait_for(
                    lambda: self._version != seen or self._closed, timeout
                )
                if not arrived:
                    return
                if self._version != seen:
                    seen = self._version
                    value = self._value
                elif self._error is not None:
                    raise self._error
                else:
                    return
            yield value


__all__ = ["TranscriptChannel"]
