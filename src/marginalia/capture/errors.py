"""Capture error types."""


class CaptureError(Exception):
    """Base class for voice capture failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotAuthorized(CaptureError):
    """Speech or microphone permission was denied."""


class NotAvailable(CaptureError):
    """The speech recognizer cannot be used right now."""


class RecognitionFailed(CaptureError):
    """The recognizer failed while listening."""


class AudioSessionFailed(CaptureError):
    """The audio input could not be acquired."""


__all__ = [
    "AudioSessionFailed",
    "CaptureError",
    "NotAuthorized",
    "NotAvailable",
    "RecognitionFailed",
]
