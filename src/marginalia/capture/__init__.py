"""Voice capture module for Marginalia.

Provides the capture controller that turns live speech into final
transcripts, together with its channel, permission and error types.
"""

from .channel import TranscriptChannel
from .controller import DEFAULT_VOCABULARY_HINTS, CaptureController, CaptureState
from .errors import (
    AudioSessionFailed,
    CaptureError,
    NotAuthorized,
    NotAvailable,
    RecognitionFailed,
)
from .permissions import PermissionProvider, StaticPermissions

__all__ = [
    "DEFAULT_VOCABULARY_HINTS",
    "AudioSessionFailed",
    "CaptureController",
    "CaptureError",
    "CaptureState",
    "NotAuthorized",
    "NotAvailable",
    "PermissionProvider",
    "RecognitionFailed",
    "StaticPermissions",
    "TranscriptChannel",
]
