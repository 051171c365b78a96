"""Permission checks for voice capture."""

from dataclasses import dataclass
from typing import Protocol


class PermissionProvider(Protocol):
    """Answers whether the reader allowed speech recognition and microphone use."""

    def speech_granted(self) -> bool: ...

    def microphone_granted(self) -> bool: ...


@dataclass
class StaticPermissions:
    """Fixed permission answers, for desktop use and tests."""

    speech: bool = True
    microphone: bool = True

    def speech_granted(self) -> bool:
        return self.speech

    def microphone_granted(self) -> bool:
        return self.microphone


__all__ = ["PermissionProvider", "StaticPermissions"]
