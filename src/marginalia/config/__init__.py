"""Configuration module for Marginalia.

This module provides configuration loading and profile management.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


@dataclass
class AudioConfig:
    """Microphone input configuration."""

    input_device: str = "default"
    sample_rate: int = 16000
    channels: int = 1
    chunk_size: int = 1024


@dataclass
class STTConfig:
    """Speech recognition configuration."""

    model: str = "base.en"
    device: str = "cpu"
    compute_type: str = "int8"
    language: str = "en"
    partial_interval_ms: int = 1000


@dataclass
class CaptureConfig:
    """Voice capture configuration."""

    vocabulary_hints: list[str] = field(
        default_factory=lambda: [
            "quote",
            "thought",
            "question",
            "note",
            "remember",
            "interesting",
            "why",
            "what for",
            "how",
        ]
    )
    segment_utterances: bool = False


@dataclass
class AIConfig:
    """AI text service configuration."""

    provider: str = "claude"
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 500
    temperature: float = 0.7
    timeout_seconds: float = 30.0


@dataclass
class StorageConfig:
    """Durable store configuration."""

    backend: str = "json"
    data_dir: str = "~/.marginalia"
    mongo_uri: str = "mongodb://localhost:27017"
    database: str = "marginalia"
    server_selection_timeout_ms: int = 5000


@dataclass
class FanoutConfig:
    """Background fan-out configuration."""

    max_workers: int = 4


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class TestingConfig:
    """Testing configuration."""

    mock_audio_enabled: bool = False


@dataclass
class MarginaliaConfig:
    """Main Marginalia configuration."""

    audio: AudioConfig = field(default_factory=AudioConfig)
    stt: STTConfig = field(default_factory=STTConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    fanout: FanoutConfig = field(default_factory=FanoutConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    testing: TestingConfig = field(default_factory=TestingConfig)


class ConfigLoader(Protocol):
    """Protocol for configuration loading."""

    def load(self, path: Path) -> MarginaliaConfig:
        """Load configuration from file path."""
        ...

    def load_profile(self, profile: str) -> MarginaliaConfig:
        """Load configuration by profile name (dev, prod, test)."""
        ...

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        ...


# Public API
__all__ = [
    "AIConfig",
    "AudioConfig",
    "CaptureConfig",
    "ConfigLoader",
    "FanoutConfig",
    "LoggingConfig",
    "MarginaliaConfig",
    "STTConfig",
    "StorageConfig",
    "TestingConfig",
]
