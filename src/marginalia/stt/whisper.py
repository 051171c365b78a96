"""Faster-whisper recognizer implementation.

Uses faster-whisper (CTranslate2) for efficient speech-to-text on CPU/GPU.
Whisper has no native streaming mode, so live partials come from
re-transcribing the growing utterance buffer at a fixed audio interval.
"""

import logging
import time
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import numpy as np

from ..audio import AudioChunk
from .recognizer import TranscriptUpdate

# faster-whisper import with fallback
try:
    from faster_whisper import WhisperModel

    FASTER_WHISPER_AVAILABLE = True
except ImportError:
    FASTER_WHISPER_AVAILABLE = False
    WhisperModel = None  # type: ignore

logger = logging.getLogger(__name__)

WHISPER_SAMPLE_RATE = 16000


def pcm16_to_float(audio: bytes, sample_rate: int) -> np.ndarray:
    """Convert 16-bit PCM to the float32 16 kHz array Whisper expects."""
    audio_array = np.frombuffer(audio, dtype=np.int16).astype(np.float32) / 32768.0

    if sample_rate != WHISPER_SAMPLE_RATE and len(audio_array) > 0:
        # Nearest-sample resampling
        ratio = WHISPER_SAMPLE_RATE / sample_rate
        new_length = int(len(audio_array) * ratio)
        indices = np.linspace(0, len(audio_array) - 1, new_length).astype(int)
        audio_array = audio_array[indices]

    return audio_array


class WhisperRecognizer:
    """Streaming recognizer using faster-whisper.

    Implements the Recognizer protocol.
    """

    def __init__(
        self,
        model_size: str = "base.en",
        device: str = "cpu",
        compute_type: str = "int8",
        language: str = "en",
        partial_interval_ms: int = 1000,
        model_path: Path | None = None,
    ) -> None:
        """Initialize Whisper recognizer.

        Args:
            model_size: Whisper model size (tiny.en, base.en, small.en, etc.)
            device: Device to run on ("cpu", "cuda", "auto")
            compute_type: Computation type ("float16", "int8", "float32")
            language: Expected language code
            partial_interval_ms: Audio between two partial transcripts
            model_path: Optional path to pre-downloaded model

        Raises:
            RuntimeError: If faster-whisper is not available
        """
        if not FASTER_WHISPER_AVAILABLE:
            raise RuntimeError(
                "faster-whisper not available. Install with: pip install faster-whisper"
            )

        self._model_size = model_size
        self._device = device
        self._compute_type = compute_type
        self._language = language
        self._partial_interval_ms = partial_interval_ms
        self._model_path = model_path
        self._model: Any = None

    def _ensure_model_loaded(self) -> None:
        """Load model if not already loaded."""
        if self._model is not None:
            return

        logger.info(
            f"Loading Whisper model: {self._model_size} "
            f"(device={self._device}, compute={self._compute_type})"
        )

        start = time.time()
        source = (
            str(self._model_path)
            if self._model_path and self._model_path.exists()
            else self._model_size
        )
        self._model = WhisperModel(source, device=self._device, compute_type=self._compute_type)

        load_time = (time.time() - start) * 1000
        logger.info(f"Whisper model loaded in {load_time:.0f}ms")

    def is_available(self) -> bool:
        """Return True if the model can be loaded."""
        try:
            self._ensure_model_loaded()
        except (RuntimeError, OSError, ValueError) as e:
            logger.error(f"Whisper model unavailable: {e}")
            return False
        return True

    def _transcribe(self, audio: bytes, sample_rate: int, hints: list[str]) -> str:
        start_time = time.time()

        segments, _info = self._model.transcribe(
            pcm16_to_float(audio, sample_rate),
            language=self._language if self._language != "auto" else None,
            beam_size=1,  # Fast mode
            vad_filter=True,
            initial_prompt=", ".join(hints) if hints else None,
        )
        text = " ".join(segment.text.strip() for segment in segments).strip()

        latency_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"Transcribed {len(audio)} bytes in {latency_ms}ms: '{text[:50]}'")
        return text

    def recognize(
        self, chunks: Iterable[AudioChunk], hints: list[str]
    ) -> Iterator[TranscriptUpdate]:
        """Re-transcribe the growing buffer every partial interval."""
        self._ensure_model_loaded()

        buffer = bytearray()
        sample_rate = WHISPER_SAMPLE_RATE
        pending_ms = 0.0
        last_text = ""

        for chunk in chunks:
            buffer.extend(chunk.data)
            sample_rate = chunk.sample_rate
            pending_ms += chunk.duration_ms

            if pending_ms >= self._partial_interval_ms:
                pending_ms = 0.0
                text = self._transcribe(bytes(buffer), sample_rate, hints)
                if text and text != last_text:
                    last_text = text
                    yield TranscriptUpdate(text=text)

        if buffer:
            yield TranscriptUpdate(
                text=self._transcribe(bytes(buffer), sample_rate, hints), is_final=True
            )

    @property
    def model_size(self) -> str:
        """Get model size."""
        return self._model_size

    @property
    def is_loaded(self) -> bool:
        """Check if model is loaded."""
        return self._model is not None


__all__ = ["WhisperRecognizer", "pcm16_to_float"]
