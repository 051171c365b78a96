"""Marginalia - voice notes for reading physical books.

Marginalia captures what a reader says or photographs while reading:
- Live speech capture (Whisper)
- Rule-based note classification (thought, quote, question)
- Reading sessions with a single active session at a time
- Book chat threads and AI answers to questions (Claude)

Usage:
    python -m marginalia --book "Dune"
    python -m marginalia --profile test --book "Dune" --utterance "quote: Fear is the mind-killer."
"""

__version__ = "0.1.0"

from .config import MarginaliaConfig
from .config.loader import load_config

__all__ = [
    "MarginaliaConfig",
    "__version__",
    "load_config",
]
