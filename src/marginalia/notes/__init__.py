"""Notes module for Marginalia.

Provides note models, rule-based classification and the note store.
"""

from .classifier import classify, clean_trigger_words, segment
from .models import Note, NoteSource, NoteType
from .store import NoteStore

__all__ = [
    "Note",
    "NoteSource",
    "NoteStore",
    "NoteType",
    "classify",
    "clean_trigger_words",
    "segment",
]
