"""Rule-based classification of captured utterances.

Maps raw text to a NoteType using fixed keyword lists, strips leading
trigger labels, and splits multi-part utterances on separator labels.
All functions are pure and total over every input string.
"""

import logging

from .models import NoteType

logger = logging.getLogger(__name__)

# Checked before question indicators, so a quote with a "?" stays a quote
QUOTE_INDICATORS: list[str] = [
    "quote",
    "write down the quote",
    "remember the quote",
    "as stated",
    "the author writes",
    "it is written in the book",
]

QUOTE_GLYPHS: list[str] = ["«", "»", "„", "“", "”", '"']

QUESTION_INDICATORS: list[str] = [
    "why",
    "what for",
    "how",
    "what happens if",
    "interesting",
    "question",
    "i don't understand",
]

# Longer labels first so "quote:" wins over "quote"
TRIGGER_LABELS: list[str] = [
    "quote:",
    "quote",
    "thought:",
    "thought",
    "question:",
    "question",
]

SEPARATOR_LABELS: list[str] = ["quote:", "thought:", "question:", "note:"]


def classify(text: str) -> NoteType:
    """Classify text into a note type.

    Rules are evaluated in order and the first match wins:
    quote indicators or quotation glyphs, then question indicators or a
    question mark, then the THOUGHT default.

    Args:
        text: Raw utterance text

    Returns:
        NoteType enum value
    """
    text_lower = text.lower()

    if any(indicator in text_lower for indicator in QUOTE_INDICATORS) or any(
        glyph in text for glyph in QUOTE_GLYPHS
    ):
        logger.debug(f"Classified '{text[:50]}' as quote")
        return NoteType.QUOTE

    if any(indicator in text_lower for indicator in QUESTION_INDICATORS) or "?" in text:
        logger.debug(f"Classified '{text[:50]}' as question")
        return NoteType.QUESTION

    return NoteType.THOUGHT


def clean_trigger_words(text: str) -> str:
    """Strip a leading trigger label such as "quote:" from text.

    Only the first matching label is removed. Text that does not start with
    a label is returned unchanged (not even trimmed).

    Args:
        text: Raw utterance text

    Returns:
        Text without its leading trigger label
    """
    text_lower = text.lower()
    for label in TRIGGER_LABELS:
        if text_lower.startswith(label):
            return text[len(label) :].strip()
    return text


def segment(text: str) -> list[tuple[str, NoteType]]:
    """Split an utterance into several labeled notes.

    The first separator label present anywhere in the text is used to split
    it; any other labels are left inside the segments. Each segment is
    classified and cleaned independently and blank segments are dropped.

    Args:
        text: Raw utterance text

    Returns:
        Ordered list of (content, type) pairs

    Example:
        >>> segment("quote: A. quote: B.")
        [('A.', <NoteType.QUOTE: 'quote'>), ('B.', <NoteType.QUOTE: 'quote'>)]
    """
    parts: list[str] = [text]

    for label in SEPARATOR_LABELS:
        pieces = text.split(label)
        if len(pieces) > 1:
            head, rest = pieces[0], pieces[1:]
            parts = [head] if head.strip() else []
            parts.extend(label + piece for piece in rest)
            break

    segments: list[tuple[str, NoteType]] = []
    for part in parts:
        trimmed = part.strip()
        if not trimmed:
            continue
        segments.append((clean_trigger_words(trimmed), classify(trimmed)))

    return segments


__all__ = [
    "QUESTION_INDICATORS",
    "QUOTE_GLYPHS",
    "QUOTE_INDICATORS",
    "SEPARATOR_LABELS",
    "TRIGGER_LABELS",
    "classify",
    "clean_trigger_words",
    "segment",
]
