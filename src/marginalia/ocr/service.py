"""OCR service protocol, errors and quote cleanup.

Text recognition itself is provided by the host platform; Marginalia only
turns recognized page text into a quote.
"""

import re
from typing import Protocol


class OCRError(Exception):
    """Base exception for text recognition errors."""

    pass


class ImageProcessingFailed(OCRError):
    """Raised when the image cannot be decoded."""

    pass


class NoTextFound(OCRError):
    """Raised when the image contains no recognizable text."""

    pass


class OCRRecognitionFailed(OCRError):
    """Raised when the recognition engine fails."""

    pass


class OCRService(Protocol):
    """Interface for recognizing printed text in a photo of a page."""

    def recognize_text(self, image: bytes) -> str:
        """Recognize the text of an encoded image, lines joined with newlines.

        Raises:
            ImageProcessingFailed: If the image cannot be decoded
            NoTextFound: If no text was recognized
            OCRRecognitionFailed: If the engine fails
        """
        ...


_BLANK_LINES = re.compile(r"\n\n+")
_WHITESPACE = re.compile(r"\s+")


def extract_quote(text: str) -> str:
    """Clean recognized page text into a single-line quote.

    Drops blank lines and bare page numbers, collapses whitespace and wraps
    the result in « » unless it already starts with a quotation mark.
    """
    cleaned = _BLANK_LINES.sub("\n", text)
    lines = [
        line for line in cleaned.split("\n") if line.strip() and not line.strip().isdigit()
    ]
    cleaned = _WHITESPACE.sub(" ", " ".join(lines)).strip()

    if not cleaned:
        return ""
    if not cleaned.startswith(("«", '"')):
        cleaned = f"«{cleaned}»"
    return cleaned


class MockOCRService:
    """OCR service returning preset text, for testing."""

    def __init__(self, text: str = "") -> None:
        self._text = text
        self.call_count = 0

    def set_text(self, text: str) -> None:
        self._text = text

    def recognize_text(self, image: bytes) -> str:
        self.call_count += 1
        if not image:
            raise ImageProcessingFailed("Empty image")
        if not self._text.strip():
            raise NoTextFound("No text found in image")
        return self._text


__all__ = [
    "ImageProcessingFailed",
    "MockOCRService",
    "NoTextFound",
    "OCRError",
    "OCRRecognitionFailed",
    "OCRService",
    "extract_quote",
]
