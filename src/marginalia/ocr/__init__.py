"""OCR module for Marginalia.

Provides the OCR service interface and page text cleanup for camera quotes.
"""

from .service import (
    ImageProcessingFailed,
    MockOCRService,
    NoTextFound,
    OCRError,
    OCRRecognitionFailed,
    OCRService,
    extract_quote,
)

__all__ = [
    "ImageProcessingFailed",
    "MockOCRService",
    "NoTextFound",
    "OCRError",
    "OCRRecognitionFailed",
    "OCRService",
    "extract_quote",
]
