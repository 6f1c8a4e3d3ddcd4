"""
OCR module.

Public API:
- IOCRBackend: Interface for text extraction
- OCRSpaceBackend / UnconfiguredOCRBackend: Implementations
- OCRResult: Extraction result
- filter_text / calculate_confidence / count_words: Text post-processing
"""

from .interfaces import IOCRBackend
from .models import OCRResult
from .exceptions import OCRProcessingError, OCRUnavailableError, ImageTooLargeError
from .text import filter_text, calculate_confidence, count_words, is_garbled
from .backends import (
    OCRSpaceBackend,
    UnconfiguredOCRBackend,
    build_result,
    detect_mime_type,
)

__all__ = [
    "IOCRBackend",
    "OCRResult",
    "OCRProcessingError",
    "OCRUnavailableError",
    "ImageTooLargeError",
    "filter_text",
    "calculate_confidence",
    "count_words",
    "is_garbled",
    "OCRSpaceBackend",
    "UnconfiguredOCRBackend",
    "build_result",
    "detect_mime_type",
]
