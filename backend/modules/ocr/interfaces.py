"""
OCR module interfaces.
"""

from typing import Protocol, runtime_checkable

from .models import OCRResult


@runtime_checkable
class IOCRBackend(Protocol):
    """
    Text extraction from images.

    `available` is False when the backend cannot be used at all (no API
    key); the access gate refuses extraction requests in that case.
    """

    @property
    def available(self) -> bool:
        ...

    async def extract(self, image: bytes, use_filtering: bool = False) -> OCRResult:
        """
        Raises:
            OCRProcessingError: If the provider failed
            ImageTooLargeError: If the image is over the backend's limit
        """
        ...
