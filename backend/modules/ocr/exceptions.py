"""
OCR module exceptions.
"""

from typing import Optional

from shared.exceptions import ExternalServiceError, ServiceUnavailableError, ValidationError


class OCRProcessingError(ExternalServiceError):
    """Raised when the OCR provider fails or rejects the image."""

    def __init__(self, message: str, provider_error: Optional[str] = None):
        super().__init__(
            message,
            service="ocr",
            code="OCR_PROCESSING_FAILED",
            details={"provider_error": provider_error} if provider_error else {},
        )


class ImageTooLargeError(ValidationError):
    """Raised when an image exceeds the size the OCR backend accepts."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"File size exceeds the maximum size limit. Maximum size limit {limit // 1024} KB",
            code="IMAGE_TOO_LARGE",
            details={"size": size, "limit": limit},
        )


class OCRUnavailableError(ServiceUnavailableError):
    """Raised when extraction is attempted without a configured backend."""

    def __init__(self):
        super().__init__("OCR service not configured", code="OCR_UNAVAILABLE")
