"""
OCR backend implementations.

- OCRSpaceBackend: OCR.space REST API
- UnconfiguredOCRBackend: placeholder used when no API key is set
"""

import base64
import logging
from typing import Optional

import httpx

from .exceptions import ImageTooLargeError, OCRProcessingError, OCRUnavailableError
from .models import OCRResult
from .text import calculate_confidence, count_words, filter_text

logger = logging.getLogger(__name__)

OCR_SPACE_URL = "https://api.ocr.space/parse/image"
DEFAULT_MAX_IMAGE_BYTES = 1024 * 1024


def detect_mime_type(image: bytes) -> str:
    """Sniff PNG / JPEG / WebP from the file header, defaulting to JPEG."""
    if image[:4] == b"\x89PNG":
        return "image/png"
    if image[:2] == b"\xff\xd8":
        return "image/jpeg"
    if image[:4] == b"RIFF" and image[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def build_result(text: str, use_filtering: bool) -> OCRResult:
    """Apply optional filtering and scoring to raw OCR text."""
    confidence = calculate_confidence(text)
    final_text = text
    if use_filtering and text:
        final_text = filter_text(text) or text
    return OCRResult(
        extracted_text=final_text,
        confidence=confidence,
        word_count=count_words(final_text),
        raw_text=text if final_text != text else None,
    )


class OCRSpaceBackend:
    """Extraction through the OCR.space parse endpoint (engine 2, English)."""

    def __init__(
        self,
        api_key: str,
        url: str = OCR_SPACE_URL,
        timeout: float = 30.0,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._url = url
        self._timeout = timeout
        self._max_image_bytes = max_image_bytes
        self._http_client = http_client

    @property
    def available(self) -> bool:
        return bool(self._api_key)

    async def extract(self, image: bytes, use_filtering: bool = False) -> OCRResult:
        if len(image) > self._max_image_bytes:
            raise ImageTooLargeError(len(image), self._max_image_bytes)

        encoded = base64.b64encode(image).decode("ascii")
        form = {
            "base64Image": f"data:{detect_mime_type(image)};base64,{encoded}",
            "language": "eng",
            "OCREngine": "2",
            "detectOrientation": "true",
            "scale": "true",
            "isOverlayRequired": "false",
            "isTable": "true",
        }

        if self._http_client is not None:
            payload = await self._post(self._http_client, form)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                payload = await self._post(client, form)

        if payload.get("IsErroredOnProcessing"):
            error = payload.get("ErrorMessage") or "OCR processing failed"
            if isinstance(error, list):
                error = "; ".join(str(e) for e in error)
            logger.warning("OCR.space reported an error: %s", error)
            raise OCRProcessingError(
                "OCR processing failed. Please try again with a different image.",
                provider_error=str(error),
            )

        parsed = payload.get("ParsedResults") or [{}]
        text = parsed[0].get("ParsedText") or ""
        return build_result(text, use_filtering)

    async def _post(self, client: httpx.AsyncClient, form: dict[str, str]) -> dict:
        try:
            response = await client.post(
                self._url,
                data=form,
                headers={"apikey": self._api_key},
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("OCR.space request failed: %s", e)
            raise OCRProcessingError(
                "OCR processing failed. Please try again with a different image.",
                provider_error=str(e),
            ) from e


class UnconfiguredOCRBackend:
    """Stands in when OCR_SPACE_API_KEY is empty."""

    @property
    def available(self) -> bool:
        return False

    async def extract(self, image: bytes, use_filtering: bool = False) -> OCRResult:
        raise OCRUnavailableError()
