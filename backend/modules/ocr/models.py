"""
OCR module data models.
"""

from typing import Optional

from pydantic import BaseModel, Field


class OCRResult(BaseModel):
    """Text extracted from one image."""

    extracted_text: str = Field(..., description="Final text (filtered when requested)")
    confidence: int = Field(..., ge=0, le=100, description="Heuristic confidence score")
    word_count: int = Field(..., ge=0)
    raw_text: Optional[str] = Field(None, description="Unfiltered text, when filtering changed it")
