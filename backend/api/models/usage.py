"""
Usage and extraction response models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from modules.usage.models import UsageLogEntry, UsageSnapshot


class UsageResponse(BaseModel):
    """Quota state for the caller."""

    count: int
    limit: int
    can_process: bool
    tier: str
    remaining: int
    resets_at: Optional[datetime] = None

    @classmethod
    def from_snapshot(cls, snapshot: UsageSnapshot) -> "UsageResponse":
        return cls(
            count=snapshot.count,
            limit=snapshot.limit,
            can_process=snapshot.can_process,
            tier=snapshot.tier.value,
            remaining=snapshot.remaining,
            resets_at=snapshot.resets_at,
        )


class UsageHistoryItem(BaseModel):
    id: Optional[str]
    extracted_words: int
    confidence: int
    processed_at: datetime

    @classmethod
    def from_entry(cls, entry: UsageLogEntry) -> "UsageHistoryItem":
        return cls(
            id=entry.id,
            extracted_words=entry.extracted_words,
            confidence=entry.confidence,
            processed_at=entry.processed_at,
        )


class UsageHistoryResponse(BaseModel):
    items: list[UsageHistoryItem]
    limit: int
    offset: int


class ExtractResponse(BaseModel):
    """Result of POST /api/extract-text."""

    extracted_text: str
    confidence: int
    word_count: int
    raw_text: Optional[str] = None
    usage: UsageResponse
