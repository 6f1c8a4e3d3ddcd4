"""
Usage tracking module data models.

Two independent counters exist: a daily one for anonymous visitors keyed
by IP + cookie, and a monthly one stored on each premium user.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class UsageTier(str, Enum):
    """Which quota a request is counted against."""

    FREE = "free"
    PREMIUM = "premium"


class UsageSnapshot(BaseModel):
    """
    Current quota state for one requester.

    Returned by both trackers and echoed to clients for display.
    """

    count: int = Field(..., ge=0, description="Extractions used in the current window")
    limit: int = Field(..., ge=0, description="Extractions allowed per window")
    can_process: bool = Field(..., description="Whether another extraction is allowed")
    tier: UsageTier = Field(..., description="Tier the counter belongs to")
    resets_at: Optional[datetime] = Field(None, description="When the counter next resets")

    model_config = {"frozen": True}

    @property
    def remaining(self) -> int:
        return max(self.limit - self.count, 0)


class ClientIdentity(BaseModel):
    """
    Anonymous visitor identity: client IP plus tracking cookie.

    `cookie_issued` is True when the cookie was generated for this request
    and has to be sent back for the visitor to stay trackable.
    """

    ip_address: str = Field(..., description="Client IP address")
    cookie_id: str = Field(..., description="Tracking cookie value")
    cookie_issued: bool = Field(default=False, description="Cookie generated on this request")

    model_config = {"frozen": True}

    @property
    def key(self) -> str:
        return f"{self.ip_address}_{self.cookie_id}"


class FreeUsageRecord(BaseModel):
    """Daily counter for one anonymous identity."""

    ip_address: str
    cookie_id: str
    usage_count: int = Field(default=0, ge=0)
    last_reset: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UsageLogEntry(BaseModel):
    """
    A single successful extraction.

    Premium entries carry the user id, free entries the IP + cookie pair.
    """

    id: Optional[str] = Field(None, description="Entry ID (set after save)")
    tier: UsageTier
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    cookie_id: Optional[str] = None
    extracted_words: int = Field(default=0, ge=0)
    confidence: int = Field(default=0, ge=0, le=100)
    processed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
