"""
Identity module data models.

Users only exist for premium subscribers: an account can be created only
after its email has landed on the premium allow-list through a payment.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionStatus(str, Enum):
    """Status of a premium allow-list entry."""

    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PremiumEntry(BaseModel):
    """
    A premium allow-list entry.

    Created when a payment is confirmed for an email. The email may be
    allow-listed long before (or without ever) a User being created for it.
    """

    email: str = Field(..., description="Paying email address (unique key)")
    payment_reference: Optional[str] = Field(
        None,
        description="Reference of the payment that allow-listed the email",
    )
    subscription_status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE,
        description="Subscription status",
    )
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_active(self) -> bool:
        return self.subscription_status == SubscriptionStatus.ACTIVE


class User(BaseModel):
    """
    A premium user account.

    A user has at least one credential: a password hash, an OAuth
    provider/id pair, or both. The monthly usage counter lives here too.
    """

    id: str = Field(..., description="User ID (UUID)")
    username: str = Field(..., description="Unique username")
    email: str = Field(..., description="Unique email address")
    password_hash: Optional[str] = Field(None, description="bcrypt hash, None for OAuth-only users")
    oauth_provider: Optional[str] = Field(None, description="OAuth provider (e.g. 'google')")
    oauth_id: Optional[str] = Field(None, description="User ID at the OAuth provider")

    monthly_usage_count: int = Field(default=0, ge=0)
    last_usage_reset: datetime = Field(default_factory=_utcnow)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)


class OAuthProfile(BaseModel):
    """Profile returned by an OAuth provider after a successful sign-in."""

    provider: str = Field(..., description="OAuth provider name")
    provider_id: str = Field(..., description="User ID at the provider")
    email: Optional[str] = Field(None, description="Primary email, if shared")
    display_name: Optional[str] = Field(None, description="Display name")
