"""
Provisioning module data models.

Premium accounts move through:

    no_account -> pending_payment -> paid_unclaimed -> registered

`paid_unclaimed` exists only implicitly (allow-list entry, no user); the
other transitions produce the results below.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, EmailStr, Field

from modules.identity.models import User


class RegistrationState(str, Enum):
    NO_ACCOUNT = "no_account"
    PENDING_PAYMENT = "pending_payment"
    PAID_UNCLAIMED = "paid_unclaimed"
    REGISTERED = "registered"


class RegistrationRequest(BaseModel):
    """Sign-up form for a premium account."""

    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class PendingRegistration(BaseModel):
    """
    Sign-up details parked until the payment is confirmed.

    Keyed by an opaque provisioning token handed to the client. Only the
    password hash is kept.
    """

    token: str
    username: str
    email: str
    password_hash: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class RegistrationResult(BaseModel):
    """
    Outcome of a registration attempt.

    `payment_required` is a normal result, not an error: the HTTP layer
    turns it into 402 and hands out the provisioning token.
    """

    state: RegistrationState
    payment_required: bool
    email: str
    provisioning_token: Optional[str] = None
    user: Optional[User] = None


class PaymentConfirmation(BaseModel):
    """Client-reported premium payment."""

    email: EmailStr
    amount: str = Field(..., pattern=r"^\d+\.\d{2}$", description="Decimal amount, e.g. 10.00")
    currency: str = Field(default="USD", min_length=3, max_length=3)
    order_id: Optional[str] = Field(None, description="Gateway order to capture")

    @property
    def amount_value(self) -> Decimal:
        return Decimal(self.amount)


class PaymentResult(BaseModel):
    """Outcome of a confirmed payment."""

    success: bool = True
    message: str
    payment_reference: str
    account_created: bool = False
    error: Optional[str] = None
    user: Optional[User] = None


class OAuthAuthenticated(BaseModel):
    """OAuth sign-in resolved to a premium user."""

    user: User
    created: bool = False


class OAuthNeedsPayment(BaseModel):
    """OAuth sign-in for an email that has not paid yet."""

    email: str


OAuthOutcome = Union[OAuthAuthenticated, OAuthNeedsPayment]
