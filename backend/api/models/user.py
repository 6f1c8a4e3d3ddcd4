"""
User and session models for the HTTP layer.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """Session token payload structure."""
    sub: str  # User ID
    username: Optional[str] = None
    email: Optional[str] = None
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


class UserResponse(BaseModel):
    """Public view of a premium user."""

    id: str
    username: str
    email: str
    tier: str = "premium"
    monthly_usage_count: int = 0
    monthly_limit: Optional[int] = None
    usage_resets_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    success: bool = True
    user: UserResponse
    token: str


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse
    token: str


class PaymentRequiredResponse(BaseModel):
    """Body of a 402 from /api/register."""

    error: str = "Payment required to create premium account."
    requires_payment: bool = True
    email: str
    provisioning_token: str
