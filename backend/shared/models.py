"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated (premium) user in the system.

    This model is populated from the session token and the identity store,
    and made available to route handlers via dependency injection.
    Only premium subscribers can hold an account, so the tier is fixed.
    """

    id: str = Field(..., description="User ID (UUID)")
    username: str = Field(..., description="Unique username")
    email: str = Field(..., description="User's email address")

    last_sign_in: Optional[datetime] = Field(None, description="Session issue time")

    tier: str = Field(default="premium", description="Usage tier")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
    }
