"""
Access gate data models.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from modules.usage.models import ClientIdentity, UsageSnapshot, UsageTier
from .exceptions import BackendUnavailableError, QuotaExceededError


class Verdict(str, Enum):
    """Outcome of an access check."""

    ADMIT = "admit"
    DENY_DAILY_LIMIT = "deny_daily_limit"
    DENY_MONTHLY_LIMIT = "deny_monthly_limit"
    DENY_NO_BACKEND = "deny_no_backend"


class AnonymousRequester(BaseModel):
    """A visitor without a session, counted against the free tier."""

    identity: ClientIdentity

    model_config = {"frozen": True}

    @property
    def tier(self) -> UsageTier:
        return UsageTier.FREE


class AuthenticatedRequester(BaseModel):
    """A signed-in premium user."""

    user_id: str

    model_config = {"frozen": True}

    @property
    def tier(self) -> UsageTier:
        return UsageTier.PREMIUM


Requester = Union[AnonymousRequester, AuthenticatedRequester]


class AccessDecision(BaseModel):
    """
    Result of AccessGate.evaluate.

    `usage` is None when the decision was made without consulting a
    tracker (no backend configured).
    """

    verdict: Verdict
    tier: UsageTier
    usage: Optional[UsageSnapshot] = None
    upgrade_limit: Optional[int] = Field(
        None,
        description="Premium monthly limit, offered to free users on denial",
    )

    model_config = {"frozen": True}

    @property
    def admitted(self) -> bool:
        return self.verdict == Verdict.ADMIT

    def raise_for_verdict(self) -> None:
        """
        Raise the matching error for a denial; do nothing on admit.

        Raises:
            BackendUnavailableError: No OCR backend
            QuotaExceededError: Daily or monthly quota used up
        """
        if self.verdict == Verdict.ADMIT:
            return
        if self.verdict == Verdict.DENY_NO_BACKEND:
            raise BackendUnavailableError()
        limit = self.usage.limit if self.usage else 0
        raise QuotaExceededError(self.tier, limit, self.upgrade_limit)
