"""
Access gate exceptions.
"""

from typing import Optional

from shared.exceptions import RateLimitError, ServiceUnavailableError
from modules.usage.models import UsageTier


class QuotaExceededError(RateLimitError):
    """
    The requester's quota for the current window is used up.

    Free-tier denials carry `requires_payment` so clients can offer the
    upgrade path.
    """

    def __init__(self, tier: UsageTier, limit: int, upgrade_limit: Optional[int] = None):
        self.tier = tier
        self.limit = limit
        if tier == UsageTier.FREE:
            message = f"Daily limit of {limit} free extractions exceeded."
            if upgrade_limit is not None:
                message += f" Purchase premium for {upgrade_limit} monthly extractions."
            details = {"tier": tier.value, "limit": limit, "requires_payment": True}
        else:
            message = f"Monthly limit of {limit} extractions exceeded"
            details = {"tier": tier.value, "limit": limit}
        super().__init__(message, code="QUOTA_EXCEEDED", details=details)


class BackendUnavailableError(ServiceUnavailableError):
    """No OCR backend is configured."""

    def __init__(self, message: str = "OCR service not configured"):
        super().__init__(message, code="BACKEND_UNAVAILABLE")
