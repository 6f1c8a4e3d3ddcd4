"""
Access gate implementation.

Routes each requester to exactly one tracker: anonymous visitors to the
free tracker, signed-in users to the premium tracker. The gate only reads
counters; the caller increments after the extraction succeeded.
"""

import logging

from modules.usage.interfaces import IFreeUsageTracker, IPremiumUsageTracker
from modules.usage.models import UsageTier
from .models import (
    AccessDecision,
    AnonymousRequester,
    AuthenticatedRequester,
    Requester,
    Verdict,
)

logger = logging.getLogger(__name__)


class AccessGate:
    """Quota check in front of the OCR backend."""

    def __init__(
        self,
        free_tracker: IFreeUsageTracker,
        premium_tracker: IPremiumUsageTracker,
        upgrade_limit: int,
    ):
        self._free = free_tracker
        self._premium = premium_tracker
        self._upgrade_limit = upgrade_limit

    async def evaluate(self, requester: Requester, backend_available: bool) -> AccessDecision:
        # A missing backend wins over any quota state
        if not backend_available:
            logger.warning("Extraction refused: no OCR backend configured")
            return AccessDecision(verdict=Verdict.DENY_NO_BACKEND, tier=requester.tier)

        if isinstance(requester, AuthenticatedRequester):
            usage = await self._premium.get_monthly_usage(requester.user_id)
            if not usage.can_process:
                logger.info(
                    "Monthly limit reached for user %s (%d/%d)",
                    requester.user_id, usage.count, usage.limit,
                )
                return AccessDecision(
                    verdict=Verdict.DENY_MONTHLY_LIMIT,
                    tier=UsageTier.PREMIUM,
                    usage=usage,
                )
            return AccessDecision(verdict=Verdict.ADMIT, tier=UsageTier.PREMIUM, usage=usage)

        if isinstance(requester, AnonymousRequester):
            usage = await self._free.get_current_usage(requester.identity)
            if not usage.can_process:
                logger.info(
                    "Daily free limit reached for %s (%d/%d)",
                    requester.identity.key, usage.count, usage.limit,
                )
                return AccessDecision(
                    verdict=Verdict.DENY_DAILY_LIMIT,
                    tier=UsageTier.FREE,
                    usage=usage,
                    upgrade_limit=self._upgrade_limit,
                )
            return AccessDecision(
                verdict=Verdict.ADMIT,
                tier=UsageTier.FREE,
                usage=usage,
                upgrade_limit=self._upgrade_limit,
            )

        raise TypeError(f"Unsupported requester type: {type(requester).__name__}")
