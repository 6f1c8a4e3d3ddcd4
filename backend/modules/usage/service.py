"""
Usage tracking service implementation.

FreeUsageTracker counts anonymous extractions per day; PremiumUsageTracker
counts premium extractions per calendar month on the user record. Both
apply their reset lazily when the counter is read or incremented.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from modules.identity.interfaces import IIdentityService
from .interfaces import IFreeUsageStore
from .models import ClientIdentity, UsageSnapshot, UsageTier
from .policy import (
    build_snapshot,
    free_reset_at,
    premium_reset_at,
    premium_reset_due,
    refresh_free_record,
)

logger = logging.getLogger(__name__)

DEFAULT_FREE_DAILY_LIMIT = 3
DEFAULT_PREMIUM_MONTHLY_LIMIT = 1500
DEFAULT_FREE_RETENTION = timedelta(days=30)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FreeUsageTracker:
    """
    Daily quota for anonymous visitors.

    Records are created on first sight and reset once their last reset
    is more than a day old.
    """

    def __init__(
        self,
        store: IFreeUsageStore,
        daily_limit: int = DEFAULT_FREE_DAILY_LIMIT,
        retention: timedelta = DEFAULT_FREE_RETENTION,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._limit = daily_limit
        self._retention = retention
        self._clock = clock or _utc_now

    @property
    def daily_limit(self) -> int:
        return self._limit

    async def get_current_usage(self, identity: ClientIdentity) -> UsageSnapshot:
        now = self._clock()
        existing = await self._store.get(identity.ip_address, identity.cookie_id)
        record, changed = refresh_free_record(existing, identity, now)
        if changed:
            record = await self._store.put(record)
            if existing is not None:
                logger.debug("Reset free usage for %s", identity.key)
        return build_snapshot(
            record.usage_count,
            self._limit,
            UsageTier.FREE,
            free_reset_at(record.last_reset),
        )

    async def increment_usage(self, identity: ClientIdentity) -> UsageSnapshot:
        now = self._clock()
        existing = await self._store.get(identity.ip_address, identity.cookie_id)
        record, changed = refresh_free_record(existing, identity, now)
        if changed:
            await self._store.put(record)
        record = await self._store.increment(identity.ip_address, identity.cookie_id)
        logger.debug("Free usage for %s is now %d", identity.key, record.usage_count)
        return build_snapshot(
            record.usage_count,
            self._limit,
            UsageTier.FREE,
            free_reset_at(record.last_reset),
        )

    async def purge_stale(self) -> int:
        """Drop records untouched for longer than the retention period."""
        cutoff = self._clock() - self._retention
        removed = await self._store.delete_older_than(cutoff)
        if removed:
            logger.info("Purged %d stale free usage records", removed)
        return removed


class PremiumUsageTracker:
    """
    Monthly quota for premium users.

    The counter lives on the user record; a new calendar month (UTC)
    zeroes it on the next read or increment.
    """

    def __init__(
        self,
        identity: IIdentityService,
        monthly_limit: int = DEFAULT_PREMIUM_MONTHLY_LIMIT,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._identity = identity
        self._limit = monthly_limit
        self._clock = clock or _utc_now

    @property
    def monthly_limit(self) -> int:
        return self._limit

    async def get_monthly_usage(self, user_id: str) -> UsageSnapshot:
        user = await self._identity.get_user(user_id)
        now = self._clock()
        if premium_reset_due(user.last_usage_reset, now):
            user.monthly_usage_count = 0
            user.last_usage_reset = now
            user = await self._identity.save_user(user)
            logger.info("Monthly usage reset for user %s", user_id)
        return build_snapshot(
            user.monthly_usage_count,
            self._limit,
            UsageTier.PREMIUM,
            premium_reset_at(user.last_usage_reset),
        )

    async def increment_monthly_usage(self, user_id: str) -> int:
        # Apply a pending month rollover before counting
        await self.get_monthly_usage(user_id)
        count = await self._identity.increment_monthly_usage(user_id)
        logger.debug("Monthly usage for user %s is now %d", user_id, count)
        return count
