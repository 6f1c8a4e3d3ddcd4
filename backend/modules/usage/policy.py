"""
Quota reset rules.

Pure functions, no storage access. The two tiers reset differently and
must stay that way:

- free: rolling window, stale once `last_reset < now - 1 day`
- premium: calendar months, stale once the (year, month) index moved on
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from dateutil.relativedelta import relativedelta

from .models import ClientIdentity, FreeUsageRecord, UsageSnapshot, UsageTier

FREE_RESET_WINDOW = timedelta(days=1)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def free_reset_due(last_reset: datetime, now: datetime) -> bool:
    """Whether a free counter last reset at `last_reset` is stale at `now`."""
    return _as_utc(last_reset) < _as_utc(now) - FREE_RESET_WINDOW


def free_reset_at(last_reset: datetime) -> datetime:
    """First instant at which the free counter is considered stale."""
    return _as_utc(last_reset) + FREE_RESET_WINDOW


def months_elapsed(last_reset: datetime, now: datetime) -> int:
    """Calendar months between two instants, ignoring the day of month."""
    last = _as_utc(last_reset)
    current = _as_utc(now)
    return (current.year - last.year) * 12 + (current.month - last.month)


def premium_reset_due(last_reset: datetime, now: datetime) -> bool:
    return months_elapsed(last_reset, now) >= 1


def premium_reset_at(last_reset: datetime) -> datetime:
    """Start of the calendar month following `last_reset` (UTC)."""
    month_start = _as_utc(last_reset).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return month_start + relativedelta(months=1)


def refresh_free_record(
    record: Optional[FreeUsageRecord],
    identity: ClientIdentity,
    now: datetime,
) -> tuple[FreeUsageRecord, bool]:
    """
    Apply lazy initialisation and the daily reset to a free record.

    Returns:
        (record, changed) where `changed` means the record must be stored
    """
    if record is None or free_reset_due(record.last_reset, now):
        fresh = FreeUsageRecord(
            ip_address=identity.ip_address,
            cookie_id=identity.cookie_id,
            usage_count=0,
            last_reset=now,
        )
        return fresh, True
    return record, False


def build_snapshot(
    count: int,
    limit: int,
    tier: UsageTier,
    resets_at: Optional[datetime] = None,
) -> UsageSnapshot:
    return UsageSnapshot(
        count=count,
        limit=limit,
        can_process=count < limit,
        tier=tier,
        resets_at=resets_at,
    )
