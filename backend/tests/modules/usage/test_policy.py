"""Tests for quota reset rules."""

from datetime import datetime, timedelta, timezone

from modules.usage.models import ClientIdentity, FreeUsageRecord, UsageTier
from modules.usage.policy import (
    build_snapshot,
    free_reset_at,
    free_reset_due,
    months_elapsed,
    premium_reset_at,
    premium_reset_due,
    refresh_free_record,
)

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class TestFreeReset:
    def test_exactly_one_day_is_not_stale(self):
        """The window is strict: a reset exactly 24h ago still counts."""
        assert free_reset_due(NOW - timedelta(days=1), NOW) is False

    def test_older_than_one_day_is_stale(self):
        assert free_reset_due(NOW - timedelta(days=1, seconds=1), NOW) is True

    def test_rolling_not_calendar(self):
        """Crossing midnight alone does not reset the free counter."""
        last = datetime(2024, 3, 14, 23, 0, tzinfo=timezone.utc)
        now = datetime(2024, 3, 15, 1, 0, tzinfo=timezone.utc)
        assert free_reset_due(last, now) is False

    def test_naive_timestamps_are_utc(self):
        naive = datetime(2024, 3, 13, 12, 0)
        assert free_reset_due(naive, NOW) is True

    def test_free_reset_at(self):
        assert free_reset_at(NOW) == NOW + timedelta(days=1)


class TestPremiumReset:
    def test_same_month(self):
        last = datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert months_elapsed(last, NOW) == 0
        assert premium_reset_due(last, NOW) is False

    def test_next_month_first_instant(self):
        """A new calendar month resets even if less than a day has passed."""
        last = datetime(2024, 3, 31, 23, 59, tzinfo=timezone.utc)
        now = datetime(2024, 4, 1, 0, 0, tzinfo=timezone.utc)
        assert premium_reset_due(last, now) is True

    def test_same_month_number_next_year(self):
        """Month index accounts for the year, not just the month number."""
        last = datetime(2023, 3, 20, tzinfo=timezone.utc)
        assert months_elapsed(last, NOW) == 12
        assert premium_reset_due(last, NOW) is True

    def test_mid_month_last_reset(self):
        """From the 15th: the next month resets on its first day, not its 15th."""
        last = datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert premium_reset_due(last, datetime(2024, 1, 31, tzinfo=timezone.utc)) is False
        assert premium_reset_due(last, datetime(2024, 2, 1, tzinfo=timezone.utc)) is True
        assert premium_reset_due(last, datetime(2024, 2, 15, tzinfo=timezone.utc)) is True

    def test_reset_at_is_first_of_next_month(self):
        assert premium_reset_at(NOW) == datetime(2024, 4, 1, tzinfo=timezone.utc)

    def test_reset_at_december(self):
        last = datetime(2024, 12, 31, 18, 0, tzinfo=timezone.utc)
        assert premium_reset_at(last) == datetime(2025, 1, 1, tzinfo=timezone.utc)


class TestRefreshFreeRecord:
    identity = ClientIdentity(ip_address="1.2.3.4", cookie_id="cookie-1")

    def test_creates_missing_record(self):
        """Unseen identities start at zero."""
        record, changed = refresh_free_record(None, self.identity, NOW)

        assert changed is True
        assert record.usage_count == 0
        assert record.last_reset == NOW
        assert record.ip_address == "1.2.3.4"

    def test_keeps_fresh_record(self):
        existing = FreeUsageRecord(
            ip_address="1.2.3.4", cookie_id="cookie-1", usage_count=2, last_reset=NOW
        )
        record, changed = refresh_free_record(existing, self.identity, NOW + timedelta(hours=5))

        assert changed is False
        assert record.usage_count == 2

    def test_resets_stale_record(self):
        existing = FreeUsageRecord(
            ip_address="1.2.3.4", cookie_id="cookie-1", usage_count=3, last_reset=NOW
        )
        later = NOW + timedelta(days=2)
        record, changed = refresh_free_record(existing, self.identity, later)

        assert changed is True
        assert record.usage_count == 0
        assert record.last_reset == later


class TestBuildSnapshot:
    def test_under_limit(self):
        snapshot = build_snapshot(2, 3, UsageTier.FREE)
        assert snapshot.can_process is True
        assert snapshot.remaining == 1

    def test_at_limit(self):
        """The limit itself is exhausted: count == limit denies."""
        snapshot = build_snapshot(3, 3, UsageTier.FREE)
        assert snapshot.can_process is False
        assert snapshot.remaining == 0

    def test_over_limit_remaining_never_negative(self):
        snapshot = build_snapshot(5, 3, UsageTier.FREE)
        assert snapshot.remaining == 0
