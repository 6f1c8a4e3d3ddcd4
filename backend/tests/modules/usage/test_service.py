"""Tests for the usage trackers."""

from datetime import timedelta

import pytest

from modules.identity.exceptions import UserNotFoundError
from modules.usage.models import ClientIdentity, UsageTier
from modules.usage.service import FreeUsageTracker, PremiumUsageTracker
from modules.usage.store import InMemoryFreeUsageStore


class TestFreeUsageTracker:
    @pytest.fixture
    def store(self):
        return InMemoryFreeUsageStore()

    @pytest.fixture
    def tracker(self, store, clock):
        """Create a fresh tracker for each test."""
        return FreeUsageTracker(store, daily_limit=3, clock=clock)

    @pytest.fixture
    def visitor(self):
        return ClientIdentity(ip_address="10.0.0.1", cookie_id="cookie-1")

    @pytest.mark.asyncio
    async def test_new_visitor_starts_at_zero(self, tracker, visitor, clock):
        """First sight creates a record with a full allowance."""
        snapshot = await tracker.get_current_usage(visitor)

        assert snapshot.count == 0
        assert snapshot.limit == 3
        assert snapshot.can_process is True
        assert snapshot.tier == UsageTier.FREE
        assert snapshot.resets_at == clock() + timedelta(days=1)

    @pytest.mark.asyncio
    async def test_three_extractions_then_denied(self, tracker, visitor):
        """Three extractions exhaust the daily allowance."""
        for expected in (1, 2, 3):
            snapshot = await tracker.increment_usage(visitor)
            assert snapshot.count == expected

        snapshot = await tracker.get_current_usage(visitor)
        assert snapshot.count == 3
        assert snapshot.can_process is False

    @pytest.mark.asyncio
    async def test_resets_after_a_day(self, tracker, visitor, clock):
        """After more than 24h the counter starts over."""
        for _ in range(3):
            await tracker.increment_usage(visitor)

        clock.advance(hours=23)
        assert (await tracker.get_current_usage(visitor)).can_process is False

        clock.advance(hours=1, seconds=1)
        snapshot = await tracker.get_current_usage(visitor)
        assert snapshot.count == 0
        assert snapshot.can_process is True

    @pytest.mark.asyncio
    async def test_increment_after_stale_window(self, tracker, visitor, clock):
        """An increment on a stale record counts from zero."""
        for _ in range(3):
            await tracker.increment_usage(visitor)
        clock.advance(days=2)

        snapshot = await tracker.increment_usage(visitor)
        assert snapshot.count == 1

    @pytest.mark.asyncio
    async def test_identities_are_independent(self, tracker):
        """A new cookie on the same IP is a new visitor."""
        first = ClientIdentity(ip_address="10.0.0.1", cookie_id="cookie-1")
        second = ClientIdentity(ip_address="10.0.0.1", cookie_id="cookie-2")
        for _ in range(3):
            await tracker.increment_usage(first)

        assert (await tracker.get_current_usage(second)).count == 0

    @pytest.mark.asyncio
    async def test_purge_stale(self, store, clock, visitor):
        """Records untouched past the retention period are dropped."""
        tracker = FreeUsageTracker(store, retention=timedelta(days=30), clock=clock)
        await tracker.increment_usage(visitor)

        clock.advance(days=29)
        assert await tracker.purge_stale() == 0

        clock.advance(days=2)
        assert await tracker.purge_stale() == 1
        assert await store.get(visitor.ip_address, visitor.cookie_id) is None


class TestPremiumUsageTracker:
    @pytest.fixture
    async def user(self, identity_service):
        await identity_service.add_premium_entry("a@example.com")
        return await identity_service.create_user("alice", "a@example.com", password="secret1")

    @pytest.fixture
    def tracker(self, identity_service, clock):
        return PremiumUsageTracker(identity_service, monthly_limit=1500, clock=clock)

    @pytest.mark.asyncio
    async def test_new_user_has_full_allowance(self, tracker, user):
        snapshot = await tracker.get_monthly_usage(user.id)

        assert snapshot.count == 0
        assert snapshot.limit == 1500
        assert snapshot.tier == UsageTier.PREMIUM
        assert snapshot.can_process is True

    @pytest.mark.asyncio
    async def test_increment(self, tracker, user):
        assert await tracker.increment_monthly_usage(user.id) == 1
        assert await tracker.increment_monthly_usage(user.id) == 2
        assert (await tracker.get_monthly_usage(user.id)).count == 2

    @pytest.mark.asyncio
    async def test_limit_reached(self, identity_service, clock, user):
        """The premium user is denied once the monthly limit is used."""
        tracker = PremiumUsageTracker(identity_service, monthly_limit=2, clock=clock)
        await tracker.increment_monthly_usage(user.id)
        await tracker.increment_monthly_usage(user.id)

        assert (await tracker.get_monthly_usage(user.id)).can_process is False

    @pytest.mark.asyncio
    async def test_resets_on_new_month(self, tracker, user, identity_service, clock):
        """Crossing into a new calendar month zeroes the counter."""
        await tracker.increment_monthly_usage(user.id)
        clock.now = clock.now.replace(month=4, day=1, hour=0)

        snapshot = await tracker.get_monthly_usage(user.id)
        stored = await identity_service.get_user(user.id)

        assert snapshot.count == 0
        assert stored.monthly_usage_count == 0
        assert stored.last_usage_reset == clock()

    @pytest.mark.asyncio
    async def test_exhausted_allowance_resets_before_limit_check(
        self, tracker, user, identity_service, clock
    ):
        """A user at the limit whose last reset is 40 days old can process again."""
        user.monthly_usage_count = 1500
        user.last_usage_reset = clock.now - timedelta(days=40)
        await identity_service.save_user(user)

        snapshot = await tracker.get_monthly_usage(user.id)

        assert snapshot.count == 0
        assert snapshot.can_process is True

    @pytest.mark.asyncio
    async def test_increment_applies_rollover_first(self, tracker, user, clock):
        """The first extraction of a new month counts as one, not old + 1."""
        for _ in range(5):
            await tracker.increment_monthly_usage(user.id)
        clock.now = clock.now.replace(month=4, day=2)

        assert await tracker.increment_monthly_usage(user.id) == 1

    @pytest.mark.asyncio
    async def test_unknown_user(self, tracker):
        with pytest.raises(UserNotFoundError):
            await tracker.get_monthly_usage("missing")
