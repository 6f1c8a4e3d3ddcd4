"""Tests for the access gate."""

import pytest

from modules.access.exceptions import BackendUnavailableError, QuotaExceededError
from modules.access.models import AnonymousRequester, AuthenticatedRequester, Verdict
from modules.access.service import AccessGate
from modules.usage.models import ClientIdentity, UsageTier
from modules.usage.service import FreeUsageTracker, PremiumUsageTracker
from modules.usage.store import InMemoryFreeUsageStore


@pytest.fixture
def free_tracker(clock):
    return FreeUsageTracker(InMemoryFreeUsageStore(), daily_limit=3, clock=clock)


@pytest.fixture
def premium_tracker(identity_service, clock):
    return PremiumUsageTracker(identity_service, monthly_limit=2, clock=clock)


@pytest.fixture
def gate(free_tracker, premium_tracker):
    """Create a fresh gate for each test."""
    return AccessGate(free_tracker, premium_tracker, upgrade_limit=1500)


@pytest.fixture
def visitor():
    return AnonymousRequester(identity=ClientIdentity(ip_address="10.0.0.1", cookie_id="c-1"))


@pytest.fixture
async def premium_user(identity_service):
    await identity_service.add_premium_entry("a@example.com")
    return await identity_service.create_user("alice", "a@example.com", password="secret1")


class TestAnonymousAccess:
    @pytest.mark.asyncio
    async def test_admits_under_limit(self, gate, visitor):
        decision = await gate.evaluate(visitor, backend_available=True)

        assert decision.admitted
        assert decision.tier == UsageTier.FREE
        assert decision.usage.count == 0

    @pytest.mark.asyncio
    async def test_fourth_request_denied(self, gate, visitor, free_tracker):
        """After three extractions the visitor is sent to the upgrade path."""
        for _ in range(3):
            decision = await gate.evaluate(visitor, backend_available=True)
            assert decision.admitted
            await free_tracker.increment_usage(visitor.identity)

        decision = await gate.evaluate(visitor, backend_available=True)

        assert decision.verdict == Verdict.DENY_DAILY_LIMIT
        assert decision.upgrade_limit == 1500

    @pytest.mark.asyncio
    async def test_evaluate_does_not_count(self, gate, visitor):
        """Checking access never consumes quota."""
        for _ in range(5):
            await gate.evaluate(visitor, backend_available=True)

        decision = await gate.evaluate(visitor, backend_available=True)
        assert decision.usage.count == 0


class TestPremiumAccess:
    @pytest.mark.asyncio
    async def test_admits_premium_user(self, gate, premium_user):
        decision = await gate.evaluate(
            AuthenticatedRequester(user_id=premium_user.id), backend_available=True
        )

        assert decision.admitted
        assert decision.tier == UsageTier.PREMIUM

    @pytest.mark.asyncio
    async def test_monthly_limit(self, gate, premium_user, premium_tracker):
        for _ in range(2):
            await premium_tracker.increment_monthly_usage(premium_user.id)

        decision = await gate.evaluate(
            AuthenticatedRequester(user_id=premium_user.id), backend_available=True
        )

        assert decision.verdict == Verdict.DENY_MONTHLY_LIMIT
        assert decision.upgrade_limit is None

    @pytest.mark.asyncio
    async def test_premium_user_ignores_free_counter(self, gate, premium_user, free_tracker):
        """Signed-in users are never counted against the anonymous quota."""
        identity = ClientIdentity(ip_address="10.0.0.1", cookie_id="c-1")
        for _ in range(3):
            await free_tracker.increment_usage(identity)

        decision = await gate.evaluate(
            AuthenticatedRequester(user_id=premium_user.id), backend_available=True
        )
        assert decision.admitted


class TestBackendAvailability:
    @pytest.mark.asyncio
    async def test_no_backend_wins(self, gate, visitor, free_tracker):
        """A missing backend is reported even when the quota is also used up."""
        for _ in range(3):
            await free_tracker.increment_usage(visitor.identity)

        decision = await gate.evaluate(visitor, backend_available=False)

        assert decision.verdict == Verdict.DENY_NO_BACKEND
        assert decision.usage is None

    @pytest.mark.asyncio
    async def test_unknown_requester(self, gate):
        with pytest.raises(TypeError):
            await gate.evaluate(object(), backend_available=True)


class TestRaiseForVerdict:
    @pytest.mark.asyncio
    async def test_admit_does_not_raise(self, gate, visitor):
        decision = await gate.evaluate(visitor, backend_available=True)
        decision.raise_for_verdict()

    @pytest.mark.asyncio
    async def test_daily_limit_message(self, gate, visitor, free_tracker):
        for _ in range(3):
            await free_tracker.increment_usage(visitor.identity)
        decision = await gate.evaluate(visitor, backend_available=True)

        with pytest.raises(QuotaExceededError) as exc_info:
            decision.raise_for_verdict()

        assert exc_info.value.message == (
            "Daily limit of 3 free extractions exceeded. "
            "Purchase premium for 1500 monthly extractions."
        )
        assert exc_info.value.details["requires_payment"] is True

    @pytest.mark.asyncio
    async def test_monthly_limit_message(self, gate, premium_user, premium_tracker):
        for _ in range(2):
            await premium_tracker.increment_monthly_usage(premium_user.id)
        decision = await gate.evaluate(
            AuthenticatedRequester(user_id=premium_user.id), backend_available=True
        )

        with pytest.raises(QuotaExceededError) as exc_info:
            decision.raise_for_verdict()

        assert exc_info.value.message == "Monthly limit of 2 extractions exceeded"
        assert "requires_payment" not in exc_info.value.details

    @pytest.mark.asyncio
    async def test_no_backend(self, gate, visitor):
        decision = await gate.evaluate(visitor, backend_available=False)
        with pytest.raises(BackendUnavailableError):
            decision.raise_for_verdict()
