"""Tests for identity storage."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from modules.identity.exceptions import DuplicateIdentityError, UserNotFoundError
from modules.identity.models import User, PremiumEntry
from modules.identity.repository import (
    InMemoryIdentityRepository,
    SupabaseIdentityRepository,
)


def make_user(**overrides) -> User:
    data = {
        "id": "user-1",
        "username": "alice",
        "email": "a@example.com",
        "password_hash": "hash",
    }
    data.update(overrides)
    return User(**data)


def user_row(**overrides) -> dict:
    row = {
        "id": "user-1",
        "username": "alice",
        "email": "a@example.com",
        "password_hash": "hash",
        "oauth_provider": None,
        "oauth_id": None,
        "monthly_usage_count": 4,
        "last_usage_reset": "2024-03-01T00:00:00Z",
        "created_at": "2024-03-01T00:00:00Z",
        "updated_at": "2024-03-02T00:00:00Z",
    }
    row.update(overrides)
    return row


class TestInMemoryIdentityRepository:
    @pytest.fixture
    def repo(self):
        return InMemoryIdentityRepository()

    @pytest.mark.asyncio
    async def test_returns_copies(self, repo):
        """Mutating a returned user must not change the stored one."""
        await repo.insert_user(make_user())
        fetched = await repo.get_user_by_id("user-1")
        fetched.monthly_usage_count = 99

        assert (await repo.get_user_by_id("user-1")).monthly_usage_count == 0

    @pytest.mark.asyncio
    async def test_insert_rejects_duplicates(self, repo):
        await repo.insert_user(make_user())
        with pytest.raises(DuplicateIdentityError):
            await repo.insert_user(make_user(id="user-2", email="b@example.com"))
        with pytest.raises(DuplicateIdentityError):
            await repo.insert_user(make_user(id="user-2", username="bob"))

    @pytest.mark.asyncio
    async def test_update_missing_user(self, repo):
        with pytest.raises(UserNotFoundError):
            await repo.update_user(make_user())

    @pytest.mark.asyncio
    async def test_increment_missing_user(self, repo):
        with pytest.raises(UserNotFoundError):
            await repo.increment_monthly_usage("missing")


class TestSupabaseIdentityRepository:
    @pytest.fixture
    def mock_db(self):
        return MagicMock()

    @pytest.fixture
    def repo(self, mock_db):
        return SupabaseIdentityRepository(mock_db)

    @pytest.mark.asyncio
    async def test_get_user_by_id_maps_row(self, repo, mock_db):
        """Rows should be mapped to User models with parsed timestamps."""
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [
            user_row()
        ]

        user = await repo.get_user_by_id("user-1")

        mock_db.table.assert_called_with("users")
        assert user.username == "alice"
        assert user.monthly_usage_count == 4
        assert user.last_usage_reset == datetime(2024, 3, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_get_user_not_found(self, repo, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []
        assert await repo.get_user_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_insert_translates_unique_violation(self, repo, mock_db):
        """A unique violation from Postgres becomes DuplicateIdentityError."""
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []
        mock_db.table.return_value.insert.return_value.execute.side_effect = APIError(
            {"message": "duplicate key", "code": "23505", "details": None, "hint": None}
        )

        with pytest.raises(DuplicateIdentityError):
            await repo.insert_user(make_user())

    @pytest.mark.asyncio
    async def test_increment_uses_rpc(self, repo, mock_db):
        """The monthly counter is incremented server-side."""
        mock_db.rpc.return_value.execute.return_value.data = 5

        assert await repo.increment_monthly_usage("user-1") == 5
        mock_db.rpc.assert_called_once_with("increment_monthly_usage", {"p_user_id": "user-1"})

    @pytest.mark.asyncio
    async def test_increment_missing_user(self, repo, mock_db):
        mock_db.rpc.return_value.execute.return_value.data = None
        with pytest.raises(UserNotFoundError):
            await repo.increment_monthly_usage("missing")

    @pytest.mark.asyncio
    async def test_upsert_premium_entry(self, repo, mock_db):
        """Allow-list entries upsert on email and keep the PayPal reference."""
        mock_db.table.return_value.upsert.return_value.execute.return_value.data = [
            {
                "email": "a@example.com",
                "paypal_order_id": "ORDER-1",
                "subscription_status": "active",
                "created_at": "2024-03-01T00:00:00Z",
                "updated_at": "2024-03-01T00:00:00Z",
            }
        ]

        entry = await repo.upsert_premium_entry(
            PremiumEntry(email="a@example.com", payment_reference="ORDER-1")
        )

        _, kwargs = mock_db.table.return_value.upsert.call_args
        assert kwargs["on_conflict"] == "email"
        assert entry.payment_reference == "ORDER-1"
        assert entry.is_active
