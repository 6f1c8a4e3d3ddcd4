"""Tests for pending registration storage."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from modules.provisioning.store import SupabasePendingRegistrationStore

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class TestSupabasePendingRegistrationStore:
    @pytest.fixture
    def mock_db(self):
        return MagicMock()

    @pytest.fixture
    def store(self, mock_db):
        return SupabasePendingRegistrationStore(mock_db)

    @pytest.mark.asyncio
    async def test_get_maps_row(self, store, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [
            {
                "token": "t-1",
                "username": "alice",
                "email": "a@example.com",
                "password_hash": "hash",
                "created_at": "2024-03-15T12:00:00Z",
                "expires_at": "2024-03-15T13:00:00Z",
            }
        ]

        pending = await store.get("t-1")

        mock_db.table.assert_called_with("pending_registrations")
        assert pending.username == "alice"
        assert pending.created_at == NOW

    @pytest.mark.asyncio
    async def test_get_missing(self, store, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []
        assert await store.get("t-1") is None

    @pytest.mark.asyncio
    async def test_delete_expired_uses_inclusive_bound(self, store, mock_db):
        """A registration expiring exactly now is already expired."""
        mock_db.table.return_value.delete.return_value.lte.return_value.execute.return_value.data = [
            {"token": "t-1"}
        ]

        assert await store.delete_expired(NOW) == 1
        mock_db.table.return_value.delete.return_value.lte.assert_called_once_with(
            "expires_at", NOW.isoformat()
        )
