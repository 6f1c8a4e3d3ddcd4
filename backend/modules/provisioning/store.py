"""
Pending registration storage.
"""

from datetime import datetime
from typing import Optional, Any

from supabase import Client

from shared.repository import BaseRepository
from .models import PendingRegistration


class InMemoryPendingRegistrationStore:
    def __init__(self) -> None:
        self._pending: dict[str, PendingRegistration] = {}

    async def save(self, pending: PendingRegistration) -> PendingRegistration:
        self._pending[pending.token] = pending.model_copy()
        return pending.model_copy()

    async def get(self, token: str) -> Optional[PendingRegistration]:
        pending = self._pending.get(token)
        return pending.model_copy() if pending else None

    async def delete(self, token: str) -> None:
        self._pending.pop(token, None)

    async def delete_expired(self, now: datetime) -> int:
        expired = [token for token, p in self._pending.items() if p.is_expired(now)]
        for token in expired:
            del self._pending[token]
        return len(expired)


class SupabasePendingRegistrationStore(BaseRepository[PendingRegistration]):
    """Pending registrations in the `pending_registrations` table."""

    TABLE = "pending_registrations"

    def __init__(self, db: Client) -> None:
        super().__init__(db)

    async def save(self, pending: PendingRegistration) -> PendingRegistration:
        result = (
            self._db.table(self.TABLE)
            .upsert(
                {
                    "token": pending.token,
                    "username": pending.username,
                    "email": pending.email,
                    "password_hash": pending.password_hash,
                    "created_at": self._format_timestamp(pending.created_at),
                    "expires_at": self._format_timestamp(pending.expires_at),
                },
                on_conflict="token",
            )
            .execute()
        )
        return self._map_to_pending(result.data[0])

    async def get(self, token: str) -> Optional[PendingRegistration]:
        result = self._db.table(self.TABLE).select("*").eq("token", token).execute()
        if not result.data:
            return None
        return self._map_to_pending(result.data[0])

    async def delete(self, token: str) -> None:
        self._db.table(self.TABLE).delete().eq("token", token).execute()

    async def delete_expired(self, now: datetime) -> int:
        result = (
            self._db.table(self.TABLE)
            .delete()
            .lte("expires_at", self._format_timestamp(now))
            .execute()
        )
        return len(result.data or [])

    def _map_to_pending(self, row: dict[str, Any]) -> PendingRegistration:
        return PendingRegistration(
            token=row["token"],
            username=row["username"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=self._parse_timestamp(row["created_at"]),
            expires_at=self._parse_timestamp(row["expires_at"]),
        )
