"""
Usage storage implementations.

In-memory (development and tests) and Supabase (production) versions of
the free-usage store and the extraction log.
"""

import uuid
from datetime import datetime
from typing import Optional, Any

from supabase import Client

from shared.repository import BaseRepository
from .exceptions import UsageStoreError
from .models import FreeUsageRecord, UsageLogEntry, UsageTier


class InMemoryFreeUsageStore:
    """Free-usage records in a dict keyed by (ip, cookie)."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], FreeUsageRecord] = {}

    async def get(self, ip_address: str, cookie_id: str) -> Optional[FreeUsageRecord]:
        record = self._records.get((ip_address, cookie_id))
        return record.model_copy() if record else None

    async def put(self, record: FreeUsageRecord) -> FreeUsageRecord:
        self._records[(record.ip_address, record.cookie_id)] = record.model_copy()
        return record.model_copy()

    async def increment(self, ip_address: str, cookie_id: str) -> FreeUsageRecord:
        record = self._records.get((ip_address, cookie_id))
        if record is None:
            raise UsageStoreError("increment", f"no record for {ip_address}_{cookie_id}")
        record.usage_count += 1
        return record.model_copy()

    async def delete_older_than(self, cutoff: datetime) -> int:
        stale = [key for key, record in self._records.items() if record.last_reset < cutoff]
        for key in stale:
            del self._records[key]
        return len(stale)


class SupabaseFreeUsageStore(BaseRepository[FreeUsageRecord]):
    """
    Free-usage records in the `free_usage` table.

    The increment runs server-side through `increment_free_usage` so
    concurrent requests from one visitor cannot lose updates.
    """

    TABLE = "free_usage"

    def __init__(self, db: Client) -> None:
        super().__init__(db)

    async def get(self, ip_address: str, cookie_id: str) -> Optional[FreeUsageRecord]:
        result = (
            self._db.table(self.TABLE)
            .select("*")
            .eq("ip_address", ip_address)
            .eq("cookie_id", cookie_id)
            .execute()
        )
        if not result.data:
            return None
        return self._map_to_record(result.data[0])

    async def put(self, record: FreeUsageRecord) -> FreeUsageRecord:
        result = (
            self._db.table(self.TABLE)
            .upsert(
                {
                    "ip_address": record.ip_address,
                    "cookie_id": record.cookie_id,
                    "usage_count": record.usage_count,
                    "last_reset": self._format_timestamp(record.last_reset),
                },
                on_conflict="ip_address,cookie_id",
            )
            .execute()
        )
        return self._map_to_record(result.data[0])

    async def increment(self, ip_address: str, cookie_id: str) -> FreeUsageRecord:
        result = self._db.rpc(
            "increment_free_usage",
            {"p_ip_address": ip_address, "p_cookie_id": cookie_id},
        ).execute()
        rows = result.data
        if isinstance(rows, dict):
            rows = [rows]
        if not rows:
            raise UsageStoreError("increment", f"no record for {ip_address}_{cookie_id}")
        return self._map_to_record(rows[0])

    async def delete_older_than(self, cutoff: datetime) -> int:
        result = (
            self._db.table(self.TABLE)
            .delete()
            .lt("last_reset", self._format_timestamp(cutoff))
            .execute()
        )
        return len(result.data or [])

    def _map_to_record(self, row: dict[str, Any]) -> FreeUsageRecord:
        return FreeUsageRecord(
            ip_address=row["ip_address"],
            cookie_id=row["cookie_id"],
            usage_count=row.get("usage_count", 0),
            last_reset=self._parse_timestamp(row["last_reset"]),
        )


class InMemoryUsageLog:
    """Extraction log kept newest-first in a list."""

    def __init__(self) -> None:
        self._entries: list[UsageLogEntry] = []

    async def record(self, entry: UsageLogEntry) -> UsageLogEntry:
        saved = entry.model_copy(update={"id": entry.id or str(uuid.uuid4())})
        self._entries.insert(0, saved)
        return saved.model_copy()

    async def list_for_user(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[UsageLogEntry]:
        entries = [e for e in self._entries if e.user_id == user_id]
        return [e.model_copy() for e in entries[offset : offset + limit]]


class SupabaseUsageLog(BaseRepository[UsageLogEntry]):
    """Extraction log in the `usage_logs` table."""

    TABLE = "usage_logs"

    def __init__(self, db: Client) -> None:
        super().__init__(db)

    async def record(self, entry: UsageLogEntry) -> UsageLogEntry:
        entry_id = entry.id or str(uuid.uuid4())
        result = self._db.table(self.TABLE).insert({
            "id": entry_id,
            "tier": entry.tier.value,
            "user_id": entry.user_id,
            "ip_address": entry.ip_address,
            "cookie_id": entry.cookie_id,
            "extracted_words": entry.extracted_words,
            "confidence": entry.confidence,
            "processed_at": self._format_timestamp(entry.processed_at),
        }).execute()
        if not result.data:
            return entry.model_copy(update={"id": entry_id})
        return self._map_to_entry(result.data[0])

    async def list_for_user(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[UsageLogEntry]:
        result = (
            self._db.table(self.TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("processed_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [self._map_to_entry(row) for row in result.data]

    def _map_to_entry(self, row: dict[str, Any]) -> UsageLogEntry:
        return UsageLogEntry(
            id=str(row["id"]),
            tier=UsageTier(row["tier"]),
            user_id=row.get("user_id"),
            ip_address=row.get("ip_address"),
            cookie_id=row.get("cookie_id"),
            extracted_words=row.get("extracted_words", 0),
            confidence=row.get("confidence", 0),
            processed_at=self._parse_timestamp(row["processed_at"]),
        )
