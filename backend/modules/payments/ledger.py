"""
Payment ledger implementations.
"""

import uuid
from decimal import Decimal
from typing import Any, Optional

from postgrest.exceptions import APIError
from supabase import Client

from shared.repository import BaseRepository
from .exceptions import DuplicatePaymentError
from .models import PaymentRecord, PaymentStatus

UNIQUE_VIOLATION = "23505"


class InMemoryPaymentLedger:
    """Payment records kept newest-first in a list."""

    def __init__(self) -> None:
        self._records: list[PaymentRecord] = []

    async def save(self, record: PaymentRecord) -> PaymentRecord:
        if record.order_id and any(
            r.order_id == record.order_id and r.id != record.id for r in self._records
        ):
            raise DuplicatePaymentError(record.order_id)

        saved = record.model_copy(update={"id": record.id or str(uuid.uuid4())})
        for i, existing in enumerate(self._records):
            if existing.id == saved.id:
                self._records[i] = saved
                break
        else:
            self._records.insert(0, saved)
        return saved.model_copy()

    async def get_by_order_id(self, order_id: str) -> Optional[PaymentRecord]:
        for r in self._records:
            if r.order_id == order_id:
                return r.model_copy()
        return None

    async def list_for_email(self, email: str) -> list[PaymentRecord]:
        return [r.model_copy() for r in self._records if r.email == email]


class SupabasePaymentLedger(BaseRepository[PaymentRecord]):
    """Payment records in the `payments` table."""

    TABLE = "payments"

    def __init__(self, db: Client) -> None:
        super().__init__(db)

    async def save(self, record: PaymentRecord) -> PaymentRecord:
        try:
            if record.id is None:
                record = record.model_copy(update={"id": str(uuid.uuid4())})
                result = self._db.table(self.TABLE).insert(self._map_from_record(record)).execute()
            else:
                result = (
                    self._db.table(self.TABLE)
                    .update(self._map_from_record(record))
                    .eq("id", record.id)
                    .execute()
                )
        except APIError as e:
            if e.code == UNIQUE_VIOLATION and record.order_id:
                raise DuplicatePaymentError(record.order_id) from e
            raise
        if not result.data:
            return record
        return self._map_to_record(result.data[0])

    async def get_by_order_id(self, order_id: str) -> Optional[PaymentRecord]:
        result = (
            self._db.table(self.TABLE)
            .select("*")
            .eq("order_id", order_id)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return self._map_to_record(result.data[0])

    async def list_for_email(self, email: str) -> list[PaymentRecord]:
        result = (
            self._db.table(self.TABLE)
            .select("*")
            .eq("email", email)
            .order("created_at", desc=True)
            .execute()
        )
        return [self._map_to_record(row) for row in result.data]

    def _map_from_record(self, record: PaymentRecord) -> dict[str, Any]:
        return {
            "id": record.id,
            "email": record.email,
            "order_id": record.order_id,
            "amount": str(record.amount),
            "currency": record.currency,
            "reference": record.reference,
            "status": record.status.value,
            "error": record.error,
            "created_at": self._format_timestamp(record.created_at),
            "completed_at": self._format_timestamp(record.completed_at),
        }

    def _map_to_record(self, row: dict[str, Any]) -> PaymentRecord:
        return PaymentRecord(
            id=str(row["id"]),
            email=row["email"],
            order_id=row.get("order_id"),
            amount=Decimal(str(row["amount"])),
            currency=row.get("currency", "USD"),
            reference=row.get("reference"),
            status=PaymentStatus(row["status"]),
            error=row.get("error"),
            created_at=self._parse_timestamp(row["created_at"]),
            completed_at=self._parse_timestamp(row.get("completed_at")),
        )
