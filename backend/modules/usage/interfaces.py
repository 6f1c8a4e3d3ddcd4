"""
Usage tracking module interfaces.

Other modules should depend on the tracker Protocols, not the concrete
implementations. The access gate only needs the read side; the extraction
route calls the increment side once OCR has succeeded.
"""

from datetime import datetime
from typing import Protocol, Optional, runtime_checkable

from .models import ClientIdentity, FreeUsageRecord, UsageLogEntry, UsageSnapshot


@runtime_checkable
class IFreeUsageStore(Protocol):
    """
    Storage contract for anonymous daily counters.

    Records are keyed by (ip_address, cookie_id).
    """

    async def get(self, ip_address: str, cookie_id: str) -> Optional[FreeUsageRecord]:
        ...

    async def put(self, record: FreeUsageRecord) -> FreeUsageRecord:
        ...

    async def increment(self, ip_address: str, cookie_id: str) -> FreeUsageRecord:
        """
        Atomically add one to an existing record's counter.

        Returns:
            The record after the increment
        """
        ...

    async def delete_older_than(self, cutoff: datetime) -> int:
        """
        Delete records whose last reset is before `cutoff`.

        Returns:
            Number of records removed
        """
        ...


@runtime_checkable
class IUsageLog(Protocol):
    """Append-only log of successful extractions."""

    async def record(self, entry: UsageLogEntry) -> UsageLogEntry:
        ...

    async def list_for_user(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[UsageLogEntry]:
        """Most recent first."""
        ...


@runtime_checkable
class IFreeUsageTracker(Protocol):
    """Daily quota for anonymous visitors."""

    async def get_current_usage(self, identity: ClientIdentity) -> UsageSnapshot:
        """
        Get the visitor's quota state.

        Never fails: unseen identities start at zero, stale ones are reset.
        """
        ...

    async def increment_usage(self, identity: ClientIdentity) -> UsageSnapshot:
        """
        Count one extraction.

        Unconditional: the caller checks `can_process` before doing the work.
        """
        ...


@runtime_checkable
class IPremiumUsageTracker(Protocol):
    """Monthly quota for premium users."""

    async def get_monthly_usage(self, user_id: str) -> UsageSnapshot:
        """
        Raises:
            UserNotFoundError: If the user does not exist
        """
        ...

    async def increment_monthly_usage(self, user_id: str) -> int:
        """
        Count one extraction and return the new count.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        ...
