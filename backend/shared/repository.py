"""
Base repository class for Supabase-backed storage.

Every Supabase store in the modules shares the same shape: a client handle,
row <-> model mapping, and timestamp (de)serialization. The in-memory
counterparts implement the same Protocols without inheriting from this.
"""

from datetime import datetime
from typing import TypeVar, Generic, Optional, Any
from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all Supabase repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - ISO-8601 timestamp helpers

    Example:
        class SupabaseIdentityRepository(BaseRepository[User]):
            async def get_user_by_id(self, user_id: str) -> Optional[User]:
                result = self._db.table("users").select("*").eq("id", user_id).execute()
                if not result.data:
                    return None
                return self._map_to_user(result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    @staticmethod
    def _parse_timestamp(value: Any) -> Optional[datetime]:
        """Parse a timestamp column returned by PostgREST."""
        if value is None or isinstance(value, datetime):
            return value
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))

    @staticmethod
    def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value is not None else None
