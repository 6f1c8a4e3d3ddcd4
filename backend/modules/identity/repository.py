"""
Identity storage implementations.

Both satisfy IIdentityRepository:
- InMemoryIdentityRepository: development and tests
- SupabaseIdentityRepository: production (tables `users`, `premium_users`)
"""

from datetime import datetime, timezone
from typing import Optional, Any

from postgrest.exceptions import APIError
from supabase import Client

from shared.repository import BaseRepository
from .exceptions import DuplicateIdentityError, UserNotFoundError
from .models import User, PremiumEntry, SubscriptionStatus

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


class InMemoryIdentityRepository:
    """
    Dictionary-backed identity storage.

    Models are copied on the way in and out so callers never hold a
    reference to the stored object.
    """

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._premium: dict[str, PremiumEntry] = {}

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return self._find(lambda u: u.username == username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return self._find(lambda u: u.email == email)

    async def get_user_by_oauth(self, provider: str, oauth_id: str) -> Optional[User]:
        return self._find(
            lambda u: u.oauth_provider == provider and u.oauth_id == oauth_id
        )

    async def insert_user(self, user: User) -> User:
        for existing in self._users.values():
            if existing.username == user.username:
                raise DuplicateIdentityError("username", user.username)
            if existing.email == user.email:
                raise DuplicateIdentityError("email", user.email)
        self._users[user.id] = user.model_copy()
        return user.model_copy()

    async def update_user(self, user: User) -> User:
        if user.id not in self._users:
            raise UserNotFoundError(user.id)
        self._users[user.id] = user.model_copy()
        return user.model_copy()

    async def increment_monthly_usage(self, user_id: str) -> int:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        user.monthly_usage_count += 1
        user.updated_at = datetime.now(timezone.utc)
        return user.monthly_usage_count

    async def get_premium_entry(self, email: str) -> Optional[PremiumEntry]:
        entry = self._premium.get(email)
        return entry.model_copy() if entry else None

    async def upsert_premium_entry(self, entry: PremiumEntry) -> PremiumEntry:
        self._premium[entry.email] = entry.model_copy()
        return entry.model_copy()

    def _find(self, predicate) -> Optional[User]:
        for user in self._users.values():
            if predicate(user):
                return user.model_copy()
        return None


class SupabaseIdentityRepository(BaseRepository[User]):
    """
    Identity storage backed by Supabase.

    Uniqueness is enforced by the database; a unique violation on insert
    is translated into DuplicateIdentityError. The monthly counter is
    incremented server-side by the `increment_monthly_usage` function.
    """

    USERS_TABLE = "users"
    PREMIUM_TABLE = "premium_users"

    def __init__(self, db: Client) -> None:
        super().__init__(db)

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self._select_user("id", user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return self._select_user("username", username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return self._select_user("email", email)

    async def get_user_by_oauth(self, provider: str, oauth_id: str) -> Optional[User]:
        result = (
            self._db.table(self.USERS_TABLE)
            .select("*")
            .eq("oauth_provider", provider)
            .eq("oauth_id", oauth_id)
            .execute()
        )
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    async def insert_user(self, user: User) -> User:
        # Pre-check gives a precise field; the constraint still guards races
        if await self.get_user_by_username(user.username):
            raise DuplicateIdentityError("username", user.username)
        if await self.get_user_by_email(user.email):
            raise DuplicateIdentityError("email", user.email)

        try:
            result = self._db.table(self.USERS_TABLE).insert(self._map_from_user(user)).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateIdentityError("username or email", user.email) from e
            raise
        return self._map_to_user(result.data[0])

    async def update_user(self, user: User) -> User:
        result = (
            self._db.table(self.USERS_TABLE)
            .update(self._map_from_user(user))
            .eq("id", user.id)
            .execute()
        )
        if not result.data:
            raise UserNotFoundError(user.id)
        return self._map_to_user(result.data[0])

    async def increment_monthly_usage(self, user_id: str) -> int:
        result = self._db.rpc(
            "increment_monthly_usage",
            {"p_user_id": user_id},
        ).execute()
        if result.data is None:
            raise UserNotFoundError(user_id)
        return int(result.data)

    async def get_premium_entry(self, email: str) -> Optional[PremiumEntry]:
        result = (
            self._db.table(self.PREMIUM_TABLE)
            .select("*")
            .eq("email", email)
            .execute()
        )
        if not result.data:
            return None
        return self._map_to_premium_entry(result.data[0])

    async def upsert_premium_entry(self, entry: PremiumEntry) -> PremiumEntry:
        result = (
            self._db.table(self.PREMIUM_TABLE)
            .upsert(
                {
                    "email": entry.email,
                    "paypal_order_id": entry.payment_reference,
                    "subscription_status": entry.subscription_status.value,
                    "created_at": self._format_timestamp(entry.created_at),
                    "updated_at": self._format_timestamp(entry.updated_at),
                },
                on_conflict="email",
            )
            .execute()
        )
        return self._map_to_premium_entry(result.data[0])

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    def _select_user(self, column: str, value: str) -> Optional[User]:
        result = self._db.table(self.USERS_TABLE).select("*").eq(column, value).execute()
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    def _map_to_user(self, row: dict[str, Any]) -> User:
        return User(
            id=str(row["id"]),
            username=row["username"],
            email=row["email"],
            password_hash=row.get("password_hash"),
            oauth_provider=row.get("oauth_provider"),
            oauth_id=row.get("oauth_id"),
            monthly_usage_count=row.get("monthly_usage_count", 0),
            last_usage_reset=self._parse_timestamp(row["last_usage_reset"]),
            created_at=self._parse_timestamp(row["created_at"]),
            updated_at=self._parse_timestamp(row["updated_at"]),
        )

    def _map_from_user(self, user: User) -> dict[str, Any]:
        return {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "password_hash": user.password_hash,
            "oauth_provider": user.oauth_provider,
            "oauth_id": user.oauth_id,
            "monthly_usage_count": user.monthly_usage_count,
            "last_usage_reset": self._format_timestamp(user.last_usage_reset),
            "created_at": self._format_timestamp(user.created_at),
            "updated_at": self._format_timestamp(user.updated_at),
        }

    def _map_to_premium_entry(self, row: dict[str, Any]) -> PremiumEntry:
        return PremiumEntry(
            email=row["email"],
            payment_reference=row.get("paypal_order_id"),
            subscription_status=SubscriptionStatus(row.get("subscription_status", "active")),
            created_at=self._parse_timestamp(row["created_at"]),
            updated_at=self._parse_timestamp(row["updated_at"]),
        )
