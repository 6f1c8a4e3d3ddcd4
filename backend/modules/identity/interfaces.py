"""
Identity module interfaces.

Other modules should depend on IIdentityService, not the concrete
implementation. The storage Protocol is selected once at startup
(in-memory or Supabase) and injected into the service.
"""

from typing import Protocol, Optional, runtime_checkable

from .models import User, PremiumEntry, SubscriptionStatus


@runtime_checkable
class IIdentityRepository(Protocol):
    """
    Storage contract for users and the premium allow-list.

    Implementations must enforce username/email uniqueness on insert
    and provide an atomic increment for the monthly usage counter.
    """

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        ...

    async def get_user_by_username(self, username: str) -> Optional[User]:
        ...

    async def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    async def get_user_by_oauth(self, provider: str, oauth_id: str) -> Optional[User]:
        ...

    async def insert_user(self, user: User) -> User:
        """
        Insert a new user.

        Raises:
            DuplicateIdentityError: If the username or email is taken
        """
        ...

    async def update_user(self, user: User) -> User:
        ...

    async def increment_monthly_usage(self, user_id: str) -> int:
        """
        Atomically add one to the user's monthly counter.

        Returns:
            The new counter value

        Raises:
            UserNotFoundError: If the user does not exist
        """
        ...

    async def get_premium_entry(self, email: str) -> Optional[PremiumEntry]:
        ...

    async def upsert_premium_entry(self, entry: PremiumEntry) -> PremiumEntry:
        """Insert or overwrite the allow-list entry keyed by email."""
        ...


@runtime_checkable
class IIdentityService(Protocol):
    """
    Interface for identity operations.

    Used by the provisioning module (account creation, allow-listing),
    the usage module (premium counters) and the HTTP auth layer.
    """

    async def is_allow_listed(self, email: str) -> bool:
        """Whether the email has an active premium allow-list entry."""
        ...

    async def add_premium_entry(
        self,
        email: str,
        payment_reference: Optional[str] = None,
    ) -> PremiumEntry:
        """Allow-list an email as active, overwriting any previous entry."""
        ...

    async def update_subscription_status(
        self,
        email: str,
        status: SubscriptionStatus,
    ) -> PremiumEntry:
        ...

    async def create_user(
        self,
        username: str,
        email: str,
        password: Optional[str] = None,
        oauth_provider: Optional[str] = None,
        oauth_id: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> User:
        """
        Create a premium account.

        Either a raw `password` or an already computed `password_hash`
        may be given; the raw password wins if both are.

        Raises:
            NotAllowListedError: If the email has not paid
            DuplicateIdentityError: If the username or email is taken
            MissingCredentialError: If neither password nor OAuth identity is given
        """
        ...

    def hash_password(self, password: str) -> str:
        ...

    async def authenticate(self, username: str, password: str) -> User:
        """
        Verify a username/password pair.

        Raises:
            InvalidCredentialsError: On any mismatch, including OAuth-only users
        """
        ...

    async def get_user(self, user_id: str) -> User:
        """
        Raises:
            UserNotFoundError: If no user has this id
        """
        ...

    async def save_user(self, user: User) -> User:
        """Persist changes to an existing user (e.g. a monthly reset)."""
        ...

    async def increment_monthly_usage(self, user_id: str) -> int:
        """Atomically add one to the user's monthly counter."""
        ...

    async def find_user_by_email(self, email: str) -> Optional[User]:
        ...

    async def find_user_by_oauth(self, provider: str, oauth_id: str) -> Optional[User]:
        ...

    async def username_available(self, username: str) -> bool:
        ...
