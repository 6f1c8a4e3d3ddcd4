"""
Identity service implementation.

Owns the premium allow-list and user accounts. Account creation is only
possible for allow-listed emails; this is the single place that rule is
enforced.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from .exceptions import (
    DuplicateIdentityError,
    InvalidCredentialsError,
    InvalidSubscriptionTransitionError,
    MissingCredentialError,
    NotAllowListedError,
    UserNotFoundError,
)
from .interfaces import IIdentityRepository
from .models import User, PremiumEntry, SubscriptionStatus
from .passwords import PasswordHasher

logger = logging.getLogger(__name__)

# Allowed allow-list status changes (re-activation goes through add_premium_entry)
_ALLOWED_TRANSITIONS = {
    SubscriptionStatus.ACTIVE: {SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED},
    SubscriptionStatus.CANCELLED: set(),
    SubscriptionStatus.EXPIRED: set(),
}


class IdentityService:
    """Users and premium allow-list on top of an injected repository."""

    def __init__(
        self,
        repository: IIdentityRepository,
        hasher: Optional[PasswordHasher] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._repo = repository
        self._hasher = hasher or PasswordHasher()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # -------------------------------------------------------------------------
    # Premium allow-list
    # -------------------------------------------------------------------------

    async def is_allow_listed(self, email: str) -> bool:
        entry = await self._repo.get_premium_entry(email)
        return entry is not None and entry.is_active

    async def get_premium_entry(self, email: str) -> Optional[PremiumEntry]:
        return await self._repo.get_premium_entry(email)

    async def add_premium_entry(
        self,
        email: str,
        payment_reference: Optional[str] = None,
    ) -> PremiumEntry:
        """
        Allow-list an email after a confirmed payment.

        Re-confirming an email overwrites its entry (one entry per email),
        keeping the original creation time.
        """
        now = self._clock()
        existing = await self._repo.get_premium_entry(email)
        entry = PremiumEntry(
            email=email,
            payment_reference=payment_reference,
            subscription_status=SubscriptionStatus.ACTIVE,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        saved = await self._repo.upsert_premium_entry(entry)
        logger.info("Premium allow-list entry %s for %s", "renewed" if existing else "added", email)
        return saved

    async def update_subscription_status(
        self,
        email: str,
        status: SubscriptionStatus,
    ) -> PremiumEntry:
        entry = await self._repo.get_premium_entry(email)
        if entry is None:
            raise NotAllowListedError(email)
        if status == entry.subscription_status:
            return entry
        if status not in _ALLOWED_TRANSITIONS[entry.subscription_status]:
            raise InvalidSubscriptionTransitionError(
                entry.subscription_status.value,
                status.value,
            )
        entry.subscription_status = status
        entry.updated_at = self._clock()
        return await self._repo.upsert_premium_entry(entry)

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    async def create_user(
        self,
        username: str,
        email: str,
        password: Optional[str] = None,
        oauth_provider: Optional[str] = None,
        oauth_id: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> User:
        if not await self.is_allow_listed(email):
            raise NotAllowListedError(email)
        if password:
            password_hash = self._hasher.hash(password)
        if not password_hash and not (oauth_provider and oauth_id):
            raise MissingCredentialError()

        if await self._repo.get_user_by_username(username):
            raise DuplicateIdentityError("username", username)
        if await self._repo.get_user_by_email(email):
            raise DuplicateIdentityError("email", email)

        now = self._clock()
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            email=email,
            password_hash=password_hash,
            oauth_provider=oauth_provider,
            oauth_id=oauth_id,
            monthly_usage_count=0,
            last_usage_reset=now,
            created_at=now,
            updated_at=now,
        )
        created = await self._repo.insert_user(user)
        logger.info("Created premium account %s for %s", created.id, email)
        return created

    def hash_password(self, password: str) -> str:
        return self._hasher.hash(password)

    async def authenticate(self, username: str, password: str) -> User:
        user = await self._repo.get_user_by_username(username)
        if user is None or not user.has_password:
            raise InvalidCredentialsError()
        if not self._hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError()
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self._repo.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def save_user(self, user: User) -> User:
        user.updated_at = self._clock()
        return await self._repo.update_user(user)

    async def increment_monthly_usage(self, user_id: str) -> int:
        return await self._repo.increment_monthly_usage(user_id)

    async def find_user_by_email(self, email: str) -> Optional[User]:
        return await self._repo.get_user_by_email(email)

    async def find_user_by_oauth(self, provider: str, oauth_id: str) -> Optional[User]:
        return await self._repo.get_user_by_oauth(provider, oauth_id)

    async def username_available(self, username: str) -> bool:
        return await self._repo.get_user_by_username(username) is None
