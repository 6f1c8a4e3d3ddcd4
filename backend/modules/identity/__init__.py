"""
Identity module.

Holds premium user accounts and the premium allow-list (emails that have
paid and may therefore own an account).

Public API:
- IIdentityService / IIdentityRepository: Interfaces
- User, PremiumEntry, OAuthProfile: Models
- Identity exceptions: DuplicateIdentityError, InvalidCredentialsError, etc.
"""

from .interfaces import IIdentityService, IIdentityRepository
from .models import (
    User,
    PremiumEntry,
    SubscriptionStatus,
    OAuthProfile,
)
from .exceptions import (
    DuplicateIdentityError,
    InvalidCredentialsError,
    UserNotFoundError,
    NotAllowListedError,
    MissingCredentialError,
    InvalidSubscriptionTransitionError,
    OAuthError,
)
from .passwords import PasswordHasher
from .repository import InMemoryIdentityRepository, SupabaseIdentityRepository
from .service import IdentityService

__all__ = [
    # Interfaces
    "IIdentityService",
    "IIdentityRepository",
    # Models
    "User",
    "PremiumEntry",
    "SubscriptionStatus",
    "OAuthProfile",
    # Exceptions
    "DuplicateIdentityError",
    "InvalidCredentialsError",
    "UserNotFoundError",
    "NotAllowListedError",
    "MissingCredentialError",
    "InvalidSubscriptionTransitionError",
    "OAuthError",
    # Implementations
    "PasswordHasher",
    "InMemoryIdentityRepository",
    "SupabaseIdentityRepository",
    "IdentityService",
]
