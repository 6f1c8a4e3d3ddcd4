"""
Premium provisioning module.

Payment comes before registration: accounts are only created for paid
emails, and a sign-up made before paying is completed once the payment
for the same email is confirmed.

Public API:
- IProvisioningService / IPendingRegistrationStore: Interfaces
- ProvisioningService: Implementation
- RegistrationRequest / RegistrationResult / PaymentConfirmation / PaymentResult
- OAuthAuthenticated / OAuthNeedsPayment: OAuth sign-in outcomes
"""

from .interfaces import IProvisioningService, IPendingRegistrationStore
from .models import (
    RegistrationState,
    RegistrationRequest,
    RegistrationResult,
    PendingRegistration,
    PaymentConfirmation,
    PaymentResult,
    OAuthAuthenticated,
    OAuthNeedsPayment,
    OAuthOutcome,
)
from .exceptions import MissingOAuthEmailError
from .store import InMemoryPendingRegistrationStore, SupabasePendingRegistrationStore
from .service import ProvisioningService

__all__ = [
    # Interfaces
    "IProvisioningService",
    "IPendingRegistrationStore",
    # Models
    "RegistrationState",
    "RegistrationRequest",
    "RegistrationResult",
    "PendingRegistration",
    "PaymentConfirmation",
    "PaymentResult",
    "OAuthAuthenticated",
    "OAuthNeedsPayment",
    "OAuthOutcome",
    # Exceptions
    "MissingOAuthEmailError",
    # Storage
    "InMemoryPendingRegistrationStore",
    "SupabasePendingRegistrationStore",
    # Service
    "ProvisioningService",
]
