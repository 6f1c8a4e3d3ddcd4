"""
Provisioning module interfaces.
"""

from datetime import datetime
from typing import Protocol, Optional, runtime_checkable

from modules.identity.models import OAuthProfile
from .models import (
    OAuthOutcome,
    PaymentConfirmation,
    PaymentResult,
    PendingRegistration,
    RegistrationRequest,
    RegistrationResult,
)


@runtime_checkable
class IPendingRegistrationStore(Protocol):
    """Storage for registrations waiting on a payment, keyed by token."""

    async def save(self, pending: PendingRegistration) -> PendingRegistration:
        """Insert or replace the registration held by `pending.token`."""
        ...

    async def get(self, token: str) -> Optional[PendingRegistration]:
        ...

    async def delete(self, token: str) -> None:
        ...

    async def delete_expired(self, now: datetime) -> int:
        ...


@runtime_checkable
class IProvisioningService(Protocol):
    """Premium account creation with payment before registration."""

    async def register(
        self,
        request: RegistrationRequest,
        provisioning_token: Optional[str] = None,
    ) -> RegistrationResult:
        """
        Create the account, or park the request until payment.

        Raises:
            DuplicateIdentityError: If the email is allow-listed and the
                username or email is taken
        """
        ...

    async def confirm_payment(
        self,
        confirmation: PaymentConfirmation,
        provisioning_token: Optional[str] = None,
    ) -> PaymentResult:
        """
        Record a payment, allow-list the email and claim a pending registration.

        Raises:
            PaymentFailedError: If the gateway rejected the payment
            InvalidAmountError: If the amount is not the premium price
            DuplicatePaymentError: If the order is in flight or paid by another email
        """
        ...

    async def oauth_sign_in(self, profile: OAuthProfile) -> OAuthOutcome:
        """
        Resolve an OAuth profile to a premium user or a payment request.

        Raises:
            MissingOAuthEmailError: If the profile carries no email
        """
        ...

    async def purge_expired(self) -> int:
        ...
