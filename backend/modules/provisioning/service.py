"""
Provisioning service implementation.

Premium accounts can only exist for emails on the allow-list, and an
email only gets on the allow-list through a confirmed payment. A visitor
who signs up before paying gets a provisioning token; the sign-up is
completed automatically when the payment for the same email arrives with
that token.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Optional

from shared.exceptions import PictoTextError
from modules.identity.interfaces import IIdentityService
from modules.identity.models import OAuthProfile
from modules.payments.exceptions import (
    DuplicatePaymentError,
    InvalidAmountError,
    PaymentFailedError,
)
from modules.payments.interfaces import IPaymentGateway, IPaymentLedger
from modules.payments.models import PaymentReceipt, PaymentRecord, PaymentStatus
from .exceptions import MissingOAuthEmailError
from .interfaces import IPendingRegistrationStore
from .models import (
    OAuthAuthenticated,
    OAuthNeedsPayment,
    OAuthOutcome,
    PaymentConfirmation,
    PaymentResult,
    PendingRegistration,
    RegistrationRequest,
    RegistrationResult,
    RegistrationState,
)

logger = logging.getLogger(__name__)

DEFAULT_PENDING_TTL = timedelta(minutes=60)

MESSAGE_ACCOUNT_CREATED = "Payment successful and account created! You can now sign in."
MESSAGE_RETRY_REGISTRATION = "Payment successful! Please try registering again."
MESSAGE_PAYMENT_ONLY = "Payment successful! You can now create your account."


class ProvisioningService:
    """Payment-before-registration flow for premium accounts."""

    def __init__(
        self,
        identity: IIdentityService,
        gateway: IPaymentGateway,
        ledger: IPaymentLedger,
        pending_store: IPendingRegistrationStore,
        pending_ttl: timedelta = DEFAULT_PENDING_TTL,
        premium_price: Optional[Decimal] = None,
        premium_currency: str = "USD",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._identity = identity
        self._gateway = gateway
        self._ledger = ledger
        self._pending = pending_store
        self._pending_ttl = pending_ttl
        self._premium_price = premium_price
        self._premium_currency = premium_currency
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    async def register(
        self,
        request: RegistrationRequest,
        provisioning_token: Optional[str] = None,
    ) -> RegistrationResult:
        email = str(request.email)

        # Uniqueness is only checked once the email is paid for; a clash found
        # at payment time leaves the visitor allow-listed to retry
        if await self._identity.is_allow_listed(email):
            user = await self._identity.create_user(
                request.username,
                email,
                password=request.password,
            )
            return RegistrationResult(
                state=RegistrationState.REGISTERED,
                payment_required=False,
                email=email,
                user=user,
            )

        now = self._clock()
        token = provisioning_token or secrets.token_urlsafe(32)
        await self._pending.save(
            PendingRegistration(
                token=token,
                username=request.username,
                email=email,
                password_hash=self._identity.hash_password(request.password),
                created_at=now,
                expires_at=now + self._pending_ttl,
            )
        )
        logger.info("Registration for %s is waiting on payment", email)
        return RegistrationResult(
            state=RegistrationState.PENDING_PAYMENT,
            payment_required=True,
            email=email,
            provisioning_token=token,
        )

    # -------------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------------

    async def confirm_payment(
        self,
        confirmation: PaymentConfirmation,
        provisioning_token: Optional[str] = None,
    ) -> PaymentResult:
        email = str(confirmation.email)
        amount = confirmation.amount_value
        if self._premium_price is not None and (
            amount != self._premium_price or confirmation.currency != self._premium_currency
        ):
            raise InvalidAmountError(
                amount,
                f"Premium costs {self._premium_price} {self._premium_currency}",
            )

        record = await self._open_payment(email, amount, confirmation)
        if record.status == PaymentStatus.COMPLETED:
            # Replayed order: the capture already happened, finish the rest
            logger.info("Order %s was already captured for %s", record.order_id, email)
            receipt = PaymentReceipt(
                reference=record.reference or record.order_id,
                email=email,
                amount=record.amount,
                currency=record.currency,
                captured_at=record.completed_at or record.created_at,
            )
        else:
            receipt = await self._capture(record)

        await self._identity.add_premium_entry(email, receipt.reference)
        logger.info("Payment %s confirmed for %s", receipt.reference, email)

        pending = await self._load_pending(provisioning_token)
        if pending is None or pending.email != email:
            return PaymentResult(
                message=MESSAGE_PAYMENT_ONLY,
                payment_reference=receipt.reference,
            )

        try:
            user = await self._identity.create_user(
                pending.username,
                pending.email,
                password_hash=pending.password_hash,
            )
        except PictoTextError as e:
            # The allow-list entry stays; the visitor can register normally
            logger.warning("Account creation after payment failed for %s: %s", email, e.message)
            return PaymentResult(
                message=MESSAGE_RETRY_REGISTRATION,
                payment_reference=receipt.reference,
                account_created=False,
                error=e.message,
            )

        await self._pending.delete(pending.token)
        logger.info("Account %s created after payment for %s", user.id, email)
        return PaymentResult(
            message=MESSAGE_ACCOUNT_CREATED,
            payment_reference=receipt.reference,
            account_created=True,
            user=user,
        )

    # -------------------------------------------------------------------------
    # OAuth
    # -------------------------------------------------------------------------

    async def oauth_sign_in(self, profile: OAuthProfile) -> OAuthOutcome:
        if not profile.email:
            raise MissingOAuthEmailError(profile.provider)
        email = profile.email

        # Existing accounts keep signing in whatever their allow-list status;
        # the provider id wins over the email, which can change at the provider
        user = await self._identity.find_user_by_oauth(profile.provider, profile.provider_id)
        if user is None:
            user = await self._identity.find_user_by_email(email)
        if user is not None:
            return OAuthAuthenticated(user=user)

        if not await self._identity.is_allow_listed(email):
            logger.info("OAuth sign-in for %s deferred until payment", email)
            return OAuthNeedsPayment(email=email)

        username = await self._available_username(self._base_username(profile))
        user = await self._identity.create_user(
            username,
            email,
            oauth_provider=profile.provider,
            oauth_id=profile.provider_id,
        )
        logger.info("Created %s account %s for %s", profile.provider, user.id, email)
        return OAuthAuthenticated(user=user, created=True)

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    async def purge_expired(self) -> int:
        removed = await self._pending.delete_expired(self._clock())
        if removed:
            logger.info("Purged %d expired pending registrations", removed)
        return removed

    async def _open_payment(
        self,
        email: str,
        amount: Decimal,
        confirmation: PaymentConfirmation,
    ) -> PaymentRecord:
        """Ledger row for this attempt; a known order id resumes its own row."""
        existing = None
        if confirmation.order_id:
            existing = await self._ledger.get_by_order_id(confirmation.order_id)
        if existing is not None:
            if existing.email != email or existing.status == PaymentStatus.PENDING:
                raise DuplicatePaymentError(confirmation.order_id)
            if existing.status == PaymentStatus.COMPLETED:
                return existing

        return await self._ledger.save(
            PaymentRecord(
                id=existing.id if existing else None,
                email=email,
                order_id=confirmation.order_id,
                amount=amount,
                currency=confirmation.currency,
                status=PaymentStatus.PENDING,
                created_at=existing.created_at if existing else self._clock(),
            )
        )

    async def _capture(self, record: PaymentRecord) -> PaymentReceipt:
        try:
            receipt = await self._gateway.confirm_payment(
                record.email,
                record.amount,
                record.currency,
                order_id=record.order_id,
            )
        except PaymentFailedError as e:
            logger.warning("Payment for %s failed: %s", record.email, e.message)
            await self._ledger.save(
                record.model_copy(update={"status": PaymentStatus.FAILED, "error": e.message})
            )
            raise

        await self._ledger.save(
            record.model_copy(update={
                "status": PaymentStatus.COMPLETED,
                "reference": receipt.reference,
                "amount": receipt.amount,
                "currency": receipt.currency,
                "completed_at": receipt.captured_at,
            })
        )
        return receipt

    async def _load_pending(self, token: Optional[str]) -> Optional[PendingRegistration]:
        if not token:
            return None
        pending = await self._pending.get(token)
        if pending is None:
            return None
        if pending.is_expired(self._clock()):
            await self._pending.delete(token)
            return None
        return pending

    @staticmethod
    def _base_username(profile: OAuthProfile) -> str:
        if profile.display_name:
            return profile.display_name
        local_part = (profile.email or "").split("@")[0]
        if local_part:
            return local_part
        return f"user_{profile.provider_id}"

    async def _available_username(self, base: str) -> str:
        candidate = base
        suffix = 1
        while not await self._identity.username_available(candidate):
            candidate = f"{base}{suffix}"
            suffix += 1
        return candidate
