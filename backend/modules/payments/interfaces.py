"""
Payments module interfaces.

The provisioning module only sees IPaymentGateway; which gateway is used
(simulated or PayPal) is decided by the service container.
"""

from decimal import Decimal
from typing import Protocol, Optional, runtime_checkable

from .models import PaymentReceipt, PaymentRecord


@runtime_checkable
class IPaymentGateway(Protocol):
    """Captures a one-off premium payment."""

    async def confirm_payment(
        self,
        email: str,
        amount: Decimal,
        currency: str,
        order_id: Optional[str] = None,
    ) -> PaymentReceipt:
        """
        Confirm that the payment for `email` went through.

        Args:
            email: Payer email, the allow-list key
            amount: Expected amount
            currency: ISO currency code
            order_id: Gateway order to capture, when the gateway needs one

        Raises:
            PaymentFailedError: If the payment was not captured
            InvalidAmountError: If the amount is not positive
        """
        ...


@runtime_checkable
class IPaymentLedger(Protocol):
    """Record of payment attempts, one row per attempt or gateway order."""

    async def save(self, record: PaymentRecord) -> PaymentRecord:
        """
        Insert a record, or update it when it already has an id.

        Raises:
            DuplicatePaymentError: If another row holds the same order id
        """
        ...

    async def get_by_order_id(self, order_id: str) -> Optional[PaymentRecord]:
        ...

    async def list_for_email(self, email: str) -> list[PaymentRecord]:
        """Most recent first."""
        ...
