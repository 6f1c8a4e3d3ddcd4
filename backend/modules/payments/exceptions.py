"""
Payments module exceptions.

These exceptions are raised by the payments module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from decimal import Decimal
from typing import Optional

from shared.exceptions import ConflictError, PaymentRequiredError, ValidationError


class PaymentFailedError(PaymentRequiredError):
    """Raised when the gateway did not capture the payment."""

    def __init__(self, message: str, gateway_error: Optional[str] = None):
        super().__init__(
            message,
            code="PAYMENT_FAILED",
            details={"gateway_error": gateway_error} if gateway_error else {},
        )


class InvalidAmountError(ValidationError):
    """Raised when a payment amount is invalid."""

    def __init__(self, amount: Decimal, reason: str):
        super().__init__(
            f"Invalid amount: {amount}. {reason}",
            code="INVALID_AMOUNT",
            details={"amount": str(amount), "reason": reason},
        )


class DuplicatePaymentError(ConflictError):
    """Raised when a gateway order is already in flight or belongs to another email."""

    def __init__(self, order_id: str):
        super().__init__(
            f"Payment for order {order_id} has already been submitted",
            code="DUPLICATE_PAYMENT",
            details={"order_id": order_id},
        )
