"""
Payment gateway implementations.

- SimulatedPaymentGateway: development; every positive amount succeeds
- PayPalPaymentGateway: captures an approved PayPal order over the REST API
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

import httpx

from .exceptions import InvalidAmountError, PaymentFailedError
from .models import PaymentReceipt

logger = logging.getLogger(__name__)


def _check_amount(amount: Decimal) -> None:
    if amount <= 0:
        raise InvalidAmountError(amount, "Amount must be positive")


class SimulatedPaymentGateway:
    """
    Accepts every payment with a positive amount.

    References look like PayPal ones (`PAYPAL_<ms timestamp>`) so stored
    data has the same shape as in production.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def confirm_payment(
        self,
        email: str,
        amount: Decimal,
        currency: str,
        order_id: Optional[str] = None,
    ) -> PaymentReceipt:
        _check_amount(amount)
        now = self._clock()
        reference = order_id or f"PAYPAL_{int(now.timestamp() * 1000)}"
        logger.info("Simulated payment of %s %s for %s (%s)", amount, currency, email, reference)
        return PaymentReceipt(
            reference=reference,
            email=email,
            amount=amount,
            currency=currency,
            captured_at=now,
        )


class PayPalPaymentGateway:
    """
    Captures orders created client-side with the PayPal JS SDK.

    The capture must complete and match the expected amount and currency,
    otherwise the payment is treated as failed.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        api_base: str = "https://api-m.sandbox.paypal.com",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._api_base = api_base.rstrip("/")
        self._http_client = http_client
        self._timeout = timeout

    async def confirm_payment(
        self,
        email: str,
        amount: Decimal,
        currency: str,
        order_id: Optional[str] = None,
    ) -> PaymentReceipt:
        _check_amount(amount)
        if not order_id:
            raise PaymentFailedError("PayPal order id is required")

        if self._http_client is not None:
            return await self._capture(self._http_client, email, amount, currency, order_id)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._capture(client, email, amount, currency, order_id)

    async def _capture(
        self,
        client: httpx.AsyncClient,
        email: str,
        amount: Decimal,
        currency: str,
        order_id: str,
    ) -> PaymentReceipt:
        try:
            token_response = await client.post(
                f"{self._api_base}/v1/oauth2/token",
                auth=(self._client_id, self._client_secret),
                data={"grant_type": "client_credentials"},
            )
            token_response.raise_for_status()
            access_token = token_response.json()["access_token"]

            capture_response = await client.post(
                f"{self._api_base}/v2/checkout/orders/{order_id}/capture",
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Content-Type": "application/json",
                },
                json={},
            )
            capture_response.raise_for_status()
            order = capture_response.json()
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning("PayPal capture failed for order %s: %s", order_id, e)
            raise PaymentFailedError("Payment could not be captured", gateway_error=str(e)) from e

        if order.get("status") != "COMPLETED":
            raise PaymentFailedError(
                "Payment was not completed",
                gateway_error=f"order status {order.get('status')}",
            )

        try:
            capture = order["purchase_units"][0]["payments"]["captures"][0]
            captured_amount = Decimal(capture["amount"]["value"])
            captured_currency = capture["amount"]["currency_code"]
        except (KeyError, IndexError, InvalidOperation) as e:
            raise PaymentFailedError("Unexpected PayPal response", gateway_error=str(e)) from e

        if captured_amount != amount or captured_currency != currency:
            logger.warning(
                "PayPal order %s captured %s %s, expected %s %s",
                order_id, captured_amount, captured_currency, amount, currency,
            )
            raise PaymentFailedError(
                "Captured amount does not match the premium price",
                gateway_error=f"{captured_amount} {captured_currency}",
            )

        logger.info("Captured PayPal order %s for %s", order_id, email)
        return PaymentReceipt(
            reference=capture.get("id", order_id),
            email=email,
            amount=captured_amount,
            currency=captured_currency,
        )
