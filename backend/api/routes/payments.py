"""
Payment endpoint.

Payment comes before registration: a confirmed payment allow-lists the
email, and completes a pending sign-up made with the same provisioning
token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, Field

from shared.config import Settings
from modules.provisioning.interfaces import IProvisioningService
from modules.provisioning.models import PaymentConfirmation
from ..cookies import clear_provisioning_cookie
from ..dependencies import get_app_settings, get_provisioning_service

router = APIRouter()


class PaymentRequest(PaymentConfirmation):
    provisioning_token: Optional[str] = Field(
        None,
        description="Token from a 402 registration response (falls back to the cookie)",
    )


class PaymentResponse(BaseModel):
    success: bool
    message: str
    payment_reference: str
    account_created: bool = False
    error: Optional[str] = None


@router.post("/payment/paypal", response_model=PaymentResponse)
async def confirm_paypal_payment(
    body: PaymentRequest,
    request: Request,
    response: Response,
    provisioning: IProvisioningService = Depends(get_provisioning_service),
    settings: Settings = Depends(get_app_settings),
) -> PaymentResponse:
    """Confirm a premium payment and claim any pending registration."""
    token = body.provisioning_token or request.cookies.get(settings.provisioning_cookie_name)
    confirmation = PaymentConfirmation(
        email=body.email,
        amount=body.amount,
        currency=body.currency,
        order_id=body.order_id,
    )
    result = await provisioning.confirm_payment(confirmation, provisioning_token=token)

    if result.account_created:
        clear_provisioning_cookie(response, settings)

    return PaymentResponse(
        success=result.success,
        message=result.message,
        payment_reference=result.payment_reference,
        account_created=result.account_created,
        error=result.error,
    )
