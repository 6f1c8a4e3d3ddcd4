"""
Payments module data models.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PaymentStatus(str, Enum):
    """Lifecycle of a ledger row."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentReceipt(BaseModel):
    """
    Proof of a captured payment, returned by a gateway.

    `reference` is the gateway's id (PayPal capture id, or a simulated
    `PAYPAL_<ms>` value in development) and ends up on the allow-list entry.
    """

    reference: str = Field(..., description="Gateway payment reference")
    email: str
    amount: Decimal
    currency: str = "USD"
    captured_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PaymentRecord(BaseModel):
    """
    Ledger row for a payment attempt.

    A row is saved as `pending` before the gateway is called and settled as
    `completed` or `failed` afterwards. `order_id` is unique when present,
    so capturing the same gateway order again lands on the same row.
    """

    id: Optional[str] = Field(None, description="Record ID (set after save)")
    email: str
    order_id: Optional[str] = Field(None, description="Gateway order id")
    amount: Decimal
    currency: str = "USD"
    reference: Optional[str] = Field(None, description="Capture reference once completed")
    status: PaymentStatus = PaymentStatus.PENDING
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
