"""
Payments module.

Confirms the one-off premium payment and keeps a ledger of attempts.

Public API:
- IPaymentGateway / IPaymentLedger: Interfaces
- SimulatedPaymentGateway / PayPalPaymentGateway: Gateways
- PaymentReceipt / PaymentRecord: Models
- PaymentFailedError / InvalidAmountError / DuplicatePaymentError: Exceptions
"""

from .interfaces import IPaymentGateway, IPaymentLedger
from .models import PaymentReceipt, PaymentRecord, PaymentStatus
from .exceptions import DuplicatePaymentError, PaymentFailedError, InvalidAmountError
from .gateways import SimulatedPaymentGateway, PayPalPaymentGateway
from .ledger import InMemoryPaymentLedger, SupabasePaymentLedger

__all__ = [
    # Interfaces
    "IPaymentGateway",
    "IPaymentLedger",
    # Models
    "PaymentReceipt",
    "PaymentRecord",
    "PaymentStatus",
    # Exceptions
    "PaymentFailedError",
    "DuplicatePaymentError",
    "InvalidAmountError",
    # Gateways
    "SimulatedPaymentGateway",
    "PayPalPaymentGateway",
    # Ledger
    "InMemoryPaymentLedger",
    "SupabasePaymentLedger",
]
