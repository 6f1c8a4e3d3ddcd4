"""API models package."""

from .errors import ErrorResponse
from .user import (
    TokenPayload,
    LoginRequest,
    LoginResponse,
    RegisterResponse,
    PaymentRequiredResponse,
    UserResponse,
)
from .usage import (
    UsageResponse,
    UsageHistoryItem,
    UsageHistoryResponse,
    ExtractResponse,
)

__all__ = [
    "ErrorResponse",
    "TokenPayload",
    "LoginRequest",
    "LoginResponse",
    "RegisterResponse",
    "PaymentRequiredResponse",
    "UserResponse",
    "UsageResponse",
    "UsageHistoryItem",
    "UsageHistoryResponse",
    "ExtractResponse",
]
