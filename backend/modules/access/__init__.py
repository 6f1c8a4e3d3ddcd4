"""
Access gate module.

Public API:
- IAccessGate: Interface for access checks
- AccessGate: Implementation over the free and premium trackers
- AccessDecision / Verdict: Check result
- AnonymousRequester / AuthenticatedRequester: Who is asking
"""

from .interfaces import IAccessGate
from .models import (
    Verdict,
    AccessDecision,
    AnonymousRequester,
    AuthenticatedRequester,
    Requester,
)
from .exceptions import QuotaExceededError, BackendUnavailableError
from .service import AccessGate

__all__ = [
    "IAccessGate",
    "Verdict",
    "AccessDecision",
    "AnonymousRequester",
    "AuthenticatedRequester",
    "Requester",
    "QuotaExceededError",
    "BackendUnavailableError",
    "AccessGate",
]
