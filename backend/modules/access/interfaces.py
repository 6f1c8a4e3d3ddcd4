"""
Access gate interface.
"""

from typing import Protocol, runtime_checkable

from .models import AccessDecision, Requester


@runtime_checkable
class IAccessGate(Protocol):
    """Decides whether an extraction request may proceed."""

    async def evaluate(self, requester: Requester, backend_available: bool) -> AccessDecision:
        """
        Check the requester's quota without consuming it.

        Raises:
            UserNotFoundError: If an authenticated requester no longer exists
        """
        ...
