"""
Base exception classes for the PictoText backend.

Each module should define its own exceptions that inherit from these bases.
The API layer maps each base class to an HTTP status, so a module exception
only has to pick the right parent.
"""

from typing import Optional, Any


class PictoTextError(Exception):
    """
    Base exception for all PictoText errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(PictoTextError):
    """Resource not found."""

    pass


class ValidationError(PictoTextError):
    """Input validation failed."""

    pass


class ConflictError(PictoTextError):
    """Resource already exists or conflicts with existing state."""

    pass


class AuthenticationError(PictoTextError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(PictoTextError):
    """Authorization failed (insufficient permissions)."""

    pass


class PaymentRequiredError(PictoTextError):
    """The operation needs a completed payment."""

    pass


class RateLimitError(PictoTextError):
    """A usage quota has been exhausted."""

    pass


class ServiceUnavailableError(PictoTextError):
    """A required backend is not configured or not reachable."""

    pass


class ExternalServiceError(PictoTextError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
