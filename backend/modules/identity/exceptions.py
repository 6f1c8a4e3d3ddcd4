"""
Identity module exceptions.

These exceptions are raised by the identity module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from shared.exceptions import (
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
    PaymentRequiredError,
    ValidationError,
)


class DuplicateIdentityError(ConflictError):
    """Raised when a username or email is already claimed by another user."""

    def __init__(self, field: str, value: str):
        super().__init__(
            f"{field.capitalize()} already exists",
            code="DUPLICATE_IDENTITY",
            details={"field": field, "value": value},
        )
        self.field = field


class InvalidCredentialsError(AuthenticationError):
    """
    Raised when a login attempt fails.

    The message never says whether the username or the password was wrong.
    """

    def __init__(self):
        super().__init__("Invalid username or password", code="INVALID_CREDENTIALS")


class UserNotFoundError(AuthenticationError):
    """Raised when a session references a user id with no backing record."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


class NotAllowListedError(PaymentRequiredError):
    """Raised when creating an account for an email that has not paid."""

    def __init__(self, email: str):
        super().__init__(
            "Only premium subscribers can create accounts. Please purchase premium first.",
            code="NOT_ALLOW_LISTED",
            details={"email": email},
        )


class MissingCredentialError(ValidationError):
    """Raised when creating a user with neither a password nor an OAuth identity."""

    def __init__(self):
        super().__init__(
            "A user needs a password or an OAuth identity",
            code="MISSING_CREDENTIAL",
        )


class InvalidSubscriptionTransitionError(ValidationError):
    """Raised for an allow-list status change the lifecycle does not allow."""

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot change subscription status from {current} to {requested}",
            code="INVALID_SUBSCRIPTION_TRANSITION",
            details={"current": current, "requested": requested},
        )


class OAuthError(ExternalServiceError):
    """Raised when the OAuth provider exchange fails."""

    def __init__(self, provider: str, message: str):
        super().__init__(
            f"OAuth sign-in with {provider} failed: {message}",
            service=provider,
            code="OAUTH_FAILED",
        )
