"""
Provisioning module exceptions.
"""

from shared.exceptions import ValidationError


class MissingOAuthEmailError(ValidationError):
    """Raised when the OAuth provider did not return an email address."""

    def __init__(self, provider: str):
        super().__init__(
            "No email found in OAuth profile",
            code="OAUTH_EMAIL_MISSING",
            details={"provider": provider},
        )
