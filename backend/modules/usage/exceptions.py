"""
Usage tracking module exceptions.
"""

from shared.exceptions import ExternalServiceError


class UsageStoreError(ExternalServiceError):
    """Raised when the usage store returns an unusable response."""

    def __init__(self, operation: str, message: str):
        super().__init__(
            f"Usage store {operation} failed: {message}",
            service="usage_store",
            code="USAGE_STORE_ERROR",
            details={"operation": operation},
        )
