"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

The storage backend (in-memory or Supabase) is read from settings once,
when the container is created, and every store follows it.
"""

from datetime import timedelta
from typing import TYPE_CHECKING, Optional

from fastapi import Request

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.access.interfaces import IAccessGate
    from modules.identity.interfaces import IIdentityService, IIdentityRepository
    from modules.identity.oauth import GoogleOAuthClient
    from modules.ocr.interfaces import IOCRBackend
    from modules.payments.interfaces import IPaymentGateway, IPaymentLedger
    from modules.provisioning.interfaces import IProvisioningService, IPendingRegistrationStore
    from modules.usage.interfaces import IFreeUsageStore, IUsageLog
    from modules.usage.service import FreeUsageTracker, PremiumUsageTracker
    from modules.usage.models import ClientIdentity


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self.reset()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def uses_supabase(self) -> bool:
        return self._settings.storage_backend == "supabase"

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    @property
    def identity_repository(self) -> "IIdentityRepository":
        if self._identity_repository is None:
            from modules.identity.repository import (
                InMemoryIdentityRepository,
                SupabaseIdentityRepository,
            )
            if self.uses_supabase:
                from shared.database import get_supabase_client
                self._identity_repository = SupabaseIdentityRepository(get_supabase_client())
            else:
                self._identity_repository = InMemoryIdentityRepository()
        return self._identity_repository

    @property
    def free_usage_store(self) -> "IFreeUsageStore":
        if self._free_usage_store is None:
            from modules.usage.store import InMemoryFreeUsageStore, SupabaseFreeUsageStore
            if self.uses_supabase:
                from shared.database import get_supabase_client
                self._free_usage_store = SupabaseFreeUsageStore(get_supabase_client())
            else:
                self._free_usage_store = InMemoryFreeUsageStore()
        return self._free_usage_store

    @property
    def usage_log(self) -> "IUsageLog":
        if self._usage_log is None:
            from modules.usage.store import InMemoryUsageLog, SupabaseUsageLog
            if self.uses_supabase:
                from shared.database import get_supabase_client
                self._usage_log = SupabaseUsageLog(get_supabase_client())
            else:
                self._usage_log = InMemoryUsageLog()
        return self._usage_log

    @property
    def payment_ledger(self) -> "IPaymentLedger":
        if self._payment_ledger is None:
            from modules.payments.ledger import InMemoryPaymentLedger, SupabasePaymentLedger
            if self.uses_supabase:
                from shared.database import get_supabase_client
                self._payment_ledger = SupabasePaymentLedger(get_supabase_client())
            else:
                self._payment_ledger = InMemoryPaymentLedger()
        return self._payment_ledger

    @property
    def pending_store(self) -> "IPendingRegistrationStore":
        if self._pending_store is None:
            from modules.provisioning.store import (
                InMemoryPendingRegistrationStore,
                SupabasePendingRegistrationStore,
            )
            if self.uses_supabase:
                from shared.database import get_supabase_client
                self._pending_store = SupabasePendingRegistrationStore(get_supabase_client())
            else:
                self._pending_store = InMemoryPendingRegistrationStore()
        return self._pending_store

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------

    @property
    def identity(self) -> "IIdentityService":
        """Get the identity service instance."""
        if self._identity_service is None:
            from modules.identity.passwords import PasswordHasher
            from modules.identity.service import IdentityService
            self._identity_service = IdentityService(
                self.identity_repository,
                hasher=PasswordHasher(rounds=self._settings.password_hash_rounds),
            )
        return self._identity_service

    @property
    def free_tracker(self) -> "FreeUsageTracker":
        """Get the anonymous daily usage tracker."""
        if self._free_tracker is None:
            from modules.usage.service import FreeUsageTracker
            self._free_tracker = FreeUsageTracker(
                self.free_usage_store,
                daily_limit=self._settings.free_daily_limit,
                retention=timedelta(days=self._settings.free_usage_retention_days),
            )
        return self._free_tracker

    @property
    def premium_tracker(self) -> "PremiumUsageTracker":
        """Get the premium monthly usage tracker."""
        if self._premium_tracker is None:
            from modules.usage.service import PremiumUsageTracker
            self._premium_tracker = PremiumUsageTracker(
                self.identity,
                monthly_limit=self._settings.premium_monthly_limit,
            )
        return self._premium_tracker

    @property
    def access_gate(self) -> "IAccessGate":
        if self._access_gate is None:
            from modules.access.service import AccessGate
            self._access_gate = AccessGate(
                self.free_tracker,
                self.premium_tracker,
                upgrade_limit=self._settings.premium_monthly_limit,
            )
        return self._access_gate

    @property
    def payment_gateway(self) -> "IPaymentGateway":
        """PayPal when credentials are configured, simulated otherwise."""
        if self._payment_gateway is None:
            from modules.payments.gateways import PayPalPaymentGateway, SimulatedPaymentGateway
            if self._settings.paypal_enabled:
                self._payment_gateway = PayPalPaymentGateway(
                    self._settings.paypal_client_id,
                    self._settings.paypal_client_secret,
                    api_base=self._settings.paypal_api_base,
                )
            else:
                self._payment_gateway = SimulatedPaymentGateway()
        return self._payment_gateway

    @property
    def provisioning(self) -> "IProvisioningService":
        """Get the premium provisioning service instance."""
        if self._provisioning_service is None:
            from modules.provisioning.service import ProvisioningService
            self._provisioning_service = ProvisioningService(
                self.identity,
                self.payment_gateway,
                self.payment_ledger,
                self.pending_store,
                pending_ttl=timedelta(minutes=self._settings.pending_registration_ttl_minutes),
                premium_price=self._settings.premium_price,
                premium_currency=self._settings.premium_currency,
            )
        return self._provisioning_service

    @property
    def ocr(self) -> "IOCRBackend":
        """OCR.space when an API key is configured, an unavailable stand-in otherwise."""
        if self._ocr_backend is None:
            from modules.ocr.backends import OCRSpaceBackend, UnconfiguredOCRBackend
            if self._settings.ocr_space_api_key:
                self._ocr_backend = OCRSpaceBackend(
                    self._settings.ocr_space_api_key,
                    url=self._settings.ocr_space_url,
                    timeout=self._settings.ocr_timeout_seconds,
                    max_image_bytes=self._settings.ocr_max_image_bytes,
                )
            else:
                self._ocr_backend = UnconfiguredOCRBackend()
        return self._ocr_backend

    @property
    def oauth(self) -> Optional["GoogleOAuthClient"]:
        """Google OAuth client, or None when not configured."""
        if self._oauth_client is None and self._settings.google_oauth_enabled:
            from modules.identity.oauth import GoogleOAuthClient
            self._oauth_client = GoogleOAuthClient(
                self._settings.google_client_id,
                self._settings.google_client_secret,
                self._settings.google_redirect_uri,
            )
        return self._oauth_client

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._identity_repository: "IIdentityRepository | None" = None
        self._free_usage_store: "IFreeUsageStore | None" = None
        self._usage_log: "IUsageLog | None" = None
        self._payment_ledger: "IPaymentLedger | None" = None
        self._pending_store: "IPendingRegistrationStore | None" = None
        self._identity_service: "IIdentityService | None" = None
        self._free_tracker: "FreeUsageTracker | None" = None
        self._premium_tracker: "PremiumUsageTracker | None" = None
        self._access_gate: "IAccessGate | None" = None
        self._payment_gateway: "IPaymentGateway | None" = None
        self._provisioning_service: "IProvisioningService | None" = None
        self._ocr_backend: "IOCRBackend | None" = None
        self._oauth_client: "GoogleOAuthClient | None" = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_identity_service() -> "IIdentityService":
    """FastAPI dependency for identity service."""
    return get_container().identity


def get_free_tracker() -> "FreeUsageTracker":
    return get_container().free_tracker


def get_premium_tracker() -> "PremiumUsageTracker":
    return get_container().premium_tracker


def get_usage_log() -> "IUsageLog":
    return get_container().usage_log


def get_access_gate() -> "IAccessGate":
    return get_container().access_gate


def get_provisioning_service() -> "IProvisioningService":
    """FastAPI dependency for provisioning service."""
    return get_container().provisioning


def get_ocr_backend() -> "IOCRBackend":
    return get_container().ocr


def get_oauth_client() -> Optional["GoogleOAuthClient"]:
    return get_container().oauth


def get_app_settings() -> Settings:
    return get_container().settings


def get_client_identity(request: Request) -> "ClientIdentity":
    """
    FastAPI dependency resolving the anonymous visitor identity.

    A fresh tracking cookie id is generated when the request carries none;
    routes depend on api.cookies.get_tracked_identity, which re-issues it
    to anonymous callers.
    """
    from modules.usage.client_identity import resolve_client_identity
    settings = get_container().settings
    return resolve_client_identity(
        request.headers.get("x-forwarded-for"),
        request.client.host if request.client else None,
        request.cookies.get(settings.free_usage_cookie_name),
    )
