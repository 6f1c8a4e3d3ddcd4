"""
Cookie helpers.

All cookies are HttpOnly, SameSite=Lax and Secure only in production.
"""

from typing import Optional

from fastapi import Depends, Request, Response

from shared.config import Settings
from shared.models import AuthenticatedUser
from modules.usage.models import ClientIdentity
from .dependencies import get_client_identity
from .middleware.auth import OptionalAuth

OAUTH_STATE_COOKIE = "pictotext_oauth_state"
OAUTH_STATE_MAX_AGE = 10 * 60


def _set(response: Response, settings: Settings, name: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=name,
        value=value,
        max_age=max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def set_session_cookie(response: Response, settings: Settings, token: str) -> None:
    _set(response, settings, settings.session_cookie_name, token, settings.session_ttl_hours * 3600)


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.session_cookie_name)


def set_free_usage_cookie(response: Response, settings: Settings, cookie_id: str) -> None:
    _set(
        response,
        settings,
        settings.free_usage_cookie_name,
        cookie_id,
        settings.free_usage_cookie_max_age,
    )


def mark_free_usage_cookie(request: Request, cookie_id: str) -> None:
    """Have the tracking cookie (re)issued on whatever response this request gets."""
    request.state.free_usage_cookie_id = cookie_id


async def get_tracked_identity(
    request: Request,
    identity: ClientIdentity = Depends(get_client_identity),
    user: Optional[AuthenticatedUser] = OptionalAuth,
) -> ClientIdentity:
    """
    FastAPI dependency for the visitor identity used by quota checks.

    Anonymous callers get the tracking cookie on every response, including
    validation errors raised after dependencies ran.
    """
    if user is None:
        mark_free_usage_cookie(request, identity.cookie_id)
    return identity


def set_provisioning_cookie(response: Response, settings: Settings, token: str) -> None:
    _set(
        response,
        settings,
        settings.provisioning_cookie_name,
        token,
        settings.pending_registration_ttl_minutes * 60,
    )


def clear_provisioning_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.provisioning_cookie_name)


def set_oauth_state_cookie(response: Response, settings: Settings, state: str) -> None:
    _set(response, settings, OAUTH_STATE_COOKIE, state, OAUTH_STATE_MAX_AGE)
