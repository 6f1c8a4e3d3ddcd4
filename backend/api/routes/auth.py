"""
Account endpoints: registration, login, logout, current user and Google OAuth.

Registration for an email that has not paid answers 402 with a
provisioning token; the same token (cookie or body) lets the payment
endpoint finish the sign-up.
"""

import logging
import secrets
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from shared.config import Settings
from shared.exceptions import PictoTextError, ServiceUnavailableError, ValidationError
from shared.models import AuthenticatedUser
from modules.identity.interfaces import IIdentityService
from modules.identity.models import User
from modules.identity.oauth import GoogleOAuthClient
from modules.provisioning.interfaces import IProvisioningService
from modules.provisioning.models import OAuthNeedsPayment, RegistrationRequest
from modules.usage.service import PremiumUsageTracker
from ..cookies import (
    OAUTH_STATE_COOKIE,
    clear_session_cookie,
    set_oauth_state_cookie,
    set_provisioning_cookie,
    set_session_cookie,
)
from ..dependencies import (
    get_app_settings,
    get_identity_service,
    get_oauth_client,
    get_premium_tracker,
    get_provisioning_service,
)
from ..middleware.auth import RequireAuth, create_session_token
from ..models.user import (
    LoginRequest,
    LoginResponse,
    PaymentRequiredResponse,
    RegisterResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        monthly_usage_count=user.monthly_usage_count,
    )


@router.post(
    "/register",
    response_model=RegisterResponse,
    responses={402: {"model": PaymentRequiredResponse}},
)
async def register(
    body: RegistrationRequest,
    request: Request,
    response: Response,
    provisioning: IProvisioningService = Depends(get_provisioning_service),
    settings: Settings = Depends(get_app_settings),
):
    """
    Create a premium account.

    Emails without a confirmed payment get 402 and a provisioning token;
    the account is created when the payment for that email arrives.
    """
    token = request.cookies.get(settings.provisioning_cookie_name)
    result = await provisioning.register(body, provisioning_token=token)

    if result.payment_required:
        payload = PaymentRequiredResponse(
            email=result.email,
            provisioning_token=result.provisioning_token,
        )
        payment_response = JSONResponse(status_code=402, content=payload.model_dump())
        set_provisioning_cookie(payment_response, settings, result.provisioning_token)
        return payment_response

    session = create_session_token(result.user)
    set_session_cookie(response, settings, session)
    return RegisterResponse(
        message="Premium account created successfully",
        user=_user_response(result.user),
        token=session,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    identity: IIdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_app_settings),
) -> LoginResponse:
    """Password login for premium users."""
    user = await identity.authenticate(body.username, body.password)
    token = create_session_token(user)
    set_session_cookie(response, settings, token)
    logger.info("User %s signed in", user.id)
    return LoginResponse(user=_user_response(user), token=token)


@router.post("/logout")
async def logout(
    response: Response,
    settings: Settings = Depends(get_app_settings),
) -> dict:
    clear_session_cookie(response, settings)
    return {"success": True}


@router.get("/user", response_model=UserResponse)
async def current_user(
    user: AuthenticatedUser = RequireAuth,
    tracker: PremiumUsageTracker = Depends(get_premium_tracker),
) -> UserResponse:
    """
    Get the signed-in user with this month's usage.

    Requires authentication.
    """
    usage = await tracker.get_monthly_usage(user.id)
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        tier=user.tier,
        monthly_usage_count=usage.count,
        monthly_limit=usage.limit,
        usage_resets_at=usage.resets_at,
    )


def _require_oauth(client: Optional[GoogleOAuthClient]) -> GoogleOAuthClient:
    if client is None:
        raise ServiceUnavailableError("Google OAuth not configured", code="OAUTH_NOT_CONFIGURED")
    return client


@router.get("/auth/google")
async def google_login(
    oauth: Optional[GoogleOAuthClient] = Depends(get_oauth_client),
    settings: Settings = Depends(get_app_settings),
) -> RedirectResponse:
    """Start the Google sign-in flow."""
    client = _require_oauth(oauth)
    state = secrets.token_urlsafe(16)
    redirect = RedirectResponse(client.authorization_url(state), status_code=302)
    set_oauth_state_cookie(redirect, settings, state)
    return redirect


@router.get("/auth/google/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    oauth: Optional[GoogleOAuthClient] = Depends(get_oauth_client),
    provisioning: IProvisioningService = Depends(get_provisioning_service),
    settings: Settings = Depends(get_app_settings),
) -> RedirectResponse:
    """
    Finish Google sign-in.

    Unpaid emails are sent to the payment page; everyone else gets a
    session and lands on the frontend.
    """
    client = _require_oauth(oauth)
    frontend = settings.frontend_url.rstrip("/")

    try:
        expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
        if not code or not state or state != expected_state:
            raise ValidationError("Invalid OAuth callback", code="OAUTH_STATE_MISMATCH")
        profile = await client.fetch_profile(code)
        outcome = await provisioning.oauth_sign_in(profile)
    except PictoTextError as e:
        logger.warning("Google sign-in failed: %s", e.message)
        failed = RedirectResponse(f"{frontend}/?error=oauth_failed", status_code=302)
        failed.delete_cookie(OAUTH_STATE_COOKIE)
        return failed

    if isinstance(outcome, OAuthNeedsPayment):
        redirect = RedirectResponse(
            f"{frontend}/?payment=required&email={quote(outcome.email)}",
            status_code=302,
        )
    else:
        redirect = RedirectResponse(f"{frontend}/", status_code=302)
        set_session_cookie(redirect, settings, create_session_token(outcome.user))
    redirect.delete_cookie(OAUTH_STATE_COOKIE)
    return redirect
