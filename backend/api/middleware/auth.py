"""
Session authentication.

Sessions are HS256 JWTs issued at login. Clients send them either as a
Bearer token or in the HttpOnly session cookie; the token only carries
the user id, the user itself is loaded from the identity store on every
request.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from shared.config import get_settings
from shared.models import AuthenticatedUser
from modules.identity.interfaces import IIdentityService
from modules.identity.models import User
from ..dependencies import get_identity_service
from ..models.user import TokenPayload

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(HTTPException):
    """Authentication error with consistent format."""
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def create_session_token(user: User, now: Optional[datetime] = None) -> str:
    """Issue a session token for a premium user."""
    settings = get_settings()
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "username": user.username,
        "email": user.email,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(hours=settings.session_ttl_hours)).timestamp()),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=settings.session_algorithm)


def decode_token(token: str) -> TokenPayload:
    """
    Decode and validate a session token.

    Args:
        token: The JWT token string

    Returns:
        TokenPayload with decoded claims

    Raises:
        AuthError: If token is invalid or expired
    """
    settings = get_settings()

    if not settings.session_secret:
        raise AuthError("Server authentication not configured")

    try:
        payload = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[settings.session_algorithm],
        )
        return TokenPayload(**payload)
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired")
    except JWTError as e:
        raise AuthError(f"Invalid token: {str(e)}")


def _extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(get_settings().session_cookie_name)


def get_user_from_payload(payload: TokenPayload, user: User) -> AuthenticatedUser:
    """
    Build the request user from a token and the stored record.

    Args:
        payload: Decoded JWT payload
        user: Current identity record for `payload.sub`

    Returns:
        AuthenticatedUser instance
    """
    return AuthenticatedUser(
        id=user.id,
        username=user.username,
        email=user.email,
        last_sign_in=datetime.fromtimestamp(payload.iat, tz=timezone.utc),
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: IIdentityService = Depends(get_identity_service),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in user.

    Raises:
        AuthError: Missing, invalid or expired token
        UserNotFoundError: Token for a user that no longer exists (the
            error handler also clears the session cookie)

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    token = _extract_token(request, credentials)
    if token is None:
        raise AuthError("Missing authorization header")

    payload = decode_token(token)
    user = await identity.get_user(payload.sub)
    return get_user_from_payload(payload, user)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: IIdentityService = Depends(get_identity_service),
) -> Optional[AuthenticatedUser]:
    """
    Dependency that optionally extracts user if authenticated.

    Use this for endpoints that work with or without authentication.
    An unusable token counts as anonymous; a valid token for a deleted
    user does not.

    Usage:
        @router.get("/public")
        async def public_route(user: Optional[AuthenticatedUser] = Depends(get_optional_user)):
            if user:
                return {"message": f"Hello, {user.username}"}
            return {"message": "Hello, anonymous"}
    """
    token = _extract_token(request, credentials)
    if token is None:
        return None

    try:
        payload = decode_token(token)
    except AuthError:
        return None
    user = await identity.get_user(payload.sub)
    return get_user_from_payload(payload, user)


# Type aliases for cleaner route definitions
RequireAuth = Depends(get_current_user)
OptionalAuth = Depends(get_optional_user)
