"""
Google OAuth 2.0 client.

Only the two HTTP legs are handled here (authorization URL, code exchange
plus userinfo). What happens with the resulting profile is decided by the
provisioning module.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

from .exceptions import OAuthError
from .models import OAuthProfile

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleOAuthClient:
    """Authorization-code flow against Google."""

    provider = "google"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._http_client = http_client
        self._timeout = timeout

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> OAuthProfile:
        """
        Exchange an authorization code and load the user's profile.

        Raises:
            OAuthError: If either request fails
        """
        if self._http_client is not None:
            return await self._fetch_profile(self._http_client, code)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._fetch_profile(client, code)

    async def _fetch_profile(self, client: httpx.AsyncClient, code: str) -> OAuthProfile:
        try:
            token_response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "redirect_uri": self._redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
            token_response.raise_for_status()
            access_token = token_response.json()["access_token"]

            userinfo_response = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            userinfo_response.raise_for_status()
            data = userinfo_response.json()
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning("Google OAuth exchange failed: %s", e)
            raise OAuthError(self.provider, str(e)) from e

        return OAuthProfile(
            provider=self.provider,
            provider_id=str(data["sub"]),
            email=data.get("email"),
            display_name=data.get("name"),
        )
