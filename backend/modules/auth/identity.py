"""
Google OAuth identity provider.

Implements the authorization-code flow with PKCE against Google's
OAuth 2.0 and OpenID Connect endpoints using httpx.
"""

import base64
import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from shared.config import Settings

from .models import AuthorizationRequest, ExternalIdentity, OAuthTokens
from .exceptions import IdentityProviderError, InvalidAuthorizationCodeError

logger = logging.getLogger(__name__)


def generate_code_verifier() -> str:
    return secrets.token_urlsafe(48)


def code_challenge(verifier: str) -> str:
    """S256 PKCE challenge for a verifier."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class GoogleIdentityProvider:
    """
    Identity provider backed by Google accounts.

    Requests offline access so the first exchange returns a refresh token,
    which the document templates fallback needs later.
    """

    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
    SCOPES = ["openid", "profile", "email"]

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client_id = settings.google_client_id
        self._client_secret = settings.google_client_secret
        self._redirect_uri = settings.oauth_redirect_uri
        self._timeout = settings.http_timeout_seconds
        self._transport = transport

    def create_authorization_request(self) -> AuthorizationRequest:
        state = secrets.token_urlsafe(32)
        verifier = generate_code_verifier()
        params = {
            "response_type": "code",
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "scope": " ".join(self.SCOPES),
            "state": state,
            "code_challenge": code_challenge(verifier),
            "code_challenge_method": "S256",
            "access_type": "offline",
            "prompt": "consent",
        }
        return AuthorizationRequest(
            url=f"{self.AUTHORIZATION_URL}?{urlencode(params)}",
            state=state,
            code_verifier=verifier,
        )

    async def exchange_code(self, code: str, code_verifier: str) -> OAuthTokens:
        data = await self._post_token({
            "grant_type": "authorization_code",
            "code": code,
            "code_verifier": code_verifier,
            "redirect_uri": self._redirect_uri,
        })
        return self._parse_tokens(data)

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Exchange a stored refresh token for a new access token.

        Raises:
            IdentityProviderError: If the provider fails or has revoked the
                refresh token
        """
        try:
            data = await self._post_token({
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            })
        except InvalidAuthorizationCodeError as e:
            logger.warning("Google rejected a stored refresh token")
            raise IdentityProviderError("Refresh token rejected by identity provider") from e
        tokens = self._parse_tokens(data)
        if not tokens.refresh_token:
            # Google omits the refresh token on refresh; the old one stays valid
            tokens = tokens.model_copy(update={"refresh_token": refresh_token})
        return tokens

    async def fetch_profile(self, access_token: str) -> ExternalIdentity:
        try:
            async with self._client() as client:
                response = await client.get(
                    self.USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch Google profile: {e}")
            raise IdentityProviderError() from e

        if not data.get("sub") or not data.get("email"):
            logger.error("Google profile response is missing sub or email")
            raise IdentityProviderError()

        return ExternalIdentity(
            external_id=data["sub"],
            email=data["email"],
            name=data.get("name") or data["email"],
            avatar_url=data.get("picture"),
        )

    async def _post_token(self, form: dict[str, str]) -> dict[str, Any]:
        form = {
            **form,
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }
        try:
            async with self._client() as client:
                response = await client.post(self.TOKEN_URL, data=form)
        except httpx.HTTPError as e:
            logger.error(f"Google token endpoint unreachable: {e}")
            raise IdentityProviderError() from e

        if response.status_code == 400 and self._error_code(response) == "invalid_grant":
            raise InvalidAuthorizationCodeError()
        if response.status_code != 200:
            logger.error(
                f"Google token endpoint returned {response.status_code}: {self._error_code(response)}"
            )
            raise IdentityProviderError()
        return response.json()

    def _parse_tokens(self, data: dict[str, Any]) -> OAuthTokens:
        if "access_token" not in data:
            logger.error("Google token response has no access_token")
            raise IdentityProviderError()

        expires_at = None
        if data.get("expires_in"):
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(data["expires_in"]))

        return OAuthTokens(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=expires_at,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    @staticmethod
    def _error_code(response: httpx.Response) -> str:
        try:
            return str(response.json().get("error", "unknown"))
        except ValueError:
            return "unknown"
