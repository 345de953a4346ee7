"""
Authentication module interfaces.

Other modules should depend on these protocols, not the concrete
implementations. This enables testing with fakes and swapping the
identity provider or storage backend.
"""

from datetime import datetime
from typing import Protocol, Optional, runtime_checkable

from .models import (
    AuthorizationRequest,
    ExternalIdentity,
    OAuthTokens,
    ResolvedSession,
    Session,
    UserRecord,
)


@runtime_checkable
class ISessionStore(Protocol):
    """Persistence for login sessions."""

    def create(self, user_id: str, expires_at: datetime) -> Session:
        """Create a session with a newly generated opaque id."""
        ...

    def get(self, session_id: str) -> Optional[Session]:
        """Return the stored session, expired or not."""
        ...

    def delete(self, session_id: str) -> None:
        """Delete a session. Deleting a missing session is a no-op."""
        ...


@runtime_checkable
class IUserStore(Protocol):
    """Persistence for user records."""

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    def get_by_external_id(self, external_id: str) -> Optional[UserRecord]:
        ...

    def create(self, identity: ExternalIdentity, tokens: OAuthTokens) -> UserRecord:
        ...

    def update_login(
        self,
        user_id: str,
        identity: ExternalIdentity,
        tokens: OAuthTokens,
    ) -> UserRecord:
        """Refresh profile fields and provider tokens after a login."""
        ...

    def update_tokens(self, user_id: str, tokens: OAuthTokens) -> None:
        ...


@runtime_checkable
class IIdentityProvider(Protocol):
    """Third-party OAuth identity provider."""

    def create_authorization_request(self) -> AuthorizationRequest:
        ...

    async def exchange_code(self, code: str, code_verifier: str) -> OAuthTokens:
        """
        Exchange an authorization code for tokens.

        Raises:
            InvalidAuthorizationCodeError: If the provider rejects the code
            IdentityProviderError: On any other provider failure
        """
        ...

    async def fetch_profile(self, access_token: str) -> ExternalIdentity:
        ...

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        ...


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authentication operations.

    This protocol defines the contract that the auth module exposes
    to the API layer (the authorization gate and the auth routes).
    """

    @property
    def identity(self) -> IIdentityProvider:
        """The identity provider the login routes start flows with."""
        ...

    def is_email_authorized(self, email: str) -> bool:
        ...

    async def validate_session(self, session_id: str) -> Optional[ResolvedSession]:
        """
        Resolve a session id to a valid session and its user.

        Expired sessions are deleted and resolve to None. Sessions inside
        the renewal window are rotated and returned with `fresh=True`.
        """
        ...

    async def invalidate_session(self, session_id: str) -> None:
        ...

    async def login(self, code: str, code_verifier: str) -> ResolvedSession:
        """
        Complete an OAuth login and open a session.

        Raises:
            RevokedAccessError: If the user's email domain is not authorized
            MissingRefreshTokenError: If the provider issued no refresh token
        """
        ...

    async def get_access_token(self, user_id: str) -> Optional[str]:
        """Get a usable provider access token, or None if unavailable."""
        ...
