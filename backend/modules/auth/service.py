"""
Authentication service implementation.

Owns the session lifecycle (create, validate, rotate, invalidate), the
OAuth login flow, and provider token refresh. Storage and the identity
provider are injected, so the same service runs against Supabase in
production and the in-memory store in tests.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from shared.config import Settings

from .allowlist import is_email_authorized
from .interfaces import IIdentityProvider, ISessionStore, IUserStore
from .models import ResolvedSession, Session, UserRecord
from .exceptions import (
    IdentityProviderError,
    MissingRefreshTokenError,
    RevokedAccessError,
)

logger = logging.getLogger(__name__)


class AuthService:
    """
    Implementation of the authentication service.

    Sessions live for `session_ttl_days`. A session validated within
    `session_renewal_days` of its expiry is rotated: a new session with
    a new id and a full lifetime replaces it and is flagged `fresh`.
    """

    def __init__(
        self,
        settings: Settings,
        sessions: ISessionStore,
        users: IUserStore,
        identity: IIdentityProvider,
    ):
        self._settings = settings
        self._sessions = sessions
        self._users = users
        self._identity = identity

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(days=self._settings.session_ttl_days)

    @property
    def renewal_window(self) -> timedelta:
        return timedelta(days=self._settings.session_renewal_days)

    @property
    def identity(self) -> IIdentityProvider:
        return self._identity

    def is_email_authorized(self, email: str) -> bool:
        """Check an email against the currently configured allow-list."""
        return is_email_authorized(email, self._settings.authorized_domain_list)

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    async def create_session(self, user_id: str) -> Session:
        expires_at = datetime.now(timezone.utc) + self.session_ttl
        return self._sessions.create(user_id, expires_at)

    async def validate_session(self, session_id: str) -> Optional[ResolvedSession]:
        """Resolve a session id; expired or orphaned sessions resolve to None."""
        if not session_id:
            return None

        session = self._sessions.get(session_id)
        if session is None:
            return None

        now = datetime.now(timezone.utc)
        if session.expires_at <= now:
            self._sessions.delete(session.id)
            return None

        user = self._users.get_by_id(session.user_id)
        if user is None:
            self._sessions.delete(session.id)
            return None

        if session.expires_at - now <= self.renewal_window:
            session = self._rotate(session, now)

        return ResolvedSession(session=session, user=user)

    async def invalidate_session(self, session_id: str) -> None:
        self._sessions.delete(session_id)

    def _rotate(self, session: Session, now: datetime) -> Session:
        rotated = self._sessions.create(session.user_id, now + self.session_ttl)
        self._sessions.delete(session.id)
        logger.debug(f"Rotated session for user {session.user_id}")
        return rotated.model_copy(update={"fresh": True})

    # -------------------------------------------------------------------------
    # Login
    # -------------------------------------------------------------------------

    async def login(self, code: str, code_verifier: str) -> ResolvedSession:
        tokens = await self._identity.exchange_code(code, code_verifier)
        if not tokens.refresh_token:
            logger.error("No refresh token received from identity provider")
            raise MissingRefreshTokenError()

        identity = await self._identity.fetch_profile(tokens.access_token)
        if not self.is_email_authorized(identity.email):
            logger.info(f"Rejected login for unauthorized email {identity.email}")
            raise RevokedAccessError(identity.email)

        existing = self._users.get_by_external_id(identity.external_id)
        if existing is not None:
            user = self._users.update_login(existing.id, identity, tokens)
        else:
            user = self._users.create(identity, tokens)
            logger.info(f"Created user {user.id} for {identity.email}")

        session = await self.create_session(user.id)
        return ResolvedSession(session=session, user=user)

    # -------------------------------------------------------------------------
    # Provider tokens
    # -------------------------------------------------------------------------

    async def get_access_token(self, user_id: str) -> Optional[str]:
        """
        Get a usable provider access token for a user.

        Refreshes and persists the token when it has expired. Any failure
        returns None so the feature needing the token degrades; the user's
        session is left untouched.
        """
        user = self._users.get_by_id(user_id)
        if user is None or not user.access_token:
            return None

        if not self._token_expired(user):
            return user.access_token

        if not user.refresh_token:
            return None

        try:
            tokens = await self._identity.refresh_access_token(user.refresh_token)
        except IdentityProviderError as e:
            logger.warning(f"Token refresh failed for user {user_id}: {e.message}")
            return None

        self._users.update_tokens(user_id, tokens)
        return tokens.access_token

    @staticmethod
    def _token_expired(user: UserRecord) -> bool:
        if user.token_expires_at is None:
            return False
        return user.token_expires_at <= datetime.now(timezone.utc)
