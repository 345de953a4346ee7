"""
Authentication module.

Handles login sessions, Google OAuth login, the email-domain allow-list,
and provider token refresh.

Public API:
- IAuthService: Interface for auth operations
- Session, UserRecord: Session and stored user models
- is_email_authorized: Allow-list check
- Auth exceptions: MissingSessionError, RevokedAccessError, etc.
"""

from .interfaces import IAuthService, IIdentityProvider, ISessionStore, IUserStore
from .models import (
    ExternalIdentity,
    OAuthTokens,
    ResolvedSession,
    Session,
    UserRecord,
)
from .allowlist import is_email_authorized
from .exceptions import (
    MissingSessionError,
    RevokedAccessError,
    OAuthStateMismatchError,
    InvalidAuthorizationCodeError,
    IdentityProviderError,
    MissingRefreshTokenError,
)

__all__ = [
    # Interfaces
    "IAuthService",
    "IIdentityProvider",
    "ISessionStore",
    "IUserStore",
    # Models
    "ExternalIdentity",
    "OAuthTokens",
    "ResolvedSession",
    "Session",
    "UserRecord",
    # Allow-list
    "is_email_authorized",
    # Exceptions
    "MissingSessionError",
    "RevokedAccessError",
    "OAuthStateMismatchError",
    "InvalidAuthorizationCodeError",
    "IdentityProviderError",
    "MissingRefreshTokenError",
]
