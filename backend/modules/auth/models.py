"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from shared.models import AuthenticatedUser, UserRole


class Session(BaseModel):
    """
    A server-side login session.

    The session id is the opaque credential carried by the session cookie.
    `fresh` is set only on the request that rotated the session, telling
    the gate to issue a new cookie.
    """

    id: str = Field(..., description="Opaque session identifier")
    user_id: str = Field(..., description="Owning user ID")
    expires_at: datetime = Field(..., description="Absolute expiry (UTC)")
    fresh: bool = Field(default=False, description="Rotated on this request")


class UserRecord(BaseModel):
    """
    Stored user row, including provider tokens.

    Identity is keyed by `external_id` (the provider's stable subject);
    the email is informational and may change between logins.
    """

    id: str
    external_id: str
    email: str
    name: str
    role: UserRole = UserRole.MEMBER
    avatar_url: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_authenticated_user(self) -> AuthenticatedUser:
        return AuthenticatedUser(
            id=self.id,
            email=self.email,
            name=self.name,
            role=self.role,
            avatar_url=self.avatar_url,
        )


class ExternalIdentity(BaseModel):
    """Verified profile returned by the identity provider."""

    external_id: str = Field(..., description="Provider subject identifier")
    email: str
    name: str
    avatar_url: Optional[str] = None


class OAuthTokens(BaseModel):
    """Tokens returned by the identity provider's token endpoint."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None


class AuthorizationRequest(BaseModel):
    """Everything needed to start an OAuth authorization-code flow."""

    url: str
    state: str
    code_verifier: str


class ResolvedSession(BaseModel):
    """A valid session together with its user."""

    session: Session
    user: UserRecord
