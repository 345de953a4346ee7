"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    ValidationError,
)


class MissingSessionError(AuthenticationError):
    """Raised when a protected operation is reached without a valid session."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_SESSION")


class RevokedAccessError(AuthorizationError):
    """Raised when a user's email domain is no longer authorized."""

    def __init__(self, email: str):
        super().__init__(
            f"Access restricted for {email}",
            code="ACCESS_REVOKED",
            details={"email": email},
        )
        self.email = email


class OAuthStateMismatchError(ValidationError):
    """Raised when the OAuth callback does not match the stored state."""

    def __init__(self):
        super().__init__("Invalid OAuth callback state", code="OAUTH_STATE_MISMATCH")


class InvalidAuthorizationCodeError(ValidationError):
    """Raised when the provider rejects the authorization code."""

    def __init__(self):
        super().__init__("Invalid authorization code", code="INVALID_AUTHORIZATION_CODE")


class IdentityProviderError(ExternalServiceError):
    """Raised when the identity provider cannot be reached or misbehaves."""

    def __init__(self, message: str = "Authentication provider error"):
        super().__init__(message, service="google_oauth", code="IDENTITY_PROVIDER_ERROR")


class MissingRefreshTokenError(IdentityProviderError):
    """Raised when the first token exchange does not return a refresh token."""

    def __init__(self):
        super().__init__("No refresh token received from identity provider")
        self.code = "MISSING_REFRESH_TOKEN"
