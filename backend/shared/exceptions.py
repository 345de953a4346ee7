"""
Base exception classes for the RFD Index backend.

Each module should define its own exceptions that inherit from these bases.
The API layer maps each base class to an HTTP status code.
"""

from typing import Optional, Any


class RfdIndexError(Exception):
    """
    Base exception for all RFD Index errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(RfdIndexError):
    """Resource not found (or hidden from the caller)."""

    pass


class ValidationError(RfdIndexError):
    """Input validation failed."""

    pass


class AuthenticationError(RfdIndexError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(RfdIndexError):
    """Authorization failed (insufficient permissions)."""

    pass


class ConflictError(RfdIndexError):
    """The request conflicts with the current state of a resource."""

    pass


class ExternalServiceError(RfdIndexError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
