"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    """Closed set of user roles."""

    MEMBER = "member"
    ADMIN = "admin"


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated user in the system.

    Resolved from the session cookie by the authorization gate and made
    available to route handlers via dependency injection. This is the
    "actor" every policy decision is made about.
    """

    id: str = Field(..., description="User ID")
    email: EmailStr = Field(..., description="User's email address")
    name: str = Field(..., description="Display name")
    role: UserRole = Field(default=UserRole.MEMBER, description="User role")
    avatar_url: Optional[str] = Field(None, description="Avatar URL")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
    }

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN
