"""
Error response models.

Standardized error responses for the API.
"""

from pydantic import BaseModel
from typing import Optional


class ErrorResponse(BaseModel):
    """Standard error response format."""

    detail: str
    code: Optional[str] = None


class ValidationErrorResponse(BaseModel):
    """Request validation error response format."""

    detail: str = "Invalid request"
    code: str = "VALIDATION_ERROR"
    errors: list[dict]
