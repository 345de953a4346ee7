"""
Database client factory for Supabase.

Provides the service-role client used by all repositories, plus helpers
for recognising Postgres constraint errors surfaced through PostgREST.
"""

import re
import uuid
from typing import Optional
from supabase import create_client, Client

from .config import get_settings

# Postgres SQLSTATE codes the repositories translate into domain errors
UNIQUE_VIOLATION = "23505"
SERIALIZATION_FAILURE = "40001"

_CONSTRAINT_NAME = re.compile(r'unique constraint "([^"]+)"')

# Module-level client cache
_service_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get Supabase client with service role (bypasses RLS).

    Authorization is enforced by the API layer, so every repository uses
    this client.

    Returns:
        Supabase client configured with service role key
    """
    global _service_client

    if _service_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables."
            )
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def is_unique_violation(error: Exception) -> bool:
    """True if a PostgREST error was caused by a unique constraint."""
    return getattr(error, "code", None) == UNIQUE_VIOLATION


def is_serialization_failure(error: Exception) -> bool:
    """True if a PostgREST error reports a lost concurrent update."""
    return getattr(error, "code", None) == SERIALIZATION_FAILURE


def violated_constraint(error: Exception) -> Optional[str]:
    """Name of the unique constraint a violation reports, if it names one."""
    message = getattr(error, "message", None) or str(error)
    match = _CONSTRAINT_NAME.search(message)
    return match.group(1) if match else None


def is_uuid(value: str) -> bool:
    """True if a client-supplied id can be compared against a uuid column."""
    try:
        uuid.UUID(value)
    except (TypeError, ValueError, AttributeError):
        return False
    return True


def reset_client_cache() -> None:
    """
    Reset the cached database client.

    Useful for testing or when configuration changes.
    """
    global _service_client
    _service_client = None
