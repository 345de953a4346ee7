"""
Session and user repositories.

Supabase-backed implementations for production and in-memory
implementations for development and testing. Both map rows to the
auth module's Pydantic models; neither performs authorization checks.
"""

import secrets
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from shared.memory import InMemoryDatabase
from shared.repository import BaseRepository

from .models import ExternalIdentity, OAuthTokens, Session, UserRecord

SESSION_ID_BYTES = 32


def generate_session_id() -> str:
    return secrets.token_urlsafe(SESSION_ID_BYTES)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _login_fields(identity: ExternalIdentity, tokens: OAuthTokens) -> dict[str, Any]:
    data: dict[str, Any] = {
        "email": identity.email,
        "name": identity.name,
        "avatar_url": identity.avatar_url,
        "access_token": tokens.access_token,
        "token_expires_at": _iso(tokens.expires_at),
    }
    # Providers only return a refresh token on consent; keep the old one otherwise
    if tokens.refresh_token:
        data["refresh_token"] = tokens.refresh_token
    return data


def _token_fields(tokens: OAuthTokens) -> dict[str, Any]:
    data: dict[str, Any] = {
        "access_token": tokens.access_token,
        "token_expires_at": _iso(tokens.expires_at),
    }
    if tokens.refresh_token:
        data["refresh_token"] = tokens.refresh_token
    return data


class SessionRepository(BaseRepository[Session]):
    """Supabase-backed session store (`sessions` table)."""

    def create(self, user_id: str, expires_at: datetime) -> Session:
        data = {
            "id": generate_session_id(),
            "user_id": user_id,
            "expires_at": expires_at.isoformat(),
        }
        result = self._db.table("sessions").insert(data).execute()
        return self._map_to_session(result.data[0])

    def get(self, session_id: str) -> Optional[Session]:
        result = self._db.table("sessions").select("*").eq("id", session_id).execute()
        if not result.data:
            return None
        return self._map_to_session(result.data[0])

    def delete(self, session_id: str) -> None:
        self._db.table("sessions").delete().eq("id", session_id).execute()

    def _map_to_session(self, data: dict[str, Any]) -> Session:
        return Session(
            id=data["id"],
            user_id=str(data["user_id"]),
            expires_at=data["expires_at"],
        )


class UserRepository(BaseRepository[UserRecord]):
    """Supabase-backed user store (`users` table)."""

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        result = self._db.table("users").select("*").eq("id", user_id).execute()
        if not result.data:
            return None
        return UserRecord(**result.data[0])

    def get_by_external_id(self, external_id: str) -> Optional[UserRecord]:
        result = self._db.table("users").select("*").eq("external_id", external_id).execute()
        if not result.data:
            return None
        return UserRecord(**result.data[0])

    def create(self, identity: ExternalIdentity, tokens: OAuthTokens) -> UserRecord:
        data = {
            "id": str(uuid.uuid4()),
            "external_id": identity.external_id,
            **_login_fields(identity, tokens),
        }
        result = self._db.table("users").insert(data).execute()
        return UserRecord(**result.data[0])

    def update_login(
        self,
        user_id: str,
        identity: ExternalIdentity,
        tokens: OAuthTokens,
    ) -> UserRecord:
        data = {**_login_fields(identity, tokens), "updated_at": self._now_iso()}
        result = self._db.table("users").update(data).eq("id", user_id).execute()
        return UserRecord(**result.data[0])

    def update_tokens(self, user_id: str, tokens: OAuthTokens) -> None:
        data = {**_token_fields(tokens), "updated_at": self._now_iso()}
        self._db.table("users").update(data).eq("id", user_id).execute()


class InMemorySessionRepository:
    """Session store backed by the in-memory database."""

    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def create(self, user_id: str, expires_at: datetime) -> Session:
        row = self._db.insert("sessions", {
            "id": generate_session_id(),
            "user_id": user_id,
            "expires_at": expires_at,
        })
        return Session(**row)

    def get(self, session_id: str) -> Optional[Session]:
        row = self._db.get("sessions", session_id)
        return Session(**row) if row else None

    def delete(self, session_id: str) -> None:
        self._db.delete("sessions", session_id)


class InMemoryUserRepository:
    """User store backed by the in-memory database."""

    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        row = self._db.get("users", user_id)
        return UserRecord(**row) if row else None

    def get_by_external_id(self, external_id: str) -> Optional[UserRecord]:
        rows = self._db.select("users", lambda r: r["external_id"] == external_id)
        return UserRecord(**rows[0]) if rows else None

    def create(self, identity: ExternalIdentity, tokens: OAuthTokens) -> UserRecord:
        now = datetime.now(timezone.utc)
        row = self._db.insert("users", {
            "id": str(uuid.uuid4()),
            "external_id": identity.external_id,
            "role": "member",
            "refresh_token": None,
            "created_at": now,
            "updated_at": now,
            **_login_fields(identity, tokens),
        })
        return UserRecord(**row)

    def update_login(
        self,
        user_id: str,
        identity: ExternalIdentity,
        tokens: OAuthTokens,
    ) -> UserRecord:
        changes = {**_login_fields(identity, tokens), "updated_at": datetime.now(timezone.utc)}
        row = self._db.update("users", user_id, changes)
        return UserRecord(**row)

    def update_tokens(self, user_id: str, tokens: OAuthTokens) -> None:
        changes = {**_token_fields(tokens), "updated_at": datetime.now(timezone.utc)}
        self._db.update("users", user_id, changes)
