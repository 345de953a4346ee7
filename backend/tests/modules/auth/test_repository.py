"""Tests for the Supabase-backed session and user repositories."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from modules.auth.models import ExternalIdentity, OAuthTokens
from modules.auth.repository import SessionRepository, UserRepository


def user_row(**overrides) -> dict:
    now = datetime.now(timezone.utc).isoformat()
    row = {
        "id": "user-1",
        "external_id": "google-1",
        "email": "alice@example.com",
        "name": "Alice",
        "role": "member",
        "avatar_url": None,
        "access_token": "access-1",
        "refresh_token": "refresh-1",
        "token_expires_at": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


class TestSessionRepository:
    def test_create_generates_opaque_id(self):
        db = MagicMock()
        expires_at = datetime.now(timezone.utc) + timedelta(days=30)
        db.table.return_value.insert.return_value.execute.return_value = MagicMock(
            data=[{"id": "stored-id", "user_id": "user-1", "expires_at": expires_at.isoformat()}]
        )

        session = SessionRepository(db).create("user-1", expires_at)

        inserted = db.table.return_value.insert.call_args[0][0]
        assert len(inserted["id"]) >= 32
        assert inserted["user_id"] == "user-1"
        assert session.id == "stored-id"
        assert session.user_id == "user-1"
        db.table.assert_called_with("sessions")

    def test_get_missing(self):
        db = MagicMock()
        db.table.return_value.select.return_value.eq.return_value.execute.return_value = MagicMock(data=[])

        assert SessionRepository(db).get("nope") is None

    def test_delete(self):
        db = MagicMock()

        SessionRepository(db).delete("session-1")

        db.table.return_value.delete.return_value.eq.assert_called_once_with("id", "session-1")


class TestUserRepository:
    def test_get_by_external_id(self):
        db = MagicMock()
        db.table.return_value.select.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[user_row(role="admin")]
        )

        user = UserRepository(db).get_by_external_id("google-1")

        db.table.return_value.select.return_value.eq.assert_called_once_with("external_id", "google-1")
        assert user.role.value == "admin"

    def test_update_login_keeps_refresh_token_when_none_issued(self):
        db = MagicMock()
        db.table.return_value.update.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[user_row()]
        )
        identity = ExternalIdentity(external_id="google-1", email="alice@example.com", name="Alice")

        UserRepository(db).update_login("user-1", identity, OAuthTokens(access_token="access-2"))

        update = db.table.return_value.update.call_args[0][0]
        assert update["access_token"] == "access-2"
        assert "refresh_token" not in update
