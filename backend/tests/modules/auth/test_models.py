"""Tests for auth models."""

from datetime import datetime, timezone

import pytest

from modules.auth.models import Session, UserRecord
from shared.models import UserRole


class TestSession:
    def test_not_fresh_by_default(self):
        session = Session(id="s-1", user_id="u-1", expires_at=datetime.now(timezone.utc))
        assert session.fresh is False

    def test_parses_iso_expiry(self):
        session = Session(id="s-1", user_id="u-1", expires_at="2030-01-01T00:00:00+00:00")
        assert session.expires_at.tzinfo is not None


class TestUserRecord:
    def test_to_authenticated_user_drops_tokens(self):
        record = UserRecord(
            id="u-1",
            external_id="google-1",
            email="alice@example.com",
            name="Alice",
            role="admin",
            access_token="secret",
            refresh_token="secret-too",
        )

        user = record.to_authenticated_user()

        assert user.role is UserRole.ADMIN
        assert user.is_admin
        assert not hasattr(user, "access_token")

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            UserRecord(id="u-1", external_id="g", email="a@example.com", name="A", role="guest")
