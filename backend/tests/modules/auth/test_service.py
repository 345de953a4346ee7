"""Tests for the auth service: sessions, login and token refresh."""

import httpx
import pytest
from datetime import datetime, timedelta, timezone

from modules.auth.exceptions import (
    IdentityProviderError,
    InvalidAuthorizationCodeError,
    MissingRefreshTokenError,
    RevokedAccessError,
)
from modules.auth.identity import GoogleIdentityProvider
from modules.auth.models import OAuthTokens
from modules.auth.service import AuthService


class TestValidateSession:
    @pytest.mark.asyncio
    async def test_valid_session_resolves_user(self, auth_service, alice, make_session):
        session_id = make_session(alice)

        resolved = await auth_service.validate_session(session_id)

        assert resolved is not None
        assert resolved.session.id == session_id
        assert resolved.session.fresh is False
        assert resolved.user.id == alice.id

    @pytest.mark.asyncio
    async def test_unknown_session(self, auth_service):
        assert await auth_service.validate_session("no-such-session") is None

    @pytest.mark.asyncio
    async def test_empty_session_id(self, auth_service):
        assert await auth_service.validate_session("") is None

    @pytest.mark.asyncio
    async def test_expired_session_is_deleted(self, auth_service, container, alice, make_session):
        session_id = make_session(alice, expires_in=timedelta(seconds=-1))

        assert await auth_service.validate_session(session_id) is None
        assert container.session_store.get(session_id) is None

    @pytest.mark.asyncio
    async def test_session_inside_renewal_window_is_rotated(
        self, auth_service, container, alice, make_session
    ):
        session_id = make_session(alice, expires_in=timedelta(days=3))

        resolved = await auth_service.validate_session(session_id)

        assert resolved.session.fresh is True
        assert resolved.session.id != session_id
        assert resolved.session.expires_at > datetime.now(timezone.utc) + timedelta(days=29)
        assert container.session_store.get(session_id) is None
        assert container.session_store.get(resolved.session.id) is not None

    @pytest.mark.asyncio
    async def test_session_outside_renewal_window_is_kept(self, auth_service, alice, make_session):
        session_id = make_session(alice, expires_in=timedelta(days=20))

        resolved = await auth_service.validate_session(session_id)

        assert resolved.session.id == session_id
        assert resolved.session.fresh is False

    @pytest.mark.asyncio
    async def test_session_of_deleted_user(self, auth_service, container, make_session, alice):
        session_id = make_session(alice)
        container.memory_db.delete("users", alice.id)

        assert await auth_service.validate_session(session_id) is None
        assert container.session_store.get(session_id) is None

    @pytest.mark.asyncio
    async def test_invalidate_session(self, auth_service, container, alice, make_session):
        session_id = make_session(alice)

        await auth_service.invalidate_session(session_id)

        assert container.session_store.get(session_id) is None


class TestEmailAuthorization:
    def test_uses_current_settings(self, auth_service, settings):
        assert auth_service.is_email_authorized("alice@example.com")

        settings.authorized_domains = "other.org"

        assert not auth_service.is_email_authorized("alice@example.com")


class TestLogin:
    @pytest.mark.asyncio
    async def test_first_login_creates_user_and_session(self, auth_service, container, identity):
        resolved = await auth_service.login("code-1", "verifier-1")

        assert identity.exchanged == [("code-1", "verifier-1")]
        assert resolved.user.external_id == "google-alice"
        assert resolved.user.role.value == "member"
        assert resolved.user.refresh_token == "refresh-1"
        assert container.session_store.get(resolved.session.id) is not None

    @pytest.mark.asyncio
    async def test_repeat_login_updates_existing_user(self, auth_service, identity):
        first = await auth_service.login("code-1", "verifier-1")
        identity.identity = identity.identity.model_copy(
            update={"email": "alice.new@example.com", "name": "Alice N."}
        )
        identity.tokens = OAuthTokens(access_token="access-9", refresh_token="refresh-9")

        second = await auth_service.login("code-2", "verifier-2")

        assert second.user.id == first.user.id
        assert second.user.email == "alice.new@example.com"
        assert second.user.name == "Alice N."
        assert second.user.access_token == "access-9"
        assert second.session.id != first.session.id

    @pytest.mark.asyncio
    async def test_missing_refresh_token_fails(self, auth_service, container, identity):
        identity.tokens = OAuthTokens(access_token="access-1")

        with pytest.raises(MissingRefreshTokenError):
            await auth_service.login("code-1", "verifier-1")

        assert list(container.memory_db.rows("users")) == []

    @pytest.mark.asyncio
    async def test_unauthorized_domain_rejected(self, auth_service, container, identity):
        identity.identity = identity.identity.model_copy(update={"email": "mallory@evil.org"})

        with pytest.raises(RevokedAccessError) as exc_info:
            await auth_service.login("code-1", "verifier-1")

        assert exc_info.value.email == "mallory@evil.org"
        assert list(container.memory_db.rows("sessions")) == []

    @pytest.mark.asyncio
    async def test_rejected_code_propagates(self, auth_service, identity):
        identity.exchange_error = InvalidAuthorizationCodeError()

        with pytest.raises(InvalidAuthorizationCodeError):
            await auth_service.login("bad-code", "verifier-1")


class TestGetAccessToken:
    @pytest.mark.asyncio
    async def test_returns_valid_stored_token(self, auth_service, identity):
        resolved = await auth_service.login("code-1", "verifier-1")

        token = await auth_service.get_access_token(resolved.user.id)

        assert token == "access-1"
        assert identity.refresh_calls == 0

    @pytest.mark.asyncio
    async def test_refreshes_expired_token(self, auth_service, container, identity):
        identity.tokens = OAuthTokens(
            access_token="access-1",
            refresh_token="refresh-1",
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
        resolved = await auth_service.login("code-1", "verifier-1")

        token = await auth_service.get_access_token(resolved.user.id)

        assert token == "access-2"
        assert identity.refresh_calls == 1
        assert container.user_store.get_by_id(resolved.user.id).access_token == "access-2"

    @pytest.mark.asyncio
    async def test_refresh_failure_returns_none_and_keeps_session(
        self, auth_service, container, identity
    ):
        identity.tokens = OAuthTokens(
            access_token="access-1",
            refresh_token="refresh-1",
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
        identity.refresh_error = IdentityProviderError()
        resolved = await auth_service.login("code-1", "verifier-1")

        assert await auth_service.get_access_token(resolved.user.id) is None
        assert container.session_store.get(resolved.session.id) is not None

    @pytest.mark.asyncio
    async def test_revoked_refresh_token_returns_none(self, auth_service, container, identity, settings):
        identity.tokens = OAuthTokens(
            access_token="access-1",
            refresh_token="refresh-1",
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
        resolved = await auth_service.login("code-1", "verifier-1")

        def handler(request):
            return httpx.Response(400, json={"error": "invalid_grant"})

        google = GoogleIdentityProvider(settings, transport=httpx.MockTransport(handler))
        service = AuthService(settings, container.session_store, container.user_store, google)

        assert await service.get_access_token(resolved.user.id) is None
        assert container.session_store.get(resolved.session.id) is not None

    @pytest.mark.asyncio
    async def test_unknown_user(self, auth_service):
        assert await auth_service.get_access_token("missing") is None
