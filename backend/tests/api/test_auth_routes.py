"""Tests for the login, logout and restricted endpoints."""

from modules.auth.exceptions import InvalidAuthorizationCodeError
from modules.auth.models import ExternalIdentity

COOKIE = "auth_session"


def start_login(client):
    client.cookies.set("google_oauth_state", "state-1")
    client.cookies.set("google_code_verifier", "verifier-1")


class TestGoogleLogin:
    def test_redirects_to_provider_with_state_cookies(self, client):
        response = client.get("/auth/google", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"].startswith("https://accounts.google.com/")
        assert response.cookies.get("google_oauth_state") == "state-1"
        assert response.cookies.get("google_code_verifier") == "verifier-1"

    def test_callback_opens_session(self, client, container, identity):
        start_login(client)

        response = client.get(
            "/auth/google/callback",
            params={"code": "code-1", "state": "state-1"},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        assert identity.exchanged == [("code-1", "verifier-1")]

        session_id = response.cookies.get(COOKIE)
        session = container.session_store.get(session_id)
        user = container.user_store.get_by_id(session.user_id)
        assert user.external_id == "google-alice"
        assert user.refresh_token == "refresh-1"

        assert client.get("/api/users/me").json()["email"] == "alice@example.com"

    def test_state_mismatch(self, client, identity):
        start_login(client)

        response = client.get(
            "/auth/google/callback",
            params={"code": "code-1", "state": "forged"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "OAUTH_STATE_MISMATCH"
        assert identity.exchanged == []

    def test_missing_state_cookie(self, client):
        response = client.get(
            "/auth/google/callback",
            params={"code": "code-1", "state": "state-1"},
        )

        assert response.status_code == 400

    def test_rejected_code(self, client, identity):
        identity.exchange_error = InvalidAuthorizationCodeError()
        start_login(client)

        response = client.get(
            "/auth/google/callback",
            params={"code": "stale", "state": "state-1"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_AUTHORIZATION_CODE"

    def test_unauthorized_domain_goes_to_restricted(self, client, container, identity):
        identity.identity = ExternalIdentity(
            external_id="google-mallory",
            email="mallory@elsewhere.org",
            name="Mallory",
        )
        start_login(client)

        response = client.get(
            "/auth/google/callback",
            params={"code": "code-1", "state": "state-1"},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/restricted?email=mallory%40elsewhere.org"
        assert response.cookies.get(COOKIE) is None
        assert container.user_store.get_by_external_id("google-mallory") is None


class TestLogout:
    def test_logout_deletes_session(self, client, container, login, alice):
        session_id = login(alice)

        response = client.post("/auth/logout", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        assert container.session_store.get(session_id) is None
        assert client.get("/api/users/me").status_code == 401

    def test_anonymous_logout(self, client):
        response = client.post("/auth/logout", follow_redirects=False)

        assert response.status_code == 302


def test_restricted_page(client):
    response = client.get("/restricted", params={"email": "mallory@elsewhere.org"})

    assert response.status_code == 200
    assert response.json()["email"] == "mallory@elsewhere.org"
