"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
in-memory settings and container, fakes for the Google collaborators, and
factories for users and sessions.
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import ServiceContainer
from modules.auth.models import AuthorizationRequest, ExternalIdentity, OAuthTokens
from modules.documents.exceptions import DocumentServiceError
from modules.documents.models import CreatedDocument, DocumentMetadata, DocumentTemplate
from shared.config import Settings
from shared.models import AuthenticatedUser, UserRole


class FakeDocumentService:
    """Records created documents instead of calling Google Drive."""

    def __init__(self) -> None:
        self.created: list[tuple[str, DocumentMetadata]] = []
        self.templates = [DocumentTemplate(id="template-1", name="RFD Template")]
        self.template_tokens: list[Optional[str]] = []
        self.service_account = True
        self.fail = False

    @property
    def has_service_account(self) -> bool:
        return self.service_account

    async def create_from_template(
        self,
        template_id: str,
        metadata: DocumentMetadata,
    ) -> CreatedDocument:
        # Yield so concurrent creates interleave like real network calls
        await asyncio.sleep(0)
        if self.fail:
            raise DocumentServiceError("Failed to create RFD document")
        self.created.append((template_id, metadata))
        doc_id = f"doc-{len(self.created)}"
        return CreatedDocument(
            doc_id=doc_id,
            doc_url=f"https://docs.google.com/document/d/{doc_id}/edit",
            title=f"RFD: {metadata.title}",
        )

    async def list_templates(self, user_access_token: Optional[str] = None) -> list[DocumentTemplate]:
        self.template_tokens.append(user_access_token)
        return self.templates


class FakeIdentityProvider:
    """Identity provider returning canned tokens and profiles."""

    def __init__(self) -> None:
        self.identity = ExternalIdentity(
            external_id="google-alice",
            email="alice@example.com",
            name="Alice",
            avatar_url="https://example.com/alice.png",
        )
        self.tokens = OAuthTokens(
            access_token="access-1",
            refresh_token="refresh-1",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )
        self.refreshed = OAuthTokens(
            access_token="access-2",
            refresh_token="refresh-1",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )
        self.exchange_error: Optional[Exception] = None
        self.refresh_error: Optional[Exception] = None
        self.exchanged: list[tuple[str, str]] = []
        self.refresh_calls = 0

    def create_authorization_request(self) -> AuthorizationRequest:
        return AuthorizationRequest(
            url="https://accounts.google.com/o/oauth2/v2/auth?state=state-1",
            state="state-1",
            code_verifier="verifier-1",
        )

    async def exchange_code(self, code: str, code_verifier: str) -> OAuthTokens:
        self.exchanged.append((code, code_verifier))
        if self.exchange_error is not None:
            raise self.exchange_error
        return self.tokens

    async def fetch_profile(self, access_token: str) -> ExternalIdentity:
        return self.identity

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        self.refresh_calls += 1
        if self.refresh_error is not None:
            raise self.refresh_error
        return self.refreshed


@pytest.fixture
def settings() -> Settings:
    """Development settings with in-memory storage."""
    return Settings(
        _env_file=None,
        environment="development",
        storage_backend="memory",
        authorized_domains="example.com",
        google_client_id="client-id",
        google_client_secret="client-secret",
        google_service_account_key="",
    )


@pytest.fixture
def documents() -> FakeDocumentService:
    return FakeDocumentService()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def container(settings, identity, documents) -> ServiceContainer:
    return ServiceContainer(settings, identity=identity, documents=documents)


@pytest.fixture
def auth_service(container):
    return container.auth


@pytest.fixture
def rfd_service(container):
    return container.rfds


@pytest.fixture
def endorsement_service(container):
    return container.endorsements


@pytest.fixture
def make_user(container):
    """Factory creating stored users and returning them as actors."""

    def _make_user(
        name: str = "Alice",
        email: Optional[str] = None,
        role: UserRole = UserRole.MEMBER,
    ) -> AuthenticatedUser:
        identity = ExternalIdentity(
            external_id=f"google-{uuid.uuid4()}",
            email=email or f"{name.lower()}@example.com",
            name=name,
            avatar_url=f"https://example.com/{name.lower()}.png",
        )
        record = container.user_store.create(
            identity,
            OAuthTokens(access_token=f"access-{name}", refresh_token=f"refresh-{name}"),
        )
        if role is not UserRole.MEMBER:
            container.memory_db.update("users", record.id, {"role": role.value})
        return container.user_store.get_by_id(record.id).to_authenticated_user()

    return _make_user


@pytest.fixture
def alice(make_user) -> AuthenticatedUser:
    return make_user("Alice")


@pytest.fixture
def bob(make_user) -> AuthenticatedUser:
    return make_user("Bob")


@pytest.fixture
def admin(make_user) -> AuthenticatedUser:
    return make_user("Root", role=UserRole.ADMIN)


@pytest.fixture
def make_session(container):
    """Factory creating a stored session; returns its id."""

    def _make_session(user: AuthenticatedUser, expires_in: timedelta = timedelta(days=30)) -> str:
        expires_at = datetime.now(timezone.utc) + expires_in
        return container.session_store.create(user.id, expires_at).id

    return _make_session


@pytest.fixture
def app(container):
    """Create a fresh app around the test container."""
    return create_app(container=container)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def login(client, make_session, settings):
    """Log a user in on the test client by setting their session cookie."""

    def _login(user: AuthenticatedUser) -> str:
        session_id = make_session(user)
        client.cookies.set(settings.session_cookie_name, session_id)
        return session_id

    return _login
