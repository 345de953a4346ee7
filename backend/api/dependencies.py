"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

The container is built by `create_app()` and stored on `app.state`, so
tests can build an app around their own container.
"""

from typing import TYPE_CHECKING, Any

from fastapi import Request

from shared.config import Settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import (
        IAuthService,
        IIdentityProvider,
        ISessionStore,
        IUserStore,
    )
    from modules.documents.interfaces import IDocumentService
    from modules.endorsements.interfaces import IEndorsementService, IEndorsementStore
    from modules.rfds.interfaces import IRfdService, IRfdStore
    from shared.memory import InMemoryDatabase


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access and cached
    for the life of the container.

    With `storage_backend="memory"` every repository shares one in-memory
    database; otherwise repositories use the Supabase service client.
    External collaborators (identity provider, document service) can be
    passed in to replace the Google implementations.
    """

    def __init__(
        self,
        settings: Settings,
        identity: "IIdentityProvider | None" = None,
        documents: "IDocumentService | None" = None,
    ) -> None:
        self.settings = settings
        self._identity = identity
        self._documents = documents
        self._memory_db: "InMemoryDatabase | None" = None
        self._supabase: Any = None
        self._session_store: "ISessionStore | None" = None
        self._user_store: "IUserStore | None" = None
        self._rfd_store: "IRfdStore | None" = None
        self._endorsement_store: "IEndorsementStore | None" = None
        self._auth_service: "IAuthService | None" = None
        self._rfd_service: "IRfdService | None" = None
        self._endorsement_service: "IEndorsementService | None" = None

    @property
    def uses_memory(self) -> bool:
        return self.settings.storage_backend == "memory"

    @property
    def memory_db(self) -> "InMemoryDatabase":
        """The shared in-memory database (memory backend only)."""
        if self._memory_db is None:
            from shared.memory import InMemoryDatabase
            self._memory_db = InMemoryDatabase()
        return self._memory_db

    @property
    def supabase(self) -> Any:
        if self._supabase is None:
            from shared.database import get_supabase_client
            self._supabase = get_supabase_client()
        return self._supabase

    # -------------------------------------------------------------------------
    # Repositories
    # -------------------------------------------------------------------------

    @property
    def session_store(self) -> "ISessionStore":
        if self._session_store is None:
            from modules.auth.repository import InMemorySessionRepository, SessionRepository
            if self.uses_memory:
                self._session_store = InMemorySessionRepository(self.memory_db)
            else:
                self._session_store = SessionRepository(self.supabase)
        return self._session_store

    @property
    def user_store(self) -> "IUserStore":
        if self._user_store is None:
            from modules.auth.repository import InMemoryUserRepository, UserRepository
            if self.uses_memory:
                self._user_store = InMemoryUserRepository(self.memory_db)
            else:
                self._user_store = UserRepository(self.supabase)
        return self._user_store

    @property
    def rfd_store(self) -> "IRfdStore":
        if self._rfd_store is None:
            from modules.rfds.repository import InMemoryRfdRepository, RfdRepository
            if self.uses_memory:
                self._rfd_store = InMemoryRfdRepository(self.memory_db)
            else:
                self._rfd_store = RfdRepository(self.supabase)
        return self._rfd_store

    @property
    def endorsement_store(self) -> "IEndorsementStore":
        if self._endorsement_store is None:
            from modules.endorsements.repository import (
                EndorsementRepository,
                InMemoryEndorsementRepository,
            )
            if self.uses_memory:
                self._endorsement_store = InMemoryEndorsementRepository(self.memory_db)
            else:
                self._endorsement_store = EndorsementRepository(self.supabase)
        return self._endorsement_store

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------

    @property
    def identity(self) -> "IIdentityProvider":
        if self._identity is None:
            from modules.auth.identity import GoogleIdentityProvider
            self._identity = GoogleIdentityProvider(self.settings)
        return self._identity

    @property
    def documents(self) -> "IDocumentService":
        if self._documents is None:
            from modules.documents.service import GoogleDriveDocumentService
            self._documents = GoogleDriveDocumentService(self.settings)
        return self._documents

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                settings=self.settings,
                sessions=self.session_store,
                users=self.user_store,
                identity=self.identity,
            )
        return self._auth_service

    @property
    def endorsements(self) -> "IEndorsementService":
        """Get the endorsement service instance."""
        if self._endorsement_service is None:
            from modules.endorsements.service import EndorsementService
            self._endorsement_service = EndorsementService(
                endorsements=self.endorsement_store,
                rfds=self.rfd_store,
            )
        return self._endorsement_service

    @property
    def rfds(self) -> "IRfdService":
        """Get the RFD service instance."""
        if self._rfd_service is None:
            from modules.rfds.service import RfdService
            self._rfd_service = RfdService(
                rfds=self.rfd_store,
                endorsements=self.endorsements,
                documents=self.documents,
            )
        return self._rfd_service


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency for the application's service container."""
    return request.app.state.container


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency for the application's settings."""
    return get_container(request).settings


def get_auth_service(request: Request) -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container(request).auth


def get_rfd_service(request: Request) -> "IRfdService":
    """FastAPI dependency for RFD service."""
    return get_container(request).rfds


def get_endorsement_service(request: Request) -> "IEndorsementService":
    """FastAPI dependency for endorsement service."""
    return get_container(request).endorsements


def get_document_service(request: Request) -> "IDocumentService":
    """FastAPI dependency for document service."""
    return get_container(request).documents
