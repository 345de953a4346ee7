"""Every wired implementation satisfies its module protocol."""

import pytest

from modules.auth.interfaces import IAuthService, IIdentityProvider, ISessionStore, IUserStore
from modules.documents.interfaces import IDocumentService
from modules.endorsements.interfaces import (
    IEndorsementLedger,
    IEndorsementService,
    IEndorsementStore,
)
from modules.rfds.interfaces import IRfdService, IRfdStore


@pytest.mark.parametrize("attribute,protocol", [
    ("session_store", ISessionStore),
    ("user_store", IUserStore),
    ("rfd_store", IRfdStore),
    ("endorsement_store", IEndorsementStore),
    ("auth", IAuthService),
    ("rfds", IRfdService),
    ("endorsements", IEndorsementService),
    ("endorsements", IEndorsementLedger),
    ("identity", IIdentityProvider),
    ("documents", IDocumentService),
])
def test_container_members_implement_protocols(container, attribute, protocol):
    assert isinstance(getattr(container, attribute), protocol)


def test_google_implementations(settings):
    from modules.auth.identity import GoogleIdentityProvider
    from modules.documents.service import GoogleDriveDocumentService

    assert isinstance(GoogleIdentityProvider(settings), IIdentityProvider)
    assert isinstance(GoogleDriveDocumentService(settings), IDocumentService)


def test_supabase_repositories():
    from unittest.mock import MagicMock

    from modules.auth.repository import SessionRepository, UserRepository
    from modules.endorsements.repository import EndorsementRepository
    from modules.rfds.repository import RfdRepository

    db = MagicMock()
    assert isinstance(SessionRepository(db), ISessionStore)
    assert isinstance(UserRepository(db), IUserStore)
    assert isinstance(RfdRepository(db), IRfdStore)
    assert isinstance(EndorsementRepository(db), IEndorsementStore)
