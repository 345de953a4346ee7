"""
Endorsements module interfaces.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser

from .models import Endorsement, EndorsementSummary, Endorser


@runtime_checkable
class IEndorsementStore(Protocol):
    """Persistence for endorsements. `(rfd_id, user_id)` is unique."""

    def exists(self, rfd_id: str, user_id: str) -> bool:
        ...

    def create(self, rfd_id: str, user_id: str) -> Optional[Endorsement]:
        """Insert an endorsement; None if the unique constraint rejected it."""
        ...

    def delete(self, rfd_id: str, user_id: str) -> bool:
        """Delete the pair's row. Returns False if there was none."""
        ...

    def list_endorsers(self, rfd_id: str) -> list[Endorser]:
        """Endorsers joined with their user profile, oldest first."""
        ...

    def count_by_rfd(self, rfd_ids: list[str]) -> dict[str, int]:
        ...

    def endorsed_rfd_ids(self, user_id: str, rfd_ids: list[str]) -> set[str]:
        ...


@runtime_checkable
class IEndorsementLedger(Protocol):
    """
    Read side of the ledger used to build RFD aggregates.

    Aggregates are computed from the rows on every call.
    """

    def summarize(self, rfd_id: str, viewer_id: str) -> EndorsementSummary:
        ...

    def counts(self, rfd_ids: list[str], viewer_id: str) -> tuple[dict[str, int], set[str]]:
        """Endorsement counts per RFD and the RFDs the viewer endorsed."""
        ...


@runtime_checkable
class IEndorsementService(IEndorsementLedger, Protocol):
    """Interface for endorsement operations exposed to the API layer."""

    async def endorse(self, actor: AuthenticatedUser, rfd_id: str) -> Endorsement:
        """
        Raises:
            RfdNotFoundError: If the RFD does not exist or is hidden
            AlreadyEndorsedError: If the actor already endorsed it
        """
        ...

    async def unendorse(self, actor: AuthenticatedUser, rfd_id: str) -> None:
        """
        Raises:
            RfdNotFoundError: If the RFD does not exist or is hidden
            NotEndorsedError: If the actor has not endorsed it
        """
        ...

    async def get_summary(self, actor: AuthenticatedUser, rfd_id: str) -> EndorsementSummary:
        ...
