"""
Endorsement service implementation.

Endorsements are per-user, per-RFD and idempotent in effect: a second
endorse is rejected, never double counted. The existence check before
inserting is only a fast path; the unique constraint decides.
"""

import logging

from modules.rfds.exceptions import RfdNotFoundError
from modules.rfds.interfaces import IRfdStore
from shared.models import AuthenticatedUser

from .interfaces import IEndorsementStore
from .models import Endorsement, EndorsementSummary
from .exceptions import AlreadyEndorsedError, NotEndorsedError

logger = logging.getLogger(__name__)


class EndorsementService:
    """
    Implementation of the endorsement ledger.

    Endorsing is subject to the same visibility as reading: an RFD the
    actor cannot see is reported as not found.
    """

    def __init__(self, endorsements: IEndorsementStore, rfds: IRfdStore):
        self._endorsements = endorsements
        self._rfds = rfds

    async def endorse(self, actor: AuthenticatedUser, rfd_id: str) -> Endorsement:
        self._require_visible(actor, rfd_id)

        if self._endorsements.exists(rfd_id, actor.id):
            raise AlreadyEndorsedError(rfd_id)

        endorsement = self._endorsements.create(rfd_id, actor.id)
        if endorsement is None:
            # Lost a race against a concurrent endorse by the same user
            raise AlreadyEndorsedError(rfd_id)

        logger.info(f"User {actor.id} endorsed RFD {rfd_id}")
        return endorsement

    async def unendorse(self, actor: AuthenticatedUser, rfd_id: str) -> None:
        self._require_visible(actor, rfd_id)

        if not self._endorsements.delete(rfd_id, actor.id):
            raise NotEndorsedError(rfd_id)

        logger.info(f"User {actor.id} removed endorsement of RFD {rfd_id}")

    async def get_summary(self, actor: AuthenticatedUser, rfd_id: str) -> EndorsementSummary:
        self._require_visible(actor, rfd_id)
        return self.summarize(rfd_id, actor.id)

    def summarize(self, rfd_id: str, viewer_id: str) -> EndorsementSummary:
        endorsers = self._endorsements.list_endorsers(rfd_id)
        return EndorsementSummary(
            rfd_id=rfd_id,
            count=len(endorsers),
            user_has_endorsed=any(e.user_id == viewer_id for e in endorsers),
            endorsers=endorsers,
        )

    def counts(self, rfd_ids: list[str], viewer_id: str) -> tuple[dict[str, int], set[str]]:
        return (
            self._endorsements.count_by_rfd(rfd_ids),
            self._endorsements.endorsed_rfd_ids(viewer_id, rfd_ids),
        )

    def _require_visible(self, actor: AuthenticatedUser, rfd_id: str) -> None:
        if self._rfds.get_visible(rfd_id, actor) is None:
            raise RfdNotFoundError(rfd_id)
