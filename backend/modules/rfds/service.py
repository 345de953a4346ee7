"""
RFD service implementation.

The workflow engine: creates RFDs backed by documents, applies updates
through the role and ownership policy, records status history, and builds
read models with endorsement aggregates.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from modules.documents.interfaces import IDocumentService
from modules.documents.models import DocumentMetadata
from modules.endorsements.interfaces import IEndorsementLedger
from shared.database import is_unique_violation, violated_constraint
from shared.models import AuthenticatedUser

from .interfaces import IRfdStore
from .models import (
    CreateRfdRequest,
    RfdDetail,
    RfdListItem,
    RfdListResponse,
    RfdQuery,
    RfdRecord,
    RfdStatus,
    StatusHistoryEntry,
    StatusOption,
    UpdateRfdRequest,
)
from .policy import StatusPolicy, check_edit_details, check_status_change
from .exceptions import (
    NoChangesError,
    RfdConflictError,
    RfdDocumentConflictError,
    RfdNotFoundError,
    RfdNumberConflictError,
    RfdPermissionError,
)

logger = logging.getLogger(__name__)

DOC_ID_CONSTRAINT = "rfds_doc_id_key"


class RfdService:
    """
    Implementation of the RFD workflow.

    Every mutation runs in order: visibility check, policy check, a single
    atomic write (row plus history), then an audit log line.
    """

    def __init__(
        self,
        rfds: IRfdStore,
        endorsements: IEndorsementLedger,
        documents: IDocumentService,
    ):
        self._rfds = rfds
        self._endorsements = endorsements
        self._documents = documents

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    async def create_rfd(self, actor: AuthenticatedUser, request: CreateRfdRequest) -> RfdDetail:
        metadata = DocumentMetadata(
            title=request.title,
            author_name=actor.name,
            author_email=actor.email,
            description=request.summary or "",
            tags=request.tags,
        )
        # A document failure aborts here, before anything is written
        document = await self._documents.create_from_template(request.template_id, metadata)

        data = {
            "id": str(uuid.uuid4()),
            "title": request.title,
            "summary": request.summary,
            "author_id": actor.id,
            "doc_id": document.doc_id,
            "doc_url": document.doc_url,
            "tags": request.tags,
            "last_synced_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            rfd = self._rfds.create_rfd(data)
        except Exception as e:
            logger.error(
                f"Document {document.doc_id} was created but the RFD could not be saved; "
                f"reconcile manually: {e}"
            )
            if is_unique_violation(e):
                if violated_constraint(e) == DOC_ID_CONSTRAINT:
                    raise RfdDocumentConflictError(document.doc_id) from e
                raise RfdNumberConflictError() from e
            raise

        logger.info(f"User {actor.id} created RFD {rfd.number} ({rfd.id})")
        return self._detail(rfd, actor)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    async def update_rfd(
        self,
        actor: AuthenticatedUser,
        rfd_id: str,
        request: UpdateRfdRequest,
    ) -> RfdDetail:
        target = RfdStatus.parse(request.status) if request.status is not None else None
        rfd = self._get_visible(actor, rfd_id)

        if target is not None and target is not rfd.status:
            decision = check_status_change(actor, rfd, target, StatusPolicy.PUBLISH_DRAFT)
            if not decision.allowed:
                raise RfdPermissionError(decision.reason, rfd_id)

        edits_details = (
            request.title is not None
            or request.summary is not None
            or request.tags is not None
        )
        if edits_details:
            decision = check_edit_details(actor, rfd)
            if not decision.allowed:
                raise RfdPermissionError(decision.reason, rfd_id)

        changes = self._diff(rfd, request, target)
        return self._apply(actor, rfd, changes, request.comment)

    async def change_status(
        self,
        actor: AuthenticatedUser,
        rfd_id: str,
        status: str,
        comment: Optional[str] = None,
    ) -> RfdDetail:
        target = RfdStatus.parse(status)
        rfd = self._get_visible(actor, rfd_id)

        decision = check_status_change(actor, rfd, target, StatusPolicy.ADMIN_ONLY)
        if not decision.allowed:
            raise RfdPermissionError(decision.reason, rfd_id)

        changes = {"status": target.value} if target is not rfd.status else {}
        return self._apply(actor, rfd, changes, comment)

    def _diff(
        self,
        rfd: RfdRecord,
        request: UpdateRfdRequest,
        target: Optional[RfdStatus],
    ) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        if request.title is not None and request.title != rfd.title:
            changes["title"] = request.title
        if request.summary is not None and request.summary != rfd.summary:
            changes["summary"] = request.summary
        if request.tags is not None and request.tags != rfd.tags:
            changes["tags"] = request.tags
        if target is not None and target is not rfd.status:
            changes["status"] = target.value
        return changes

    def _apply(
        self,
        actor: AuthenticatedUser,
        rfd: RfdRecord,
        changes: dict[str, Any],
        comment: Optional[str],
    ) -> RfdDetail:
        if not changes:
            raise NoChangesError(rfd.id)

        history = None
        if "status" in changes:
            history = {"changed_by": actor.id, "comment": comment}

        updated = self._rfds.update_rfd(rfd.id, rfd.status, changes, history)
        if updated is None:
            raise RfdConflictError(rfd.id)

        if history is not None:
            logger.info(
                f"User {actor.id} moved RFD {rfd.number} from {rfd.status.value} "
                f"to {changes['status']}"
            )
        else:
            logger.info(f"User {actor.id} updated RFD {rfd.number}: {', '.join(changes)}")
        return self._detail(updated, actor)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_rfd(self, actor: AuthenticatedUser, rfd_id: str) -> RfdDetail:
        return self._detail(self._get_visible(actor, rfd_id), actor)

    async def get_rfd_by_number(self, actor: AuthenticatedUser, number: int) -> RfdDetail:
        rfd = self._rfds.get_visible_by_number(number, actor)
        if rfd is None:
            raise RfdNotFoundError(str(number))
        return self._detail(rfd, actor)

    async def list_rfds(
        self,
        actor: AuthenticatedUser,
        query: RfdQuery,
        page: int = 1,
        page_size: int = 20,
    ) -> RfdListResponse:
        offset = (page - 1) * page_size
        rfds, total = self._rfds.list_visible(actor, query, offset, page_size)

        ids = [rfd.id for rfd in rfds]
        counts, endorsed = self._endorsements.counts(ids, actor.id)
        items = [
            RfdListItem(
                **rfd.model_dump(),
                endorsement_count=counts.get(rfd.id, 0),
                user_has_endorsed=rfd.id in endorsed,
            )
            for rfd in rfds
        ]
        return RfdListResponse(
            rfds=items,
            total=total,
            page=page,
            page_size=page_size,
            has_more=offset + len(items) < total,
        )

    async def get_history(self, actor: AuthenticatedUser, rfd_id: str) -> list[StatusHistoryEntry]:
        rfd = self._get_visible(actor, rfd_id)
        return self._rfds.list_history(rfd.id)

    async def list_tags(self, actor: AuthenticatedUser) -> list[str]:
        return self._rfds.list_visible_tags(actor)

    def list_statuses(self) -> list[StatusOption]:
        return [
            StatusOption(
                value=status,
                label=status.label,
                publicly_visible=status is not RfdStatus.DRAFT,
            )
            for status in RfdStatus
        ]

    def _get_visible(self, actor: AuthenticatedUser, rfd_id: str) -> RfdRecord:
        rfd = self._rfds.get_visible(rfd_id, actor)
        if rfd is None:
            raise RfdNotFoundError(rfd_id)
        return rfd

    def _detail(self, rfd: RfdRecord, viewer: AuthenticatedUser) -> RfdDetail:
        summary = self._endorsements.summarize(rfd.id, viewer.id)
        return RfdDetail(
            **rfd.model_dump(),
            endorsement_count=summary.count,
            user_has_endorsed=summary.user_has_endorsed,
            endorsers=summary.endorsers,
        )
