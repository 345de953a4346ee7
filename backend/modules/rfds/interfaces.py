"""
RFDs module interfaces.

The API layer and the endorsements module depend on these protocols.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser

from .models import (
    CreateRfdRequest,
    RfdDetail,
    RfdListResponse,
    RfdQuery,
    RfdRecord,
    RfdStatus,
    StatusHistoryEntry,
    StatusOption,
    UpdateRfdRequest,
)


@runtime_checkable
class IRfdStore(Protocol):
    """
    Persistence for RFDs and their status history.

    Methods taking a `viewer` apply draft visibility in the query itself.
    """

    def create_rfd(self, data: dict[str, Any]) -> RfdRecord:
        """
        Insert an RFD, allocating the next number atomically.

        Raises the storage layer's unique-violation error if the number
        or document id collides.
        """
        ...

    def get(self, rfd_id: str) -> Optional[RfdRecord]:
        ...

    def get_visible(self, rfd_id: str, viewer: AuthenticatedUser) -> Optional[RfdRecord]:
        ...

    def get_visible_by_number(
        self,
        number: int,
        viewer: AuthenticatedUser,
    ) -> Optional[RfdRecord]:
        ...

    def list_visible(
        self,
        viewer: AuthenticatedUser,
        query: RfdQuery,
        offset: int,
        limit: int,
    ) -> tuple[list[RfdRecord], int]:
        """Return one page of active, visible RFDs and the total match count."""
        ...

    def update_rfd(
        self,
        rfd_id: str,
        expected_status: RfdStatus,
        changes: dict[str, Any],
        history: Optional[dict[str, Any]] = None,
    ) -> Optional[RfdRecord]:
        """
        Apply changes and append a history entry in one transaction.

        The update only applies while the RFD still has `expected_status`;
        returns None if another request changed it first.
        """
        ...

    def list_history(self, rfd_id: str) -> list[StatusHistoryEntry]:
        ...

    def list_visible_tags(self, viewer: AuthenticatedUser) -> list[str]:
        ...


@runtime_checkable
class IRfdService(Protocol):
    """
    Interface for the RFD workflow.

    Every mutation runs authorize, policy check, mutate, then audit log.
    """

    async def create_rfd(self, actor: AuthenticatedUser, request: CreateRfdRequest) -> RfdDetail:
        """
        Create the backing document, then persist a draft RFD.

        Raises:
            DocumentServiceError: If the document could not be created
            RfdNumberConflictError: If number allocation collided
        """
        ...

    async def update_rfd(
        self,
        actor: AuthenticatedUser,
        rfd_id: str,
        request: UpdateRfdRequest,
    ) -> RfdDetail:
        """
        Update details and/or status.

        Raises:
            InvalidRfdStatusError: If the status is not a known value
            RfdNotFoundError: If the RFD does not exist or is hidden
            RfdPermissionError: If a policy check denies the change
            NoChangesError: If nothing would change
            RfdConflictError: If a concurrent request changed the status
        """
        ...

    async def change_status(
        self,
        actor: AuthenticatedUser,
        rfd_id: str,
        status: str,
        comment: Optional[str] = None,
    ) -> RfdDetail:
        """Admin-only status change."""
        ...

    async def get_rfd(self, actor: AuthenticatedUser, rfd_id: str) -> RfdDetail:
        ...

    async def get_rfd_by_number(self, actor: AuthenticatedUser, number: int) -> RfdDetail:
        ...

    async def list_rfds(
        self,
        actor: AuthenticatedUser,
        query: RfdQuery,
        page: int = 1,
        page_size: int = 20,
    ) -> RfdListResponse:
        ...

    async def get_history(self, actor: AuthenticatedUser, rfd_id: str) -> list[StatusHistoryEntry]:
        ...

    async def list_tags(self, actor: AuthenticatedUser) -> list[str]:
        ...

    def list_statuses(self) -> list[StatusOption]:
        ...
