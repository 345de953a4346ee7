"""
RFD API endpoints.

Provides REST endpoints for creating, reading, listing and updating RFDs,
plus status history, tags, templates and status options.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.middleware.auth import get_current_user
from api.dependencies import get_auth_service, get_document_service, get_rfd_service
from modules.auth.interfaces import IAuthService
from modules.documents.interfaces import IDocumentService
from modules.documents.models import TemplateListResponse
from shared.models import AuthenticatedUser

from .interfaces import IRfdService
from .models import (
    CreateRfdRequest,
    RfdDetail,
    RfdListResponse,
    RfdQuery,
    RfdStatus,
    StatusChangeRequest,
    StatusHistoryEntry,
    StatusOption,
    TagListResponse,
    UpdateRfdRequest,
)

router = APIRouter()


@router.post("", response_model=RfdDetail, status_code=201)
async def create_rfd(
    request: CreateRfdRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IRfdService = Depends(get_rfd_service),
) -> RfdDetail:
    """
    Create a new RFD.

    Copies the chosen template into a new document, then saves the RFD
    as a draft with the next available number.
    """
    return await service.create_rfd(user, request)


@router.get("", response_model=RfdListResponse)
async def list_rfds(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(default=20, ge=1, le=100, description="Items per page"),
    status: Optional[str] = Query(default=None, description="Filter by status"),
    author: Optional[str] = Query(default=None, description="Filter by author ID"),
    tag: Optional[str] = Query(default=None, description="Filter by tag"),
    include_drafts: bool = Query(default=False, description="Admins: include all drafts"),
    user: AuthenticatedUser = Depends(get_current_user),
    service: IRfdService = Depends(get_rfd_service),
) -> RfdListResponse:
    """
    List RFDs visible to the current user.

    Returns paginated results, most recently updated first. Drafts are
    only listed for their author unless an admin asks for them.
    """
    query = RfdQuery(
        status=RfdStatus.parse(status) if status is not None else None,
        author_id=author,
        tag=tag,
        include_drafts=include_drafts,
    )
    return await service.list_rfds(user, query, page, page_size)


@router.get("/tags", response_model=TagListResponse)
async def list_tags(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IRfdService = Depends(get_rfd_service),
) -> TagListResponse:
    """Unique tags across the RFDs the current user can see, sorted."""
    return TagListResponse(tags=await service.list_tags(user))


@router.get("/statuses", response_model=list[StatusOption])
async def list_statuses(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IRfdService = Depends(get_rfd_service),
) -> list[StatusOption]:
    return service.list_statuses()


@router.get("/templates", response_model=TemplateListResponse)
async def list_templates(
    user: AuthenticatedUser = Depends(get_current_user),
    documents: IDocumentService = Depends(get_document_service),
    auth: IAuthService = Depends(get_auth_service),
) -> TemplateListResponse:
    """
    List document templates.

    Uses the service account when configured, otherwise the user's own
    Google access token (refreshed if it has expired).
    """
    token = None
    if not documents.has_service_account:
        token = await auth.get_access_token(user.id)
    return TemplateListResponse(templates=await documents.list_templates(token))


@router.put("/status", response_model=RfdDetail)
async def change_status(
    request: StatusChangeRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IRfdService = Depends(get_rfd_service),
) -> RfdDetail:
    """
    Change an RFD's status. Administrators only.
    """
    return await service.change_status(user, request.rfd_id, request.status, request.comment)


@router.get("/number/{number}", response_model=RfdDetail)
async def get_rfd_by_number(
    number: int,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IRfdService = Depends(get_rfd_service),
) -> RfdDetail:
    return await service.get_rfd_by_number(user, number)


@router.get("/{rfd_id}", response_model=RfdDetail)
async def get_rfd(
    rfd_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IRfdService = Depends(get_rfd_service),
) -> RfdDetail:
    """
    Get an RFD with its author and endorsements.
    """
    return await service.get_rfd(user, rfd_id)


@router.put("/{rfd_id}", response_model=RfdDetail)
async def update_rfd(
    rfd_id: str,
    request: UpdateRfdRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IRfdService = Depends(get_rfd_service),
) -> RfdDetail:
    """
    Update an RFD's details and/or status.

    Authors may move their own RFD between draft and open for review;
    every other transition needs an administrator.
    """
    return await service.update_rfd(user, rfd_id, request)


@router.get("/{rfd_id}/history", response_model=list[StatusHistoryEntry])
async def get_history(
    rfd_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IRfdService = Depends(get_rfd_service),
) -> list[StatusHistoryEntry]:
    """Status history, oldest first."""
    return await service.get_history(user, rfd_id)
