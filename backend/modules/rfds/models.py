"""
RFDs module data models.

These models define the RFD record, its status lifecycle, status history,
and the request and response shapes of the RFD API.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from modules.endorsements.models import Endorser

from .exceptions import InvalidRfdStatusError

MAX_TAGS = 20
MAX_TAG_LENGTH = 64


class RfdStatus(str, Enum):
    """RFD lifecycle status."""

    DRAFT = "draft"                      # Visible only to its author
    OPEN_FOR_REVIEW = "open_for_review"
    ACCEPTED = "accepted"
    ENFORCED = "enforced"
    REJECTED = "rejected"
    RETRACTED = "retracted"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> "RfdStatus":
        """
        Parse a status received from a client.

        Only canonical values are accepted; legacy synonyms are a storage
        concern and are rejected here.

        Raises:
            InvalidRfdStatusError: If the value is outside the closed set
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidRfdStatusError(value)

    @classmethod
    def from_stored(cls, value: Any) -> "RfdStatus":
        """Normalize a stored status, mapping legacy synonyms."""
        if isinstance(value, cls):
            return value
        return cls(LEGACY_STATUSES.get(value, value))


# Older rows use these values; they are normalized on every read
LEGACY_STATUSES: dict[str, RfdStatus] = {
    "review": RfdStatus.OPEN_FOR_REVIEW,
    "approved": RfdStatus.ACCEPTED,
    "archived": RfdStatus.RETRACTED,
}

STATUS_LABELS: dict[RfdStatus, str] = {
    RfdStatus.DRAFT: "Draft",
    RfdStatus.OPEN_FOR_REVIEW: "Open for Review",
    RfdStatus.ACCEPTED: "Accepted",
    RfdStatus.ENFORCED: "Enforced",
    RfdStatus.REJECTED: "Rejected",
    RfdStatus.RETRACTED: "Retracted",
}


def stored_values(status: RfdStatus) -> list[str]:
    """All values a status may be stored as, for query filters."""
    return [status.value] + [
        legacy for legacy, canonical in LEGACY_STATUSES.items() if canonical is status
    ]


def normalize_tags(tags: list[str]) -> list[str]:
    """
    Clean a tag list from a client.

    Trims each tag and drops empty strings and duplicates (first occurrence
    wins). Raises ValueError when a tag or the list is too long.
    """
    cleaned: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if not tag or tag in cleaned:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"Tags must be at most {MAX_TAG_LENGTH} characters")
        cleaned.append(tag)

    if len(cleaned) > MAX_TAGS:
        raise ValueError(f"An RFD can have at most {MAX_TAGS} tags")
    return cleaned


class RfdRecord(BaseModel):
    """
    A stored RFD.

    `status` and `tags` are validated on the way in: legacy statuses are
    normalized and tags that are not a list of strings are rejected.
    """

    id: str = Field(..., description="RFD ID (UUID)")
    number: int = Field(..., ge=1, description="Sequential RFD number")
    title: str = Field(..., description="RFD title")
    summary: Optional[str] = Field(None, description="Short summary")
    status: RfdStatus = Field(..., description="Current status")
    author_id: str = Field(..., description="Author user ID")
    author_name: Optional[str] = Field(None, description="Author display name")
    author_email: Optional[str] = Field(None, description="Author email")
    doc_id: Optional[str] = Field(None, description="Backing document ID")
    doc_url: Optional[str] = Field(None, description="Backing document URL")
    tags: list[str] = Field(default_factory=list, description="Tags")
    is_active: bool = Field(default=True, description="Excluded from listings when False")
    created_at: datetime = Field(..., description="Creation time")
    updated_at: datetime = Field(..., description="Last update time")
    last_synced_at: Optional[datetime] = Field(None, description="Last document sync")

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> RfdStatus:
        return RfdStatus.from_stored(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _check_stored_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
            raise ValueError("tags must be a list of strings")
        return value


class RfdListItem(RfdRecord):
    """An RFD in a listing, with endorsement aggregates."""

    endorsement_count: int = Field(default=0, description="Number of endorsements")
    user_has_endorsed: bool = Field(default=False, description="Viewer endorsed this RFD")


class RfdDetail(RfdListItem):
    """A single RFD with its endorsers, oldest first."""

    endorsers: list[Endorser] = Field(default_factory=list, description="Endorsers")


class RfdListResponse(BaseModel):
    """Paginated list of RFDs."""

    rfds: list[RfdListItem] = Field(..., description="RFD items")
    total: int = Field(..., description="Total count")
    page: int = Field(..., description="Current page")
    page_size: int = Field(..., description="Items per page")
    has_more: bool = Field(..., description="Whether more pages exist")


class RfdQuery(BaseModel):
    """Listing filters. Visibility is applied on top of these."""

    status: Optional[RfdStatus] = None
    author_id: Optional[str] = None
    tag: Optional[str] = None
    include_drafts: bool = Field(
        default=False,
        description="Admins only: include other users' drafts",
    )


class StatusHistoryEntry(BaseModel):
    """One status transition. History is append-only."""

    id: str
    rfd_id: str
    from_status: Optional[RfdStatus] = None
    to_status: RfdStatus
    changed_by: str
    changed_by_name: Optional[str] = None
    comment: Optional[str] = None
    created_at: datetime

    @field_validator("from_status", "to_status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Optional[RfdStatus]:
        if value is None:
            return None
        return RfdStatus.from_stored(value)


class CreateRfdRequest(BaseModel):
    """Request to create a new RFD from a document template."""

    title: str = Field(..., min_length=1, max_length=200, description="RFD title")
    summary: Optional[str] = Field(None, max_length=2000, description="Short summary")
    template_id: str = Field(..., min_length=1, description="Document template ID")
    tags: list[str] = Field(default_factory=list, description="Tags")

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        return normalize_tags(value)


class UpdateRfdRequest(BaseModel):
    """
    Partial update of an RFD.

    Omitted fields are left unchanged. `status` is kept as a plain string
    so that unknown values surface as an RFD validation error.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    summary: Optional[str] = Field(None, max_length=2000)
    status: Optional[str] = None
    tags: Optional[list[str]] = None
    comment: Optional[str] = Field(None, max_length=2000, description="Status change comment")

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("Title cannot be empty")
        return value

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return None
        return normalize_tags(value)


class StatusChangeRequest(BaseModel):
    """Request body of the admin-only status endpoint."""

    rfd_id: str = Field(..., min_length=1)
    status: str
    comment: Optional[str] = Field(None, max_length=2000)


class StatusOption(BaseModel):
    """A selectable status with its display label."""

    value: RfdStatus
    label: str
    publicly_visible: bool


class TagListResponse(BaseModel):
    tags: list[str]
