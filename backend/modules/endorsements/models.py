"""
Endorsements module data models.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Endorsement(BaseModel):
    """A single user's endorsement of an RFD. At most one per (rfd, user)."""

    id: str
    rfd_id: str
    user_id: str
    created_at: datetime


class Endorser(BaseModel):
    """An endorsing user, as shown next to an RFD."""

    user_id: str = Field(..., description="Endorsing user ID")
    name: str = Field(..., description="Display name")
    avatar_url: Optional[str] = Field(None, description="Avatar URL")
    endorsed_at: datetime = Field(..., description="When the endorsement was made")


class EndorsementSummary(BaseModel):
    """Aggregates for one RFD, computed from the rows on every request."""

    rfd_id: str
    count: int = Field(..., ge=0, description="Number of endorsements")
    user_has_endorsed: bool = Field(..., description="Viewer endorsed this RFD")
    endorsers: list[Endorser] = Field(default_factory=list, description="Oldest first")
