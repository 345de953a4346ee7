"""
Role and ownership policy for RFDs.

Pure decision functions: no I/O and no exceptions for ordinary denials.
The `can_*` functions answer yes or no; the `check_*` functions also say
why, in words suitable for showing to the user.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel

from shared.models import AuthenticatedUser, UserRole

from .models import RfdRecord, RfdStatus

DENY_OWN_DRAFT = 'You can only change draft RFDs to "Open for Review"'
DENY_OWN_REVIEW = 'You can only change this RFD back to "Draft"'
DENY_OWN_OTHER = "Only administrators can change this RFD status"
DENY_NOT_OWNER = "Only the creator or administrators can change RFD status"
DENY_ADMIN_ONLY = "Only administrators can change RFD status"
DENY_EDIT_DETAILS = "Only the RFD owner or administrator can edit RFD details"

# Transitions an author may make on their own RFD
AUTHOR_TRANSITIONS: dict[RfdStatus, RfdStatus] = {
    RfdStatus.DRAFT: RfdStatus.OPEN_FOR_REVIEW,
    RfdStatus.OPEN_FOR_REVIEW: RfdStatus.DRAFT,
}


class StatusPolicy(str, Enum):
    """Which guard a status-changing endpoint applies."""

    PUBLISH_DRAFT = "publish_draft"  # Authors move between draft and review
    ADMIN_ONLY = "admin_only"


class PolicyDecision(BaseModel):
    """Outcome of a policy check. `reason` is set only on denial."""

    allowed: bool
    reason: Optional[str] = None

    model_config = {"frozen": True}


ALLOW = PolicyDecision(allowed=True)


def deny(reason: str) -> PolicyDecision:
    return PolicyDecision(allowed=False, reason=reason)


def _is_admin(actor: AuthenticatedUser) -> bool:
    if actor.role is UserRole.ADMIN:
        return True
    elif actor.role is UserRole.MEMBER:
        return False
    raise ValueError(f"Unknown role: {actor.role}")


def can_edit_details(actor: AuthenticatedUser, rfd: RfdRecord) -> bool:
    """Admins and the author may edit title, summary and tags."""
    return _is_admin(actor) or actor.id == rfd.author_id


def can_change_status_admin_only(actor: AuthenticatedUser) -> bool:
    return _is_admin(actor)


def can_publish_draft(actor: AuthenticatedUser, rfd: RfdRecord, target: RfdStatus) -> bool:
    """
    Status guard for authors.

    Admins may make any transition. Authors may move their own RFD from
    draft to open for review and back; nothing else.
    """
    if _is_admin(actor):
        return True
    if actor.id != rfd.author_id:
        return False
    return AUTHOR_TRANSITIONS.get(rfd.status) == target


def check_status_change(
    actor: AuthenticatedUser,
    rfd: RfdRecord,
    target: RfdStatus,
    policy: StatusPolicy = StatusPolicy.PUBLISH_DRAFT,
) -> PolicyDecision:
    if policy is StatusPolicy.ADMIN_ONLY:
        if can_change_status_admin_only(actor):
            return ALLOW
        return deny(DENY_ADMIN_ONLY)

    if can_publish_draft(actor, rfd, target):
        return ALLOW

    if actor.id != rfd.author_id:
        return deny(DENY_NOT_OWNER)
    if rfd.status is RfdStatus.DRAFT:
        return deny(DENY_OWN_DRAFT)
    if rfd.status is RfdStatus.OPEN_FOR_REVIEW:
        return deny(DENY_OWN_REVIEW)
    return deny(DENY_OWN_OTHER)


def check_edit_details(actor: AuthenticatedUser, rfd: RfdRecord) -> PolicyDecision:
    if can_edit_details(actor, rfd):
        return ALLOW
    return deny(DENY_EDIT_DETAILS)
