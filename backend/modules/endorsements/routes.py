"""
Endorsement API endpoints.

Mounted under the RFD prefix: endorsing and un-endorsing return the
refreshed RFD so clients can re-render counts in one round trip.
"""

from fastapi import APIRouter, Depends

from api.middleware.auth import get_current_user
from api.dependencies import get_endorsement_service, get_rfd_service
from modules.rfds.interfaces import IRfdService
from modules.rfds.models import RfdDetail
from shared.models import AuthenticatedUser

from .interfaces import IEndorsementService
from .models import EndorsementSummary

router = APIRouter()


@router.post("/{rfd_id}/endorsement", response_model=RfdDetail)
async def endorse_rfd(
    rfd_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    endorsements: IEndorsementService = Depends(get_endorsement_service),
    rfds: IRfdService = Depends(get_rfd_service),
) -> RfdDetail:
    """
    Endorse an RFD. Each user can endorse an RFD once.
    """
    await endorsements.endorse(user, rfd_id)
    return await rfds.get_rfd(user, rfd_id)


@router.delete("/{rfd_id}/endorsement", response_model=RfdDetail)
async def unendorse_rfd(
    rfd_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    endorsements: IEndorsementService = Depends(get_endorsement_service),
    rfds: IRfdService = Depends(get_rfd_service),
) -> RfdDetail:
    """
    Remove the current user's endorsement.
    """
    await endorsements.unendorse(user, rfd_id)
    return await rfds.get_rfd(user, rfd_id)


@router.get("/{rfd_id}/endorsers", response_model=EndorsementSummary)
async def list_endorsers(
    rfd_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    endorsements: IEndorsementService = Depends(get_endorsement_service),
) -> EndorsementSummary:
    """Endorsers of an RFD, oldest first, with the total count."""
    return await endorsements.get_summary(user, rfd_id)
