"""
Endorsements module.

Per-user, per-RFD endorsements and their aggregates.

Public API:
- IEndorsementService: Interface for endorsement operations
- IEndorsementLedger: Read side used to build RFD aggregates
- Endorsement, Endorser, EndorsementSummary: Data models
- AlreadyEndorsedError, NotEndorsedError: Endorsement conflicts
"""

from .interfaces import IEndorsementLedger, IEndorsementService, IEndorsementStore
from .models import Endorsement, Endorser, EndorsementSummary
from .exceptions import AlreadyEndorsedError, NotEndorsedError

__all__ = [
    # Interfaces
    "IEndorsementLedger",
    "IEndorsementService",
    "IEndorsementStore",
    # Models
    "Endorsement",
    "Endorser",
    "EndorsementSummary",
    # Exceptions
    "AlreadyEndorsedError",
    "NotEndorsedError",
]
