"""
RFDs module.

The RFD workflow: creation from document templates, the status state
machine with its history, draft visibility, and the role and ownership
policy.

Public API:
- IRfdService: Interface for RFD operations
- IRfdStore: Persistence interface (also used by endorsements)
- RfdStatus: Closed status set with legacy normalization
- RFD models: RfdRecord, RfdDetail, RfdListResponse, StatusHistoryEntry
- RFD exceptions: RfdNotFoundError, RfdPermissionError, NoChangesError, etc.
"""

from .interfaces import IRfdService, IRfdStore
from .models import (
    RfdStatus,
    RfdRecord,
    RfdListItem,
    RfdDetail,
    RfdListResponse,
    RfdQuery,
    StatusHistoryEntry,
    CreateRfdRequest,
    UpdateRfdRequest,
)
from .exceptions import (
    RfdNotFoundError,
    InvalidRfdStatusError,
    RfdPermissionError,
    NoChangesError,
    RfdConflictError,
    RfdNumberConflictError,
    RfdDocumentConflictError,
    MalformedRecordError,
)

__all__ = [
    # Interfaces
    "IRfdService",
    "IRfdStore",
    # Models
    "RfdStatus",
    "RfdRecord",
    "RfdListItem",
    "RfdDetail",
    "RfdListResponse",
    "RfdQuery",
    "StatusHistoryEntry",
    "CreateRfdRequest",
    "UpdateRfdRequest",
    # Exceptions
    "RfdNotFoundError",
    "InvalidRfdStatusError",
    "RfdPermissionError",
    "NoChangesError",
    "RfdConflictError",
    "RfdNumberConflictError",
    "RfdDocumentConflictError",
    "MalformedRecordError",
]
