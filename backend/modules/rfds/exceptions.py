"""
RFDs module exceptions.
"""

from typing import Optional

from shared.exceptions import (
    RfdIndexError,
    NotFoundError,
    ValidationError,
    AuthorizationError,
    ConflictError,
)


class RfdNotFoundError(NotFoundError):
    """Raised when an RFD does not exist or is hidden from the viewer."""

    def __init__(self, rfd_id: str):
        super().__init__(
            "RFD not found",
            code="RFD_NOT_FOUND",
            details={"rfd_id": rfd_id},
        )


class InvalidRfdStatusError(ValidationError):
    """Raised when a status value is outside the closed set."""

    def __init__(self, status: str):
        super().__init__(
            f"Invalid status: {status}",
            code="INVALID_STATUS",
            details={"status": status},
        )


class RfdPermissionError(AuthorizationError):
    """Raised when a policy check denies an RFD operation."""

    def __init__(self, reason: str, rfd_id: Optional[str] = None):
        super().__init__(
            reason,
            code="RFD_PERMISSION_DENIED",
            details={"rfd_id": rfd_id} if rfd_id else None,
        )


class NoChangesError(ValidationError):
    """Raised when an update would not change any stored field."""

    def __init__(self, rfd_id: str):
        super().__init__(
            "No changes to update",
            code="NO_CHANGES",
            details={"rfd_id": rfd_id},
        )


class RfdConflictError(ConflictError):
    """Raised when a concurrent request changed the RFD first."""

    def __init__(self, rfd_id: str):
        super().__init__(
            "RFD was modified by another request",
            code="RFD_CONFLICT",
            details={"rfd_id": rfd_id},
        )


class RfdNumberConflictError(ConflictError):
    """Raised when RFD number allocation collides."""

    def __init__(self):
        super().__init__("Could not allocate an RFD number", code="RFD_NUMBER_CONFLICT")


class RfdDocumentConflictError(ConflictError):
    """Raised when the new document is already linked to another RFD."""

    def __init__(self, doc_id: str):
        super().__init__(
            "Document is already linked to another RFD",
            code="RFD_DOCUMENT_CONFLICT",
            details={"doc_id": doc_id},
        )


class MalformedRecordError(RfdIndexError):
    """Raised when a stored row does not match the expected shape."""

    def __init__(self, table: str, record_id: str, reason: str):
        super().__init__(
            f"Malformed {table} record {record_id}: {reason}",
            code="MALFORMED_RECORD",
            details={"table": table, "record_id": record_id},
        )
