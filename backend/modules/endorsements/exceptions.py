"""
Endorsements module exceptions.
"""

from shared.exceptions import ConflictError


class AlreadyEndorsedError(ConflictError):
    """Raised when the user has already endorsed the RFD."""

    def __init__(self, rfd_id: str):
        super().__init__(
            "You have already endorsed this RFD",
            code="ALREADY_ENDORSED",
            details={"rfd_id": rfd_id},
        )


class NotEndorsedError(ConflictError):
    """Raised when removing an endorsement that does not exist."""

    def __init__(self, rfd_id: str):
        super().__init__(
            "You have not endorsed this RFD",
            code="NOT_ENDORSED",
            details={"rfd_id": rfd_id},
        )
