"""
Documents module exceptions.
"""

from shared.exceptions import ExternalServiceError


class DocumentServiceError(ExternalServiceError):
    """
    Raised when the document service fails.

    The message is deliberately generic; the underlying cause is logged
    where it happens and never sent to clients.
    """

    def __init__(self, message: str = "Document service request failed"):
        super().__init__(message, service="google_drive", code="DOCUMENT_SERVICE_ERROR")


class DocumentServiceNotConfiguredError(DocumentServiceError):
    """Raised when no credentials are available for the document service."""

    def __init__(self):
        super().__init__("Document service is not configured")
        self.code = "DOCUMENT_SERVICE_NOT_CONFIGURED"
