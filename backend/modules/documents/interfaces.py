"""
Documents module interfaces.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import CreatedDocument, DocumentMetadata, DocumentTemplate


@runtime_checkable
class IDocumentService(Protocol):
    """External document store that backs each RFD."""

    @property
    def has_service_account(self) -> bool:
        """True when service credentials are configured."""
        ...

    async def create_from_template(
        self,
        template_id: str,
        metadata: DocumentMetadata,
    ) -> CreatedDocument:
        """
        Copy a template into a new document and share it.

        Raises:
            DocumentServiceError: On any failure; nothing is persisted locally
        """
        ...

    async def list_templates(self, user_access_token: Optional[str] = None) -> list[DocumentTemplate]:
        """
        List available templates.

        Uses service credentials when configured, otherwise the given
        user access token.
        """
        ...
