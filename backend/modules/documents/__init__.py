"""
Documents module.

Creates the external documents that back RFDs (Google Docs copied from a
template) and lists the available templates.

Public API:
- IDocumentService: Interface for document operations
- DocumentMetadata, CreatedDocument, DocumentTemplate: Data models
- DocumentServiceError: Raised on any document service failure
"""

from .interfaces import IDocumentService
from .models import (
    CreatedDocument,
    DocumentMetadata,
    DocumentTemplate,
    TemplateListResponse,
)
from .exceptions import DocumentServiceError, DocumentServiceNotConfiguredError

__all__ = [
    # Interface
    "IDocumentService",
    # Models
    "CreatedDocument",
    "DocumentMetadata",
    "DocumentTemplate",
    "TemplateListResponse",
    # Exceptions
    "DocumentServiceError",
    "DocumentServiceNotConfiguredError",
]
