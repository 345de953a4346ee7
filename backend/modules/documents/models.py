"""
Documents module data models.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class DocumentMetadata(BaseModel):
    """Values filled into a new document's template placeholders."""

    title: str
    author_name: str
    author_email: Optional[str] = Field(None, description="Granted writer access")
    description: str = ""
    tags: list[str] = Field(default_factory=list)


class CreatedDocument(BaseModel):
    """A document created from a template."""

    doc_id: str
    doc_url: str
    title: str


class DocumentTemplate(BaseModel):
    """A template that new RFD documents can be copied from."""

    id: str
    name: str
    created_time: Optional[datetime] = None
    modified_time: Optional[datetime] = None


class TemplateListResponse(BaseModel):
    templates: list[DocumentTemplate]
