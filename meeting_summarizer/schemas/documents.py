"""Document request and response schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from meeting_summarizer.database.models import Document
from meeting_summarizer.schemas.responses import CamelModel


class UploadResult(CamelModel):
    """Outcome of a transcript upload."""

    document_id: UUID
    file_name: str = Field(..., description="Filename as uploaded")
    file_size: int = Field(..., description="Upload size in bytes")
    text_content: str = Field(..., description="Extracted transcript text")


class DocumentView(CamelModel):
    """A stored document as shown to its owner."""

    id: UUID
    file_name: str
    mime_type: str
    size: int
    text_content: str
    summary: Optional[str] = None
    uploaded_at: datetime
    summary_generated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Document) -> "DocumentView":
        return cls(
            id=document.id,
            file_name=document.original_name,
            mime_type=document.mime_type,
            size=document.size,
            text_content=document.content,
            summary=document.summary,
            uploaded_at=document.uploaded_at,
            summary_generated_at=document.summary_generated_at,
        )


class SummaryView(CamelModel):
    id: UUID
    summary: Optional[str] = None
    summary_generated_at: Optional[datetime] = None


class SummaryUpdateRequest(CamelModel):
    """Manual edit of a stored summary."""

    summary: str = Field(..., description="Edited summary, HTML fragment or plain text")
