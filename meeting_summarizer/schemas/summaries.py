"""Summarization request and response schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from meeting_summarizer.schemas.responses import CamelModel


class SummarizeRequest(CamelModel):
    """Summarize a stored document or an inline transcript.

    ``transcript`` may be omitted when ``document_id`` is given; the stored
    content is used instead.
    """

    document_id: Optional[UUID] = Field(None, description="Document to summarize and update")
    transcript: Optional[str] = Field(None, description="Transcript text")
    instruction: Optional[str] = Field(None, description="Custom summarization instruction")


class SummaryResult(CamelModel):
    summary: str
    document_id: Optional[UUID] = None
    summary_generated_at: Optional[datetime] = None
