"""Shared FastAPI dependencies.

Long-lived clients are built once in the application lifespan and kept on
``app.state``; these functions hand them to request handlers.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from meeting_summarizer.core.config import settings
from meeting_summarizer.core.database import get_async_session
from meeting_summarizer.core.exceptions import ConfigurationError
from meeting_summarizer.core.llm_client import TextGenerator
from meeting_summarizer.services.document_service import DocumentService
from meeting_summarizer.services.email_service import EmailService
from meeting_summarizer.services.summarization_service import SummarizationService


def get_text_generator(request: Request) -> TextGenerator:
    generator: Optional[TextGenerator] = getattr(request.app.state, "text_generator", None)
    if generator is None:
        raise ConfigurationError("Text generation provider is not configured")
    return generator


def get_summarizer(
    generator: Annotated[TextGenerator, Depends(get_text_generator)],
) -> SummarizationService:
    return SummarizationService(
        generator,
        chunk_threshold=settings.llm.chunk_threshold,
        chunk_size=settings.llm.chunk_size,
    )


async def get_document_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)],
) -> DocumentService:
    return DocumentService(
        db_session,
        max_upload_bytes=settings.max_upload_bytes,
        min_transcript_length=settings.min_transcript_length,
    )


async def get_summarizing_document_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)],
    summarizer: Annotated[SummarizationService, Depends(get_summarizer)],
) -> DocumentService:
    return DocumentService(
        db_session,
        summarizer=summarizer,
        max_upload_bytes=settings.max_upload_bytes,
        min_transcript_length=settings.min_transcript_length,
    )


def get_email_service(request: Request) -> EmailService:
    service: Optional[EmailService] = getattr(request.app.state, "email_service", None)
    return service or EmailService(settings.email)
