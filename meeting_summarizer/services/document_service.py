"""Document service for transcript upload, summarization and summary edits."""

import os
import time
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from meeting_summarizer.core.exceptions import AppError, DocumentNotFoundError, ValidationError
from meeting_summarizer.database.models import Document
from meeting_summarizer.repositories.document_repository import DocumentRepository
from meeting_summarizer.schemas.documents import UploadResult
from meeting_summarizer.schemas.summaries import SummaryResult
from meeting_summarizer.services.base_service import BaseService
from meeting_summarizer.services.summarization_service import DEFAULT_INSTRUCTION, SummarizationService
from meeting_summarizer.services.text_extraction import extract_text
from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_MIN_TRANSCRIPT_LENGTH = 10


def build_stored_filename(original_name: str, timestamp_ms: Optional[int] = None) -> str:
    """Derive a unique stored name ``<stem>_<epoch millis><ext>`` from the upload name."""
    stem, ext = os.path.splitext(os.path.basename(original_name or "transcript"))
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"{stem or 'transcript'}_{timestamp_ms}{ext}"


def upload_too_large_message(max_upload_bytes: int) -> str:
    return f"File size too large. Maximum size is {max_upload_bytes // (1024 * 1024)}MB."


class DocumentService(BaseService):
    """Service for a user's transcript documents.

    Every lookup is scoped to the requesting user: another user's document
    is reported exactly like an unknown id.
    """

    def __init__(
        self,
        session: AsyncSession,
        summarizer: Optional[SummarizationService] = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        min_transcript_length: int = DEFAULT_MIN_TRANSCRIPT_LENGTH,
    ):
        """Initialize document service.

        Args:
            session: Database session
            summarizer: Summarization engine, required only for ``summarize``
            max_upload_bytes: Upload size ceiling
            min_transcript_length: Shortest transcript accepted for summarization
        """
        super().__init__()
        self.session = session
        self.doc_repo = DocumentRepository(session)
        self.summarizer = summarizer
        self.max_upload_bytes = max_upload_bytes
        self.min_transcript_length = min_transcript_length

    def validate(self, *args, **kwargs) -> None:
        action = kwargs.get("action")

        if action == "upload_document":
            data = kwargs.get("data") or b""
            if not kwargs.get("file_name") and not data:
                raise ValidationError("No file provided")
            if len(data) > self.max_upload_bytes:
                raise ValidationError(upload_too_large_message(self.max_upload_bytes))

        elif action == "update_summary":
            if not (kwargs.get("summary") or "").strip():
                raise ValidationError("Summary is required")

        elif action == "summarize":
            if kwargs.get("document_id") is None and not (kwargs.get("transcript") or "").strip():
                raise ValidationError("Transcript content is required")

    async def run(self, *args, **kwargs) -> Any:
        """Route to the handler for the requested action."""
        action = kwargs.get("action")

        if action == "upload_document":
            return await self._upload_document_logic(
                kwargs["file_name"], kwargs.get("mime_type"), kwargs["data"], kwargs["user_id"]
            )
        if action == "get_document":
            return await self._get_owned_document(kwargs["document_id"], kwargs["user_id"])
        if action == "update_summary":
            return await self._update_summary_logic(
                kwargs["document_id"], kwargs["user_id"], kwargs["summary"]
            )
        if action == "summarize":
            return await self._summarize_logic(
                kwargs["user_id"],
                kwargs.get("transcript"),
                kwargs.get("instruction"),
                kwargs.get("document_id"),
            )
        raise AppError(f"Unknown action: {action}")

    async def upload_document(
        self,
        file_name: str,
        mime_type: Optional[str],
        data: bytes,
        user_id: str,
    ) -> UploadResult:
        """Extract the transcript from an upload and store it.

        Raises:
            ValidationError: If the file is missing, too large, unsupported or empty
        """
        return await self.execute(
            action="upload_document",
            file_name=file_name,
            mime_type=mime_type,
            data=data,
            user_id=user_id,
        )

    async def get_document(self, document_id: UUID, user_id: str) -> Document:
        """Fetch one of the user's documents.

        Raises:
            DocumentNotFoundError: If it does not exist or belongs to someone else
        """
        return await self.execute(action="get_document", document_id=document_id, user_id=user_id)

    async def update_summary(self, document_id: UUID, user_id: str, summary: str) -> Document:
        """Replace the stored summary with a manual edit."""
        return await self.execute(
            action="update_summary",
            document_id=document_id,
            user_id=user_id,
            summary=summary,
        )

    async def summarize(
        self,
        user_id: str,
        transcript: Optional[str] = None,
        instruction: Optional[str] = None,
        document_id: Optional[UUID] = None,
    ) -> SummaryResult:
        """Summarize an inline transcript or a stored document.

        With ``document_id`` the document is resolved before any generation
        call and its summary is stored only after generation succeeds.

        Raises:
            ValidationError: If the transcript is missing or too short
            DocumentNotFoundError: If the document is not the user's
            GenerationFailed: If the text generator fails
        """
        return await self.execute(
            action="summarize",
            user_id=user_id,
            transcript=transcript,
            instruction=instruction,
            document_id=document_id,
        )

    async def _upload_document_logic(
        self,
        file_name: str,
        mime_type: Optional[str],
        data: bytes,
        user_id: str,
    ) -> UploadResult:
        text_content = extract_text(file_name, mime_type, data)
        if not text_content.strip():
            raise ValidationError("File appears to be empty or could not be processed.")

        document = await self.doc_repo.create_document(
            filename=build_stored_filename(file_name),
            original_name=file_name,
            mime_type=mime_type or "application/octet-stream",
            size=len(data),
            content=text_content,
            user_id=user_id,
        )

        return UploadResult(
            document_id=document.id,
            file_name=file_name,
            file_size=len(data),
            text_content=text_content,
        )

    async def _get_owned_document(self, document_id: UUID, user_id: str) -> Document:
        document = await self.doc_repo.get_for_user(document_id, user_id)
        if document is None:
            LOGGER.info(f"Document {document_id} not found for user {user_id}")
            raise DocumentNotFoundError("Document not found")
        return document

    async def _update_summary_logic(self, document_id: UUID, user_id: str, summary: str) -> Document:
        await self._get_owned_document(document_id, user_id)
        document = await self.doc_repo.update_summary(document_id, summary)
        if document is None:
            raise DocumentNotFoundError("Document not found")
        LOGGER.info(f"Summary updated for document {document_id}")
        return document

    async def _summarize_logic(
        self,
        user_id: str,
        transcript: Optional[str],
        instruction: Optional[str],
        document_id: Optional[UUID],
    ) -> SummaryResult:
        if self.summarizer is None:
            raise AppError("Summarization engine is not configured")

        document = None
        if document_id is not None:
            document = await self._get_owned_document(document_id, user_id)
            if not (transcript or "").strip():
                transcript = document.content

        transcript = transcript or ""
        if len(transcript.strip()) < self.min_transcript_length:
            raise ValidationError("Transcript is too short to summarize")

        instruction = (instruction or "").strip() or DEFAULT_INSTRUCTION
        summary = await self.summarizer.summarize(transcript, instruction)

        if document is None:
            return SummaryResult(summary=summary)

        updated = await self.doc_repo.update_summary(
            document.id, summary, generated_at=datetime.now(timezone.utc)
        )
        if updated is None:
            raise DocumentNotFoundError("Document not found")

        return SummaryResult(
            summary=summary,
            document_id=updated.id,
            summary_generated_at=updated.summary_generated_at,
        )
