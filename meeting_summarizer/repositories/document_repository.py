from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from meeting_summarizer.database.models import Document
from meeting_summarizer.repositories.base_repository import BaseRepository
from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentRepository(BaseRepository[Document]):
    """Repository for managing Document records.

    Inherits from BaseRepository for standard CRUD operations.
    """

    def __init__(self, session: AsyncSession):
        """Initialize document repository.

        Args:
            session: SQLAlchemy async session
        """
        super().__init__(session, Document)

    async def create_document(
        self,
        filename: str,
        original_name: str,
        mime_type: str,
        size: int,
        content: str,
        user_id: str,
    ) -> Document:
        """Create a new document record.

        Args:
            filename: Unique stored filename
            original_name: Filename as uploaded
            mime_type: Declared MIME type of the upload
            size: Upload size in bytes
            content: Extracted plain text
            user_id: Subject id of the uploading user

        Returns:
            Created Document record
        """
        document = await self.create(
            filename=filename,
            original_name=original_name,
            mime_type=mime_type,
            size=size,
            content=content,
            user_id=user_id,
            uploaded_at=datetime.now(timezone.utc),
        )
        LOGGER.info(f"Document created: document_id={document.id}, size={size}")
        return document

    async def get_for_user(self, document_id: UUID, user_id: str) -> Optional[Document]:
        """Fetch a document only if it belongs to the given user."""
        document = await self.get_by_id(document_id)
        if document is None or document.user_id != user_id:
            return None
        return document

    async def update_summary(
        self,
        document_id: UUID,
        summary: str,
        generated_at: Optional[datetime] = None,
    ) -> Optional[Document]:
        """Replace the summary and its timestamp together.

        Args:
            document_id: Document ID
            summary: New summary text
            generated_at: Timestamp to store, defaults to now

        Returns:
            The updated Document, or None if it does not exist
        """
        return await self.update(
            document_id,
            summary=summary,
            summary_generated_at=generated_at or datetime.now(timezone.utc),
        )
