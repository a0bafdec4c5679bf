from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Request, UploadFile, status

from meeting_summarizer.api.dependencies import get_document_service
from meeting_summarizer.core.auth import get_current_user
from meeting_summarizer.core.config import settings
from meeting_summarizer.core.exceptions import ValidationError
from meeting_summarizer.schemas.auth import CurrentUser
from meeting_summarizer.schemas.documents import DocumentView, SummaryUpdateRequest, SummaryView
from meeting_summarizer.schemas.responses import ApiResponse
from meeting_summarizer.services.document_service import DocumentService, upload_too_large_message
from meeting_summarizer.utils.logging import get_logger
from meeting_summarizer.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


@router.post(
    "/upload",
    response_model=ApiResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a meeting transcript",
    operation_id="upload_transcript",
)
async def upload_transcript(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    document_service: Annotated[DocumentService, Depends(get_document_service)],
    file: Optional[UploadFile] = File(None, description="Transcript as .txt or .docx"),
) -> ApiResponse:
    """Upload a transcript and extract its text."""
    if file is None:
        raise ValidationError("No file provided")
    # Size of the spooled upload, checked before reading it into memory
    if file.size is not None and file.size > settings.max_upload_bytes:
        raise ValidationError(upload_too_large_message(settings.max_upload_bytes))

    data = await file.read()
    LOGGER.info(f"Upload received: user={current_user.id}, size={len(data)}")

    result = await document_service.upload_document(
        file_name=file.filename or "",
        mime_type=file.content_type,
        data=data,
        user_id=current_user.id,
    )

    return create_api_response(
        data=result,
        message="File uploaded successfully",
        request=request,
    )


@router.get(
    "/documents/{document_id}",
    response_model=ApiResponse,
    response_model_exclude_unset=True,
    summary="Get a transcript document",
    operation_id="get_document",
)
async def get_document(
    request: Request,
    document_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    document_service: Annotated[DocumentService, Depends(get_document_service)],
) -> ApiResponse:
    """Retrieve a document with its transcript and current summary."""
    document = await document_service.get_document(document_id, current_user.id)

    return create_api_response(
        data={"document": DocumentView.from_document(document)},
        message="Document retrieved successfully",
        request=request,
    )


@router.patch(
    "/documents/{document_id}",
    response_model=ApiResponse,
    response_model_exclude_unset=True,
    summary="Save an edited summary",
    operation_id="update_document_summary",
)
async def update_document_summary(
    request: Request,
    document_id: UUID,
    body: SummaryUpdateRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    document_service: Annotated[DocumentService, Depends(get_document_service)],
) -> ApiResponse:
    """Replace the stored summary with the user's edit."""
    document = await document_service.update_summary(document_id, current_user.id, body.summary)

    return create_api_response(
        data={
            "document": SummaryView(
                id=document.id,
                summary=document.summary,
                summary_generated_at=document.summary_generated_at,
            )
        },
        message="Summary updated successfully",
        request=request,
    )
