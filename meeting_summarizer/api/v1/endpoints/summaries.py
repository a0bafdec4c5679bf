from typing import Annotated

from fastapi import APIRouter, Depends, Request

from meeting_summarizer.api.dependencies import get_summarizing_document_service
from meeting_summarizer.core.auth import get_current_user
from meeting_summarizer.schemas.auth import CurrentUser
from meeting_summarizer.schemas.responses import ApiResponse
from meeting_summarizer.schemas.summaries import SummarizeRequest
from meeting_summarizer.services.document_service import DocumentService
from meeting_summarizer.utils.responses import create_api_response

router = APIRouter()


@router.post(
    "/summarize",
    response_model=ApiResponse,
    response_model_exclude_unset=True,
    summary="Generate a transcript summary",
    operation_id="summarize_transcript",
)
async def summarize_transcript(
    request: Request,
    body: SummarizeRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    document_service: Annotated[DocumentService, Depends(get_summarizing_document_service)],
) -> ApiResponse:
    """Summarize an inline transcript, or a stored document when ``documentId`` is given.

    A stored document gets the new summary and a fresh ``summaryGeneratedAt``.
    """
    result = await document_service.summarize(
        user_id=current_user.id,
        transcript=body.transcript,
        instruction=body.instruction,
        document_id=body.document_id,
    )

    return create_api_response(
        data=result,
        message="Summary generated successfully",
        request=request,
    )
