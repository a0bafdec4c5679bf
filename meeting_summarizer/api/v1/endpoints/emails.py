from typing import Annotated

from fastapi import APIRouter, Depends, Request

from meeting_summarizer.api.dependencies import get_email_service
from meeting_summarizer.core.auth import get_current_user
from meeting_summarizer.schemas.auth import CurrentUser
from meeting_summarizer.schemas.email import EmailResult, SendEmailRequest
from meeting_summarizer.schemas.responses import ApiResponse
from meeting_summarizer.services.email_service import EmailService
from meeting_summarizer.utils.logging import get_logger
from meeting_summarizer.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


@router.post(
    "/send-email",
    response_model=ApiResponse,
    response_model_exclude_unset=True,
    summary="Email a summary",
    operation_id="send_summary_email",
)
async def send_summary_email(
    request: Request,
    body: SendEmailRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> ApiResponse:
    """Send a summary to up to ten recipients."""
    receipt = await email_service.send_summary(
        emails=body.emails,
        summary=body.summary,
        subject=body.subject,
        meeting_title=body.meeting_title,
    )
    LOGGER.info(f"User {current_user.id} sent a summary to {len(receipt.recipients)} recipient(s)")

    return create_api_response(
        data=EmailResult(message_id=receipt.message_id, recipients=receipt.recipients),
        message=f"Summary sent successfully to {len(receipt.recipients)} recipient(s)",
        request=request,
    )
