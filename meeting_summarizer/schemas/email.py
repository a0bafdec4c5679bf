"""Email request and response schemas."""

from typing import List, Optional, Union

from pydantic import Field

from meeting_summarizer.schemas.responses import CamelModel


class SendEmailRequest(CamelModel):
    """Send a summary to a list of recipients."""

    emails: Union[List[str], str] = Field(
        ..., description="Recipient addresses, as a list or a comma-separated string"
    )
    summary: str = Field(..., min_length=1, description="Summary to send")
    subject: Optional[str] = Field(None, description="Email subject")
    meeting_title: Optional[str] = Field(None, description="Meeting title shown in the email")


class EmailResult(CamelModel):
    message_id: str
    recipients: List[str]
