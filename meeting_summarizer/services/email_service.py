"""Summary delivery by email.

Recipients are validated as a batch before any connection to the relay is
opened: one malformed address or too many recipients rejects the whole send.
"""

import asyncio
import html
import re
import smtplib
import ssl
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import List, Optional, Sequence, Union

from meeting_summarizer.core.config import EmailSettings
from meeting_summarizer.core.exceptions import (
    ConfigurationError,
    EmailDeliveryError,
    EmailQuotaExceeded,
    InvalidRecipientsError,
    ValidationError,
)
from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Transient SMTP replies relays use for rate and mailbox limits
QUOTA_REPLY_CODES = {421, 450, 451, 452, 454}

SUMMARY_EMAIL_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Meeting Summary</title>
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;
           line-height: 1.6; color: #333; max-width: 800px; margin: 0 auto; padding: 20px;
           background-color: #f9f9f9; }}
    .container {{ background-color: white; padding: 30px; border-radius: 8px; }}
    .header {{ border-bottom: 2px solid #e5e7eb; padding-bottom: 20px; margin-bottom: 30px; }}
    .header h1 {{ color: #1f2937; margin: 0; font-size: 24px; }}
    .summary-content {{ background-color: #f8fafc; padding: 20px; border-radius: 6px;
                        border-left: 4px solid #3b82f6; margin: 20px 0; }}
    .footer {{ margin-top: 30px; padding-top: 20px; border-top: 1px solid #e5e7eb;
               font-size: 14px; color: #6b7280; text-align: center; }}
    .timestamp {{ color: #6b7280; font-size: 14px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>{title}</h1>
      <p class="timestamp">Generated on {generated_on}</p>
    </div>
    <div class="summary-content">
      {summary}
    </div>
    <div class="footer">
      <p>This summary was generated using AI-powered Meeting Notes Summarizer.</p>
      <p>Please review the content for accuracy before making any decisions based on this summary.</p>
    </div>
  </div>
</body>
</html>
"""


@dataclass
class DeliveryReceipt:
    """Outcome of a successful send."""

    message_id: str
    recipients: List[str] = field(default_factory=list)


def is_valid_email(address: str) -> bool:
    return bool(EMAIL_PATTERN.match(address))


def normalize_recipients(emails: Union[str, Sequence[str]]) -> List[str]:
    """Turn a comma-separated string or a list into trimmed, non-empty addresses."""
    if isinstance(emails, str):
        candidates = emails.split(",")
    else:
        candidates = list(emails)
    return [candidate.strip() for candidate in candidates if candidate and candidate.strip()]


def validate_recipients(recipients: Sequence[str], max_recipients: int = 10) -> List[str]:
    """Check a recipient batch as a whole.

    Raises:
        ValidationError: If the batch is empty or larger than ``max_recipients``
        InvalidRecipientsError: If any address is malformed, naming all of them
    """
    if not recipients:
        raise ValidationError("No valid email addresses provided")

    if len(recipients) > max_recipients:
        raise ValidationError(f"Maximum {max_recipients} recipients allowed per email")

    invalid = [address for address in recipients if not is_valid_email(address)]
    if invalid:
        raise InvalidRecipientsError(invalid)

    return list(recipients)


def default_subject(meeting_title: Optional[str], today: Optional[datetime] = None) -> str:
    label = meeting_title or (today or datetime.now(timezone.utc)).strftime("%m/%d/%Y")
    return f"Meeting Summary - {label}"


def render_summary_html(
    summary: str,
    meeting_title: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render the summary fragment into a complete HTML email body.

    The summary is an HTML fragment from the editor and is embedded as-is,
    with line breaks preserved. The title is escaped.
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    return SUMMARY_EMAIL_TEMPLATE.format(
        title=html.escape(meeting_title or "Meeting Summary"),
        generated_on=generated_at.strftime("%A, %B %d, %Y %I:%M %p"),
        summary=summary.replace("\n", "<br>"),
    )


class EmailService:
    """SMTP notification gateway."""

    def __init__(self, email_settings: EmailSettings):
        self.settings = email_settings

    async def send_summary(
        self,
        emails: Union[str, Sequence[str]],
        summary: str,
        subject: Optional[str] = None,
        meeting_title: Optional[str] = None,
    ) -> DeliveryReceipt:
        """Render a summary and send it to the given recipients."""
        recipients = normalize_recipients(emails)
        return await self.send(
            recipients=recipients,
            subject=subject or default_subject(meeting_title),
            body_text=summary,
            body_html=render_summary_html(summary, meeting_title),
        )

    async def send(
        self,
        recipients: Sequence[str],
        subject: str,
        body_text: str,
        body_html: str,
    ) -> DeliveryReceipt:
        """Validate the batch and deliver one message to all recipients.

        Raises:
            ValidationError: If the recipient batch is rejected
            ConfigurationError: If SMTP credentials are missing
            EmailQuotaExceeded: If the relay reports a sending limit
            EmailDeliveryError: On any other delivery failure
        """
        validated = validate_recipients(recipients, self.settings.max_recipients)

        if not self.settings.is_configured:
            raise ConfigurationError("Email configuration is missing. Please contact administrator.")

        message = self._build_message(validated, subject, body_text, body_html)
        LOGGER.info(f"Sending summary email to {len(validated)} recipient(s)")

        await asyncio.to_thread(self._deliver, message)

        LOGGER.info(f"Summary email sent: message_id={message['Message-ID']}")
        return DeliveryReceipt(message_id=message["Message-ID"], recipients=validated)

    def _build_message(
        self,
        recipients: Sequence[str],
        subject: str,
        body_text: str,
        body_html: str,
    ) -> EmailMessage:
        sender = self.settings.smtp_user
        message = EmailMessage()
        message["From"] = formataddr((self.settings.sender_name, sender))
        message["To"] = ", ".join(recipients)
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain=sender.rsplit("@", 1)[-1] if "@" in sender else None)
        message.set_content(body_text)
        message.add_alternative(body_html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        """Blocking SMTP exchange, run in a worker thread."""
        host, port, timeout = self.settings.smtp_host, self.settings.smtp_port, self.settings.timeout
        context = ssl.create_default_context()

        try:
            if self.settings.use_ssl:
                server = smtplib.SMTP_SSL(host, port, timeout=timeout, context=context)
            else:
                server = smtplib.SMTP(host, port, timeout=timeout)

            with server:
                if not self.settings.use_ssl:
                    server.ehlo()
                    server.starttls(context=context)
                    server.ehlo()
                server.login(self.settings.smtp_user, self.settings.smtp_password)
                server.send_message(message)

        except smtplib.SMTPAuthenticationError as e:
            LOGGER.error(f"SMTP authentication failed: {e.smtp_code}")
            raise EmailDeliveryError(
                "Email authentication failed. Please check email configuration.", original_error=e
            ) from e
        except smtplib.SMTPResponseException as e:
            reply = e.smtp_error.decode("utf-8", "replace") if isinstance(e.smtp_error, bytes) else str(e.smtp_error)
            if e.smtp_code in QUOTA_REPLY_CODES or "quota" in reply.lower():
                LOGGER.warning(f"SMTP relay reported a sending limit: {e.smtp_code} {reply}")
                raise EmailQuotaExceeded(
                    "Email sending quota exceeded. Please try again later.", original_error=e
                ) from e
            LOGGER.error(f"SMTP relay rejected the message: {e.smtp_code} {reply}")
            raise EmailDeliveryError("Failed to send email. Please try again.", original_error=e) from e
        except (smtplib.SMTPException, OSError) as e:
            LOGGER.error(f"SMTP delivery failed: {e}")
            raise EmailDeliveryError("Failed to send email. Please try again.", original_error=e) from e
