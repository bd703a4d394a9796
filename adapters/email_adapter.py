"""
Transactional email adapter (SendGrid).

send_email() never raises for provider errors: it logs them and returns False,
so report delivery can carry on with its download and backup fallbacks.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, List
import base64
import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import (
    Mail,
    Attachment,
    FileContent,
    FileName,
    FileType,
    Disposition,
    ReplyTo,
)

logger = logging.getLogger("ander.email")

_client: Optional[SendGridAPIClient] = None
_from_email: Optional[str] = None


@dataclass
class EmailAttachment:
    """Base64 content without any data: prefix"""

    content: str
    filename: str
    type: str
    disposition: str = "attachment"


def connect(api_key: Optional[str], from_email: Optional[str]):
    """Initialize the SendGrid client; the sender must be verified with SendGrid."""
    global _client, _from_email
    if not api_key or not from_email:
        logger.warning("SENDGRID_API_KEY / SENDGRID_FROM not set; email disabled")
        _client = None
        _from_email = None
        return
    _client = SendGridAPIClient(api_key)
    _from_email = from_email
    logger.info("SendGrid client ready (from=%s)", from_email)


def close():
    global _client, _from_email
    _client = None
    _from_email = None


def is_configured() -> bool:
    return _client is not None and _from_email is not None


def send_email(
    to: str,
    subject: str,
    text: str = "",
    html: str = "",
    reply_to: Optional[str] = None,
    attachments: Optional[List[EmailAttachment]] = None,
) -> bool:
    """
    Low-level send.

    Returns:
        True when the provider accepted the message, False otherwise
    """
    if not is_configured():
        logger.error("Cannot send email to %s: email provider not configured", to)
        return False

    message = Mail(
        from_email=_from_email,
        to_emails=to,
        subject=subject,
        plain_text_content=text or None,
        html_content=html or None,
    )
    if reply_to:
        message.reply_to = ReplyTo(reply_to)
    for a in attachments or []:
        message.add_attachment(
            Attachment(
                FileContent(a.content),
                FileName(a.filename),
                FileType(a.type),
                Disposition(a.disposition),
            )
        )

    try:
        response = _client.send(message)
    except Exception as exc:
        # python-http-client errors carry the provider's explanation in .body
        details = getattr(exc, "body", "") or ""
        if isinstance(details, bytes):
            details = details.decode("utf-8", "replace")
        logger.error("SendGrid email error: %s %s", exc, details)
        return False

    if response.status_code >= 300:
        logger.error("SendGrid rejected email to %s: HTTP %s", to, response.status_code)
        return False
    logger.info("Email sent to %s (%s)", to, subject)
    return True


def report_filename(start: str, end: str) -> str:
    return f"blood-sugar-report-{start}-to-{end}.pdf"


def send_blood_sugar_report(
    recipient_email: str,
    user_email: Optional[str],
    pdf_bytes: bytes,
    start: str,
    end: str,
    reading_count: int,
) -> bool:
    """
    Email a PDF report.

    Args:
        recipient_email: who receives the email
        user_email: optional reply-to so replies go to the user
        pdf_bytes: PDF to attach
        start, end: date range strings, display only
        reading_count: number shown in the summary
    """
    subject = f"Blood Sugar Report — {start} to {end}"
    generated = date.today().isoformat()

    html = f"""
    <div style="font-family: system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif; max-width: 640px; margin: 0 auto;">
      <h2 style="color:#2563EB;margin:0 0 12px;">Your Blood Sugar Report</h2>
      <p style="margin:0 0 12px;">Here is your report for <strong>{start}</strong> to <strong>{end}</strong>.</p>
      <div style="background:#F3F4F6;border-radius:10px;padding:16px;margin:12px 0;">
        <p style="margin:0 0 6px;"><strong>Total readings:</strong> {reading_count}</p>
        <p style="margin:0;"><strong>Generated:</strong> {generated}</p>
      </div>
      <p style="color:#6B7280;font-size:13px;margin-top:16px;">
        This report is for personal health tracking only. For medical advice, consult your healthcare provider.
      </p>
    </div>
    """

    text = (
        f"Your Blood Sugar Report ({start} to {end})\n"
        f"Total readings: {reading_count}\n"
        f"Generated: {generated}\n"
        "The PDF report is attached."
    )

    attachment = EmailAttachment(
        content=base64.b64encode(pdf_bytes).decode("ascii"),
        filename=report_filename(start, end),
        type="application/pdf",
    )

    return send_email(
        to=recipient_email,
        subject=subject,
        text=text,
        html=html,
        reply_to=user_email,
        attachments=[attachment],
    )
