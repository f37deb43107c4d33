import asyncio
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr

import bleach

from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.configs.settings_models import MailConfig
from barelands.api.v1.errors import MailDeliveryError
from barelands.models.models.contact import ContactRequest, PrintInquiryRequest

HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; padding: 20px; max-width: 600px;">
  <h2 style="color: #333;">{heading}</h2>
  {rows}
  <div style="margin-top: 20px; padding: 15px; background-color: #f5f5f5; border-radius: 4px;">
    <p><strong>Message:</strong></p>
    <p>{message}</p>
  </div>
  <p style="margin-top: 20px; font-size: 12px; color: #777;">
    This email was sent from the {site_name} {form_name}.
  </p>
</div>
"""


def _escape(text: str) -> str:
    """Neutralise user supplied text before it is embedded in HTML."""
    return bleach.clean(text, tags=set(), strip=False)


@dataclass
class OutgoingMessage:
    to: str
    reply_to: str
    subject: str
    text: str
    html: str


class Mailer:
    """Delivers inquiry e-mails over SMTP; without an SMTP password sends are only logged."""

    def __init__(self, config: MailConfig, timeout: float = 20.0):
        self.config = config
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Message builders
    # ------------------------------------------------------------------

    def _html(self, heading: str, rows: list[tuple[str, str]], message: str, form_name: str) -> str:
        rendered_rows = "\n  ".join(
            f"<p><strong>{label}:</strong> {_escape(value)}</p>" for label, value in rows
        )
        return HTML_TEMPLATE.format(
            heading=heading,
            rows=rendered_rows,
            message=_escape(message).replace("\n", "<br/>"),
            site_name=_escape(self.config.site_name),
            form_name=form_name,
        )

    def contact_message(self, request: ContactRequest) -> OutgoingMessage:
        return OutgoingMessage(
            to=self.config.contact_address,
            reply_to=request.email,
            subject=f"[Contact Form] {request.subject}",
            text=f"Name: {request.name}\nEmail: {request.email}\n\nMessage:\n{request.message}",
            html=self._html(
                "New Contact Form Submission",
                [("From", f"{request.name} ({request.email})"), ("Subject", request.subject)],
                request.message,
                "contact form",
            ),
        )

    def print_inquiry_message(self, request: PrintInquiryRequest) -> OutgoingMessage:
        photo = request.photo_title or request.photo_id or "General inquiry"
        return OutgoingMessage(
            to=self.config.contact_address,
            reply_to=request.email,
            subject=f"[Print Inquiry] {photo}",
            text=(
                f"Name: {request.name}\nEmail: {request.email}\nPhoto: {photo}\n\n"
                f"Message:\n{request.message}"
            ),
            html=self._html(
                "New Print Inquiry",
                [("From", f"{request.name} ({request.email})"), ("Photo", photo)],
                request.message,
                "print inquiry form",
            ),
        )

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _build(self, message: OutgoingMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = formataddr((self.config.site_name, self.config.from_address))
        email["To"] = message.to
        email["Reply-To"] = message.reply_to
        email["Subject"] = message.subject
        email.set_content(message.text)
        email.add_alternative(message.html, subtype="html")
        return email

    def _send_sync(self, email: EmailMessage) -> None:
        with smtplib.SMTP(
            self.config.smtp_host, self.config.smtp_port, timeout=self.timeout
        ) as smtp:
            if self.config.starttls:
                smtp.starttls()
            smtp.login(self.config.smtp_user or self.config.from_address, self.config.smtp_password)
            smtp.send_message(email)

    async def send(self, message: OutgoingMessage) -> bool:
        """
        Deliver ``message``.

        Returns:
            True when the message was handed to the SMTP relay, False when
            delivery was simulated because no SMTP password is configured.

        Raises:
            MailDeliveryError: if the relay rejected the message or timed out
        """
        if not self.config.configured:
            logger.info(
                f"Email not configured, simulated send to {message.to}: "
                f"{message.subject!r} (reply-to {message.reply_to})"
            )
            logger.debug(f"Simulated message body:\n{message.text}")
            return False

        email = self._build(message)
        try:
            await asyncio.wait_for(asyncio.to_thread(self._send_sync, email), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Sending {message.subject!r} timed out after {self.timeout}s")
            raise MailDeliveryError("Failed to process your message", details={"reason": "timeout"})
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Sending {message.subject!r} failed: {e}")
            raise MailDeliveryError("Failed to process your message")

        logger.info(f"Sent {message.subject!r} to {message.to}")
        return True
