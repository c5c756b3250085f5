"""Mail dispatcher.

Turns a validated dispatch request into a delivered email:

1. Build the template context (business details + sign-off + company info).
2. Render the HTML and text bodies.
3. Decode the optional PDF / attachments (bad ones are dropped, not fatal).
4. Send through a per-request SMTP client built from the request's settings.

Each request is independent: no SMTP connection is shared and nothing is
retried.

Author: Triptics
Version: 1.0.0
"""

from __future__ import annotations

from typing import Any, Callable

from mail_dispatch.clients.smtp import SMTPClient
from mail_dispatch.core.exceptions import AttachmentError
from mail_dispatch.core.logger import get_logger, log_context
from mail_dispatch.models.context import DEFAULT_SIGNATURE
from mail_dispatch.models.email import Attachment, EmailKind, EmailResult, OutgoingEmail
from mail_dispatch.models.requests import (
    PdfRequest,
    SendEmailRequest,
    TemplateRequest,
    TestEmailRequest,
)
from mail_dispatch.models.smtp_config import SmtpSettings
from mail_dispatch.services.attachments import (
    is_empty_buffer,
    payload_attachment,
    pdf_attachment,
)
from mail_dispatch.services.company import CompanySettingsProvider
from mail_dispatch.templates.renderer import TemplateRenderer

logger = get_logger(__name__)

TEST_EMAIL_SUBJECT = "Test Email - SMTP Configuration"

ClientFactory = Callable[[SmtpSettings, int | None], SMTPClient]


class MailDispatcher:
    """Renders and sends every email kind the service supports.

    Attributes:
        renderer: Template renderer.
        company_settings: Provider of cached company details (optional).
        smtp_timeout: Socket timeout passed to each SMTP client.
    """

    def __init__(
        self,
        renderer: TemplateRenderer,
        company_settings: CompanySettingsProvider | None = None,
        smtp_timeout: int | None = None,
        client_factory: ClientFactory = SMTPClient,
    ) -> None:
        self.renderer = renderer
        self.company_settings = company_settings
        self.smtp_timeout = smtp_timeout
        self._client_factory = client_factory

    # =========================================================================
    # Operations
    # =========================================================================

    def send_test_email(self, request: TestEmailRequest) -> EmailResult:
        """Send the SMTP diagnostic email to the sender's own address."""
        settings = request.settings
        context = {
            **self._base_context(settings),
            "smtp_host": settings.smtp_host,
            "smtp_port": settings.smtp_port,
        }
        html, text = self.renderer.render(EmailKind.TEST, context)

        email = OutgoingEmail(
            kind=EmailKind.TEST,
            recipients=[settings.from_email],
            subject=TEST_EMAIL_SUBJECT,
            body_text=text,
            body_html=html,
        )
        return self._deliver(settings, email)

    def send_email(self, request: SendEmailRequest) -> EmailResult:
        """Send a caller-composed email as-is.

        The HTML part defaults to the text body when no html is given.
        """
        attachments: list[Attachment] = []
        for index, payload in enumerate(request.attachments):
            try:
                attachments.append(payload_attachment(payload, index))
            except AttachmentError as e:
                logger.warning(f"Skipping attachment {e.filename or index}: {e}")

        email = OutgoingEmail(
            kind=EmailKind.GENERIC,
            recipients=list(request.to),
            subject=request.subject,
            body_text=request.text or None,
            body_html=request.html or request.text,
            attachments=attachments,
            reply_to=request.settings.from_email,
        )
        return self._deliver(request.settings, email)

    def send_templated(self, request: TemplateRequest) -> EmailResult:
        """Send a booking, payment, transfer or itinerary email.

        Args:
            request: Any template-backed request.

        Returns:
            EmailResult with the Message-ID.

        Raises:
            TemplateRenderError: If the template cannot be rendered.
            SMTPClientError: If delivery fails.
        """
        details = request.details
        context = {**self._base_context(request.settings), **details.to_context()}
        html, text = self.renderer.render(request.kind, context)

        email = OutgoingEmail(
            kind=request.kind,
            recipients=list(request.to),
            subject=details.subject,
            body_text=text,
            body_html=html,
            attachments=self._pdf_attachments(request, details.attachment_filename),
            reply_to=request.settings.from_email,
        )
        return self._deliver(request.settings, email)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _base_context(self, settings: SmtpSettings) -> dict[str, Any]:
        """Sign-off and company footer variables shared by every template."""
        company = self.company_settings.get() if self.company_settings else None

        signature = (
            (company.name if company else None)
            or settings.sender_name
            or DEFAULT_SIGNATURE
        )
        footer = (
            company.to_context()
            if company
            else {
                "company_email": "",
                "company_phone": "",
                "company_address": "",
                "company_website": "",
            }
        )
        return {"signature": signature, **footer}

    @staticmethod
    def _pdf_attachments(request: PdfRequest, filename: str) -> list[Attachment]:
        if is_empty_buffer(request.pdf_buffer):
            return []
        try:
            return [pdf_attachment(request.pdf_buffer, filename)]
        except AttachmentError as e:
            logger.warning(f"Sending without PDF attachment {filename}: {e}")
            return []

    def _deliver(self, settings: SmtpSettings, email: OutgoingEmail) -> EmailResult:
        """Send through a fresh SMTP client and close it afterwards.

        Raises:
            SMTPClientError: If connecting, authenticating or sending fails.
        """
        logger.info(
            log_context(
                email.kind.value,
                recipient=", ".join(email.recipients),
                smtp_host=settings.smtp_host,
                attachments=len(email.attachments),
            )
        )
        with self._client_factory(settings, self.smtp_timeout) as client:
            message_id = client.send(email)
        return EmailResult.sent(message_id)
