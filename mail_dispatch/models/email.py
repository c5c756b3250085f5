"""Email data models.

Defines the email kind enumeration, the rendered outgoing message handed
to the SMTP transport, and the result returned to HTTP callers.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

PDF_CONTENT_TYPE = "application/pdf"


class EmailKind(str, Enum):
    """Email kind enumeration.

    One value per dispatch endpoint. Template-backed kinds map to a pair of
    ``<kind>.html`` / ``<kind>.txt`` templates.

    Attributes:
        TEST: Diagnostic message sent to the sender's own address.
        GENERIC: Caller-supplied subject and body, sent as-is.
        BOOKING_CONFIRMATION: Booking confirmation with itinerary PDF.
        PAYMENT_RECEIPT: Payment receipt with invoice PDF.
        TRANSFER_DETAILS: Transfer confirmation with vehicle/driver details.
        ITINERARY: Travel itinerary delivery.
    """

    TEST = "test_email"
    GENERIC = "generic"
    BOOKING_CONFIRMATION = "booking_confirmation"
    PAYMENT_RECEIPT = "payment_receipt"
    TRANSFER_DETAILS = "transfer_details"
    ITINERARY = "itinerary"


class Attachment(BaseModel):
    """Decoded attachment ready to be added to a MIME message.

    Attributes:
        filename: Attachment filename shown to the recipient.
        content: Raw attachment bytes.
        content_type: MIME type (e.g. application/pdf).
    """

    filename: str = Field(..., min_length=1, description="Attachment filename")
    content: bytes = Field(..., description="Raw attachment bytes")
    content_type: str = Field(
        default="application/octet-stream", description="MIME content type"
    )

    @property
    def maintype(self) -> str:
        return self.content_type.split("/", 1)[0]

    @property
    def subtype(self) -> str:
        parts = self.content_type.split("/", 1)
        return parts[1] if len(parts) == 2 else "octet-stream"


class OutgoingEmail(BaseModel):
    """Fully rendered email handed to the SMTP transport.

    Attributes:
        kind: Which operation produced this email.
        recipients: Recipient addresses (at least one).
        subject: Email subject line.
        body_text: Plain-text body (optional).
        body_html: HTML body (optional).
        attachments: Decoded attachments.
        reply_to: Reply-To address (optional).
    """

    kind: EmailKind = Field(..., description="Email kind")
    recipients: list[str] = Field(..., min_length=1, description="Recipients")
    subject: str = Field(..., description="Email subject line")
    body_text: str | None = Field(default=None, description="Plain-text body")
    body_html: str | None = Field(default=None, description="HTML body")
    attachments: list[Attachment] = Field(
        default_factory=list, description="Decoded attachments"
    )
    reply_to: str | None = Field(default=None, description="Reply-To address")


class EmailResult(BaseModel):
    """Outcome of a send operation, serialized as the HTTP response body.

    Attributes:
        success: Whether the message was accepted by the SMTP server.
        message_id: Message-ID header of the sent message (on success).
        error: Human-readable error text (on failure).
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(..., description="Whether the email was sent")
    message_id: str | None = Field(
        default=None, alias="messageId", description="Message-ID of sent email"
    )
    error: str | None = Field(default=None, description="Error description")

    @classmethod
    def sent(cls, message_id: str) -> EmailResult:
        return cls(success=True, message_id=message_id)

    @classmethod
    def failed(cls, error: str) -> EmailResult:
        return cls(success=False, error=error)

    def to_response(self) -> dict:
        """Serialize with camelCase keys, omitting unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
