"""Dispatch request models.

One request type per endpoint, each tagged with the EmailKind it produces.
Validation happens at the HTTP boundary: a request that parses is complete
enough to send, so no business logic ever runs on a partial request.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)

from mail_dispatch.models.context import (
    BookingDetails,
    ItineraryDetails,
    PaymentDetails,
    TransferDetails,
)
from mail_dispatch.models.email import EmailKind
from mail_dispatch.models.smtp_config import SmtpSettings


def _split_recipients(value: Any) -> Any:
    """Accept a comma-separated string or a list of addresses."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, list):
        recipients: list[Any] = []
        for item in value:
            if isinstance(item, str):
                recipients.extend(p.strip() for p in item.split(",") if p.strip())
            else:
                recipients.append(item)
        return recipients
    return value


Recipients = Annotated[
    list[EmailStr],
    BeforeValidator(_split_recipients),
    Field(min_length=1, description="Recipient address(es)"),
]


class DispatchRequest(BaseModel):
    """Base request: every endpoint needs SMTP settings.

    Attributes:
        settings: SMTP settings used for this request only.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: ClassVar[EmailKind]

    settings: SmtpSettings = Field(..., description="SMTP settings")


class TestEmailRequest(DispatchRequest):
    """Request for POST /api/email/test."""

    __test__ = False  # not a pytest test class

    kind: ClassVar[EmailKind] = EmailKind.TEST


class AttachmentPayload(BaseModel):
    """Caller-supplied attachment for the generic send endpoint.

    Content is left loosely typed: undecodable entries are dropped with a
    warning rather than rejecting the whole request.

    Attributes:
        filename: Attachment filename.
        content: String (utf-8 or base64) or array of byte values.
        content_type: MIME type (optional).
        encoding: "base64" when content is a base64 string (optional).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    filename: str | None = Field(default=None, description="Attachment filename")
    content: Any = Field(default=None, description="Attachment content")
    content_type: str | None = Field(
        default=None, alias="contentType", description="MIME content type"
    )
    encoding: str | None = Field(default=None, description="Content encoding")


class SendEmailRequest(DispatchRequest):
    """Request for POST /api/email/send.

    Validation:
        - At least one valid recipient.
        - Subject must not be empty or whitespace-only.
        - Either text or html must be provided.
    """

    kind: ClassVar[EmailKind] = EmailKind.GENERIC

    to: Recipients
    subject: str = Field(..., min_length=1, max_length=998, description="Subject")
    text: str | None = Field(default=None, description="Plain-text body")
    html: str | None = Field(
        default=None, validate_default=True, description="HTML body"
    )
    attachments: list[AttachmentPayload] = Field(
        default_factory=list, description="Attachments"
    )

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v: str) -> str:
        """Validate subject is not empty or whitespace-only.

        Raises:
            ValueError: If subject is empty or only whitespace.
        """
        if not v.strip():
            raise ValueError("Subject cannot be empty or whitespace")
        return v.strip()

    @field_validator("html")
    @classmethod
    def validate_text_or_html(cls, v: str | None, info) -> str | None:
        """Validate either text or html is provided.

        Args:
            v: HTML body to validate.
            info: Validation context with previously validated fields.

        Returns:
            HTML body value.

        Raises:
            ValueError: If both text and html are empty.
        """
        text = info.data.get("text")
        if not (v and v.strip()) and not (text and text.strip()):
            raise ValueError("Either text or html must be provided")
        return v

    @field_validator("attachments", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class PdfRequest(DispatchRequest):
    """Base for template-backed requests that may carry a PDF.

    Attributes:
        pdf_buffer: PDF as a JSON array of byte values (or a serialized
            Node Buffer object). Malformed content is tolerated here and
            dropped later.
    """

    pdf_buffer: Any = Field(default=None, alias="pdfBuffer", description="PDF bytes")


class BookingConfirmationRequest(PdfRequest):
    """Request for POST /api/email/booking-confirmation."""

    kind: ClassVar[EmailKind] = EmailKind.BOOKING_CONFIRMATION

    to: Recipients
    details: BookingDetails = Field(..., alias="bookingDetails")


class PaymentReceiptRequest(PdfRequest):
    """Request for POST /api/email/payment-receipt."""

    kind: ClassVar[EmailKind] = EmailKind.PAYMENT_RECEIPT

    to: Recipients
    details: PaymentDetails = Field(..., alias="paymentDetails")


class TransferDetailsRequest(PdfRequest):
    """Request for POST /api/email/transfer-details."""

    kind: ClassVar[EmailKind] = EmailKind.TRANSFER_DETAILS

    to: Recipients
    details: TransferDetails = Field(..., alias="transferDetails")


class ItineraryRequest(PdfRequest):
    """Request for POST /api/email/itinerary.

    Uses ``recipient`` rather than ``to``, as the itinerary sender in the
    back office does.
    """

    kind: ClassVar[EmailKind] = EmailKind.ITINERARY

    recipient: Recipients
    details: ItineraryDetails = Field(..., alias="itineraryDetails")

    @property
    def to(self) -> list[str]:
        return self.recipient


TemplateRequest = (
    BookingConfirmationRequest
    | PaymentReceiptRequest
    | TransferDetailsRequest
    | ItineraryRequest
)
