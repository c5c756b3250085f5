"""Models module for mail dispatch service.

Defines Pydantic v2 data models for dispatch requests, business details,
SMTP settings, rendered emails and results.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from mail_dispatch.models.context import (
    BookingDetails,
    BusinessDetails,
    CompanySettings,
    ItineraryDetails,
    PaymentDetails,
    TransferDetails,
)
from mail_dispatch.models.email import (
    Attachment,
    EmailKind,
    EmailResult,
    OutgoingEmail,
)
from mail_dispatch.models.requests import (
    AttachmentPayload,
    BookingConfirmationRequest,
    DispatchRequest,
    ItineraryRequest,
    PaymentReceiptRequest,
    SendEmailRequest,
    TemplateRequest,
    TestEmailRequest,
    TransferDetailsRequest,
)
from mail_dispatch.models.smtp_config import SmtpSettings

__all__ = [
    # Enums
    "EmailKind",
    # Messages
    "Attachment",
    "OutgoingEmail",
    "EmailResult",
    "SmtpSettings",
    # Business details
    "BusinessDetails",
    "BookingDetails",
    "PaymentDetails",
    "TransferDetails",
    "ItineraryDetails",
    "CompanySettings",
    # Requests
    "DispatchRequest",
    "TestEmailRequest",
    "SendEmailRequest",
    "AttachmentPayload",
    "BookingConfirmationRequest",
    "PaymentReceiptRequest",
    "TransferDetailsRequest",
    "ItineraryRequest",
    "TemplateRequest",
]
