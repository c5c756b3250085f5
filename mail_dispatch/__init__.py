"""Mail Dispatch - transactional email relay for travel bookings.

Sends booking confirmations, payment receipts, transfer details and
itineraries (optionally with a PDF attached) through SMTP settings supplied
by the caller on every request.

Architecture:
    - FastAPI HTTP surface (one endpoint per email kind)
    - Pydantic v2 request validation
    - Jinja2 template renderer (HTML + plain text)
    - Per-request SMTP client (smtplib, implicit TLS on port 465)
    - TTL settings cache for company sign-off details

Modules:
    - core: Exceptions, logger, settings cache
    - config: Pydantic v2 settings
    - models: Requests, business details, rendered emails
    - clients: External integrations (SMTP)
    - services: Dispatch pipeline, attachments, company settings
    - templates: Email template rendering (Jinja2)
    - api: FastAPI application

Usage:
    # Run the HTTP server
    python -m mail_dispatch.api.main

    # Send directly from Python
    from mail_dispatch import MailDispatcher, TemplateRenderer
    from mail_dispatch.models import PaymentReceiptRequest

    dispatcher = MailDispatcher(TemplateRenderer())
    result = dispatcher.send_templated(
        PaymentReceiptRequest.model_validate(payload)
    )

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

__version__ = "1.0.0"

# Clients
from mail_dispatch.clients import SMTPClient

# Configuration
from mail_dispatch.config import DispatchConfig

# Core utilities
from mail_dispatch.core import (
    AttachmentError,
    DispatchConfigError,
    MailDispatchError,
    SettingsCache,
    SMTPClientError,
    TemplateRenderError,
    get_logger,
)

# Models
from mail_dispatch.models import EmailKind, EmailResult, SmtpSettings

# Services
from mail_dispatch.services import CompanySettingsProvider, MailDispatcher

# Templates
from mail_dispatch.templates import TemplateRenderer

__all__ = [
    # Version
    "__version__",
    # Core
    "MailDispatchError",
    "DispatchConfigError",
    "SMTPClientError",
    "TemplateRenderError",
    "AttachmentError",
    "SettingsCache",
    "get_logger",
    # Configuration
    "DispatchConfig",
    # Models
    "EmailKind",
    "EmailResult",
    "SmtpSettings",
    # Clients
    "SMTPClient",
    # Services
    "MailDispatcher",
    "CompanySettingsProvider",
    # Templates
    "TemplateRenderer",
]
