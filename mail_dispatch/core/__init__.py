"""Core module for mail dispatch service.

Provides exceptions, logging configuration and the settings cache.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from mail_dispatch.core.cache import EXPIRED, SettingsCache
from mail_dispatch.core.exceptions import (
    AttachmentError,
    DispatchConfigError,
    MailDispatchError,
    RequestValidationFailed,
    SMTPClientError,
    TemplateRenderError,
)
from mail_dispatch.core.logger import (
    get_logger,
    log_context,
    setup_logging,
)

__all__ = [
    # Exceptions
    "MailDispatchError",
    "DispatchConfigError",
    "RequestValidationFailed",
    "SMTPClientError",
    "TemplateRenderError",
    "AttachmentError",
    # Cache
    "SettingsCache",
    "EXPIRED",
    # Logging
    "get_logger",
    "setup_logging",
    "log_context",
]
