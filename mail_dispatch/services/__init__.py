"""Services module for mail dispatch service.

Contains the dispatch pipeline, attachment decoding and the company
settings provider.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from mail_dispatch.services.company import CompanySettingsProvider
from mail_dispatch.services.dispatcher import TEST_EMAIL_SUBJECT, MailDispatcher

__all__ = ["CompanySettingsProvider", "MailDispatcher", "TEST_EMAIL_SUBJECT"]
