"""Clients module for mail dispatch service.

Contains integrations with external services like SMTP servers.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from mail_dispatch.clients.smtp import SMTPClient

__all__ = ["SMTPClient"]
