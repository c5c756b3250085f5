"""SMTP client for email delivery.

Builds MIME messages (text + HTML alternatives, optional attachments) and
submits them through the SMTP server named in the request's settings.

Transport rules:
- Port 465: implicit TLS (SMTPS) from the first byte.
- Any other port: plain connection, upgraded with STARTTLS when the
  server advertises it.

One client is created per request and closed when the request finishes.
Delivery is attempted exactly once; failures surface as SMTPClientError
carrying the library's error text.

Author: Triptics
Version: 1.0.0
"""

from __future__ import annotations

import smtplib
import ssl
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid

from mail_dispatch.core.exceptions import SMTPClientError
from mail_dispatch.core.logger import get_logger
from mail_dispatch.models.email import Attachment, OutgoingEmail
from mail_dispatch.models.smtp_config import SmtpSettings

logger = get_logger(__name__)


class SMTPClient:
    """SMTP email delivery client bound to one set of SMTP settings.

    Attributes:
        settings: SMTP settings from the request.
        timeout: Socket timeout in seconds.
    """

    DEFAULT_TIMEOUT = 120

    def __init__(self, settings: SmtpSettings, timeout: int | None = None) -> None:
        """Initialize SMTP client.

        Args:
            settings: SMTP settings supplied by the caller.
            timeout: Socket timeout in seconds (DEFAULT_TIMEOUT if None).
        """
        self.settings = settings
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._connection: smtplib.SMTP | None = None

        logger.debug(
            f"SMTP Client initialized: {settings.smtp_host}:{settings.smtp_port} "
            f"(secure={settings.secure})"
        )

    def _create_connection(self) -> smtplib.SMTP:
        """Open, secure and authenticate a new SMTP connection.

        Returns:
            Authenticated SMTP connection.

        Raises:
            SMTPClientError: If connection, TLS or login fails.
        """
        host = self.settings.smtp_host
        port = self.settings.smtp_port
        smtp: smtplib.SMTP | None = None

        try:
            logger.debug(f"Connecting to SMTP: {host}:{port}")
            if self.settings.secure:
                smtp = smtplib.SMTP_SSL(
                    host,
                    port,
                    timeout=self.timeout,
                    context=ssl.create_default_context(),
                )
            else:
                smtp = smtplib.SMTP(host, port, timeout=self.timeout)
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    logger.debug("Starting TLS...")
                    smtp.starttls(context=ssl.create_default_context())
                    smtp.ehlo()

            logger.debug("Authenticating...")
            smtp.login(self.settings.smtp_user, self.settings.smtp_password)

            logger.debug("SMTP connection established")
            return smtp

        except Exception as e:
            logger.error(f"Failed to establish SMTP connection to {host}:{port}: {e}")
            if smtp is not None:
                self._quit(smtp)
            raise SMTPClientError(
                self._error_text(e),
                is_transient=self._is_transient_error(e),
            ) from e

    def _get_connection(self) -> smtplib.SMTP:
        """Return the open connection, creating it on first use."""
        if self._connection is None:
            self._connection = self._create_connection()
        return self._connection

    @staticmethod
    def _quit(smtp: smtplib.SMTP) -> None:
        try:
            smtp.quit()
        except Exception as e:
            logger.debug(f"Error closing SMTP connection (non-critical): {e}")

    def build_message(self, email: OutgoingEmail) -> MIMEMultipart:
        """Build the MIME message for an outgoing email.

        Layout is ``multipart/alternative`` (text, html) or, with
        attachments, ``multipart/mixed`` wrapping that alternative part.

        Args:
            email: Rendered email.

        Returns:
            MIME message with From/To/Subject/Date/Message-ID set.
        """
        body = MIMEMultipart("alternative")
        if email.body_text:
            body.attach(MIMEText(email.body_text, "plain", "utf-8"))
        if email.body_html:
            body.attach(MIMEText(email.body_html, "html", "utf-8"))

        if email.attachments:
            msg = MIMEMultipart("mixed")
            msg.attach(body)
            for attachment in email.attachments:
                msg.attach(self._attachment_part(attachment))
        else:
            msg = body

        msg["From"] = self.settings.from_header
        msg["To"] = ", ".join(email.recipients)
        msg["Subject"] = email.subject
        msg["Date"] = formatdate(localtime=True)
        msg["Message-ID"] = make_msgid(domain=self._sender_domain())
        if email.reply_to:
            msg["Reply-To"] = email.reply_to

        return msg

    @staticmethod
    def _attachment_part(attachment: Attachment) -> MIMEBase:
        part = MIMEBase(attachment.maintype, attachment.subtype)
        part.set_payload(attachment.content)
        encoders.encode_base64(part)
        part.add_header(
            "Content-Disposition", "attachment", filename=attachment.filename
        )
        return part

    def _sender_domain(self) -> str | None:
        _, _, domain = self.settings.from_email.rpartition("@")
        return domain or None

    def send(self, email: OutgoingEmail) -> str:
        """Send an email via SMTP.

        Args:
            email: Rendered email to deliver.

        Returns:
            The Message-ID header of the sent message.

        Raises:
            SMTPClientError: If connecting, authenticating or sending fails.
        """
        msg = self.build_message(email)
        message_id = msg["Message-ID"]

        try:
            smtp = self._get_connection()
            refused = smtp.send_message(
                msg,
                from_addr=self.settings.from_email,
                to_addrs=email.recipients,
            )
        except SMTPClientError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to send {email.kind.value} email to "
                f"{', '.join(email.recipients)}: {e}"
            )
            raise SMTPClientError(
                self._error_text(e),
                is_transient=self._is_transient_error(e),
            ) from e

        if refused:
            logger.warning(f"Recipients refused by server: {', '.join(refused)}")

        logger.info(
            f"Email sent to {', '.join(email.recipients)} - "
            f"Subject: {email.subject[:50]} ({message_id})"
        )
        return message_id

    def validate_connection(self) -> bool:
        """Test SMTP connection and authentication.

        Returns:
            True if connection successful, False otherwise.
        """
        try:
            logger.info("Testing SMTP connection...")
            self._get_connection()
            logger.info("SMTP connection test successful")
            return True

        except SMTPClientError as e:
            logger.error(f"SMTP connection test failed: {e}")
            return False

    def close(self) -> None:
        """Close SMTP connection and cleanup resources."""
        if self._connection is not None:
            self._quit(self._connection)
            self._connection = None
            logger.debug("SMTP client closed")

    @staticmethod
    def _error_text(error: Exception) -> str:
        """Error text passed back to the caller unmodified."""
        return str(error) or error.__class__.__name__

    @staticmethod
    def _is_transient_error(error: Exception) -> bool:
        """Determine if error is likely temporary.

        Args:
            error: Exception to analyze.

        Returns:
            True if error is likely transient.
        """
        if isinstance(error, smtplib.SMTPResponseException):
            return 400 <= error.smtp_code < 500

        error_str = str(error).lower()
        transient_keywords = [
            "timeout",
            "timed out",
            "connection",
            "temporarily",
            "try again",
            "unavailable",
            "refused",
            "reset",
            "broken pipe",
        ]
        return any(keyword in error_str for keyword in transient_keywords)

    def __enter__(self) -> SMTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.close()
