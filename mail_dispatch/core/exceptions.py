"""Custom exceptions for the mail dispatch service.

Defines specific exception types for the validation, rendering and delivery
stages so the API layer can map each failure to the right HTTP response.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""


class MailDispatchError(Exception):
    """Base exception for all mail dispatch errors.

    Serves as the parent class for all custom exceptions in the service,
    allowing consumers to catch every dispatch-related error with a single
    except block.

    Example:
        try:
            dispatcher.send_templated(request)
        except MailDispatchError as e:
            logger.error(f"Dispatch error: {e}")
    """

    pass


class DispatchConfigError(MailDispatchError):
    """Exception raised for configuration errors.

    Indicates invalid or missing configuration in DispatchConfig or in the
    per-request SMTP settings.

    Example:
        raise DispatchConfigError("SMTP_HOST cannot be empty")
    """

    pass


class RequestValidationFailed(MailDispatchError):
    """Exception raised when a request is missing required fields.

    Attributes:
        message (str): Description of the validation failure.
        fields (list[str]): Dotted paths of the offending fields.

    Example:
        raise RequestValidationFailed(
            "Missing or invalid required fields: settings.smtp_host",
            fields=["settings.smtp_host"],
        )
    """

    def __init__(self, message: str, fields: list[str] | None = None):
        """Initialize validation error.

        Args:
            message: Error description.
            fields: Optional list of offending field paths.
        """
        super().__init__(message)
        self.fields = fields or []


class SMTPClientError(MailDispatchError):
    """Exception raised for SMTP connection/delivery failures.

    The message carries the underlying library's error text unmodified so
    it can be returned to the caller verbatim.

    Attributes:
        message (str): Description of the SMTP error.
        is_transient (bool): Whether error looks temporary.

    Example:
        raise SMTPClientError(
            "Connection unexpectedly closed",
            is_transient=True
        )
    """

    def __init__(self, message: str, is_transient: bool = False):
        """Initialize SMTP client error.

        Args:
            message: Error description.
            is_transient: Whether error is temporary.
        """
        super().__init__(message)
        self.is_transient = is_transient


class TemplateRenderError(MailDispatchError):
    """Exception raised for template rendering failures.

    Indicates problems rendering Jinja2 templates or missing template files.

    Attributes:
        message (str): Description of the template error.
        template_name (str, optional): Name of the template that failed.

    Example:
        raise TemplateRenderError(
            "Template not found: payment_receipt.html",
            template_name="payment_receipt.html"
        )
    """

    def __init__(self, message: str, template_name: str | None = None):
        """Initialize template render error.

        Args:
            message: Error description.
            template_name: Optional name of the template that failed.
        """
        super().__init__(message)
        self.template_name = template_name


class AttachmentError(MailDispatchError):
    """Exception raised when attachment content cannot be decoded.

    Never surfaces to the HTTP caller: the dispatcher logs it and sends the
    email without the attachment.

    Attributes:
        message (str): Description of the decoding problem.
        filename (str, optional): Intended attachment filename.
    """

    def __init__(self, message: str, filename: str | None = None):
        super().__init__(message)
        self.filename = filename
