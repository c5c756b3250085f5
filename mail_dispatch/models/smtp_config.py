"""SMTP settings model.

Defines the per-request SMTP settings object. Settings are supplied by the
caller on every request and never stored by this service.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from email.utils import formataddr

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# Port on which SMTP servers expect TLS from the first byte (SMTPS)
IMPLICIT_TLS_PORT = 465


class SmtpSettings(BaseModel):
    """SMTP server settings sent with each request.

    Attributes:
        smtp_host: SMTP server hostname.
        smtp_port: SMTP server port (1-65535).
        smtp_user: SMTP authentication username.
        smtp_password: SMTP authentication password.
        sender_name: Sender display name (optional).
        sender_email: Sender email address (optional, defaults to smtp_user).
    """

    model_config = ConfigDict(extra="ignore")

    smtp_host: str = Field(..., description="SMTP server hostname")
    smtp_port: int = Field(..., ge=1, le=65535, description="SMTP server port")
    smtp_user: str = Field(..., description="SMTP authentication username")
    smtp_password: str = Field(..., description="SMTP authentication password")
    sender_name: str | None = Field(default=None, description="Sender display name")
    sender_email: EmailStr | None = Field(
        default=None, description="Sender email address"
    )

    @field_validator("smtp_host", "smtp_user")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Validate host and username are not empty.

        Args:
            v: Value to validate.

        Returns:
            Stripped value.

        Raises:
            ValueError: If value is empty or whitespace.
        """
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("smtp_password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate password is not empty (kept unstripped).

        Raises:
            ValueError: If password is empty or whitespace.
        """
        if not v or not v.strip():
            raise ValueError("SMTP password cannot be empty")
        return v

    @field_validator("sender_name", "sender_email", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat blank optional sender fields as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def secure(self) -> bool:
        """Whether the connection uses implicit TLS (port 465)."""
        return self.smtp_port == IMPLICIT_TLS_PORT

    @property
    def from_email(self) -> str:
        """Envelope sender address, falling back to the SMTP username."""
        return str(self.sender_email) if self.sender_email else self.smtp_user

    @property
    def from_header(self) -> str:
        """RFC 5322 ``From`` header value."""
        return formataddr((self.sender_name or "", self.from_email))
