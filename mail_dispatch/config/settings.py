"""Mail dispatch service configuration with Pydantic v2.

Manages HTTP server, CORS, optional JWT protection, SMTP transport defaults,
settings cache and logging configuration loaded from environment variables
or .env file.

SMTP credentials are NOT configured here: every request carries its own
settings object.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mail_dispatch.core.exceptions import DispatchConfigError


class DispatchConfig(BaseSettings):
    """Mail dispatch service configuration.

    Loads settings from environment variables and .env file using Pydantic v2.
    All settings are case-sensitive and strictly validated.

    Attributes:
        SERVICE_NAME: Name of the service.
        SERVICE_VERSION: Version reported by the API index.
        API_HOST: Host the HTTP server binds to.
        PORT: Port the HTTP server listens on.
        ENVIRONMENT: Runtime environment (development, production, test).
        CORS_ORIGIN: Comma-separated list of allowed origins ("*" for any).
        JWT_SECRET: Secret for bearer-token protection (empty disables it).
        JWT_ALGORITHM: Algorithm used to verify bearer tokens.
        SMTP_TIMEOUT: Socket timeout for SMTP sessions in seconds.
        SETTINGS_CACHE_TTL_SECONDS: Lifetime of settings cache entries.
        COMPANY_SETTINGS_FILE: JSON file with company display details.
        MAX_REQUEST_SIZE_MB: Maximum accepted request body size.
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        LOG_TO_FILE: Whether to log to file.
        LOG_DIR: Directory for log files.
        TEMPLATE_DIR: Directory containing Jinja2 email templates.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # ========================================================================
    # Service Configuration
    # ========================================================================
    SERVICE_NAME: str = Field(
        default="mail-dispatch",
        description="Name of the service",
    )
    SERVICE_VERSION: str = Field(
        default="1.0.0",
        description="Service version",
    )
    API_HOST: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    PORT: int = Field(
        default=3001,
        ge=1,
        le=65535,
        description="API server port",
    )
    ENVIRONMENT: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
        pattern="^(development|production|test)$",
        description="Runtime environment",
    )
    CORS_ORIGIN: str = Field(
        default="*",
        description="Comma-separated allowed CORS origins",
    )
    MAX_REQUEST_SIZE_MB: int = Field(
        default=10,
        gt=0,
        le=100,
        description="Maximum request body size in megabytes",
    )

    # ========================================================================
    # Authentication Configuration
    # ========================================================================
    JWT_SECRET: str = Field(
        default="",
        description="Bearer-token secret; empty disables authentication",
    )
    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Bearer-token signing algorithm",
    )

    # ========================================================================
    # SMTP Transport Configuration
    # ========================================================================
    SMTP_TIMEOUT: int = Field(
        default=120,
        ge=5,
        le=600,
        description="SMTP connection timeout in seconds",
    )

    # ========================================================================
    # Settings Cache Configuration
    # ========================================================================
    SETTINGS_CACHE_TTL_SECONDS: int = Field(
        default=300,
        gt=0,
        le=86400,
        description="Settings cache lifetime in seconds",
    )
    COMPANY_SETTINGS_FILE: str = Field(
        default="",
        description="JSON file with company display details",
    )

    # ========================================================================
    # Logging Configuration
    # ========================================================================
    LOG_LEVEL: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level",
    )
    LOG_TO_FILE: bool = Field(
        default=True,
        description="Whether to log to file",
    )
    LOG_DIR: str = Field(
        default="./logs",
        description="Directory for log files",
    )
    LOG_MAX_SIZE_MB: int = Field(
        default=10,
        gt=0,
        description="Maximum log file size in megabytes",
    )
    LOG_BACKUP_COUNT: int = Field(
        default=5,
        gt=0,
        description="Number of backup log files to keep",
    )

    # ========================================================================
    # Template Configuration
    # ========================================================================
    TEMPLATE_DIR: str = Field(
        default_factory=lambda: str(Path(__file__).parent.parent / "templates"),
        description="Directory containing Jinja2 email templates",
    )

    @field_validator("ENVIRONMENT", mode="before")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        """Lower-case the environment name.

        Args:
            v: Raw environment value.

        Returns:
            Lower-cased, stripped environment name.
        """
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("CORS_ORIGIN")
    @classmethod
    def validate_cors_origin(cls, v: str) -> str:
        """Validate CORS origin list is not empty.

        Args:
            v: Comma-separated origins.

        Returns:
            Stripped origin list.

        Raises:
            ValueError: If no origin is given.
        """
        if not v.strip():
            raise ValueError("CORS_ORIGIN cannot be empty (use '*' to allow any)")
        return v.strip()

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [o.strip() for o in self.CORS_ORIGIN.split(",") if o.strip()]

    @property
    def auth_enabled(self) -> bool:
        """Whether bearer-token protection is active."""
        return bool(self.JWT_SECRET.strip())

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def max_request_bytes(self) -> int:
        return self.MAX_REQUEST_SIZE_MB * 1024 * 1024

    def validate_auth_config(self) -> None:
        """Validate authentication configuration.

        Rejects algorithms that cannot be verified with a shared secret when
        authentication is enabled.

        Raises:
            DispatchConfigError: If JWT settings are inconsistent.
        """
        if self.auth_enabled and not self.JWT_ALGORITHM.upper().startswith("HS"):
            raise DispatchConfigError(
                f"JWT_ALGORITHM {self.JWT_ALGORITHM} requires a key pair; "
                f"only HMAC algorithms (HS256, HS384, HS512) are supported."
            )
