"""Centralized logging configuration for the mail dispatch service.

Provides the logger factory with file rotation, console output and
consistent formatting across all service components.

Features:
    - Dual output: Console (stdout) + rotating file handlers
    - Separate error log (mail_dispatch.error.log)
    - Configurable log levels per module
    - Credential masking in the startup summary
    - Startup banner with configuration summary

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from mail_dispatch.config.settings import DispatchConfig

# Global configuration
_ROOT_LOGGER: logging.Logger | None = None
_LOG_DIR = Path(__file__).parent.parent / "logs"
_LOG_FORMAT_DETAILED = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
)
_LOG_FORMAT_SIMPLE = "%(asctime)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Module-level logger configuration
_MODULE_LEVELS = {
    "mail_dispatch.clients": logging.DEBUG,
    "mail_dispatch.services": logging.DEBUG,
    "mail_dispatch.templates": logging.INFO,
    "mail_dispatch.config": logging.INFO,
}

_banner_printed = False

# ============================================================================
# ANSI Color Codes
# ============================================================================
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "red": "\033[31m",
}


def _mask_secret(secret: str) -> str:
    """Mask a secret for display, showing only first and last char.

    Args:
        secret: Secret to mask.

    Returns:
        Masked secret string.
    """
    if not secret:
        return "(not set)"
    if len(secret) <= 2:
        return "***"
    return f"{secret[0]}{'*' * (len(secret) - 2)}{secret[-1]}"


def print_banner() -> None:
    """Print the service startup banner once per process."""
    global _banner_printed  # noqa: PLW0603
    if _banner_printed:
        return

    _banner_printed = True
    c = COLORS
    print(f"\n{c['dim']}{'─' * 72}{c['reset']}")
    print(f"{c['cyan']}{c['bold']}  Triptics Mail Dispatch Service{c['reset']}")
    print(f"{c['dim']}{'─' * 72}{c['reset']}")


def print_config_summary(settings: "DispatchConfig") -> None:
    """Print a formatted configuration summary organized by categories.

    Args:
        settings: DispatchConfig instance with loaded configuration.
    """
    c = COLORS

    def _line(label: str, value: str, color: str = "cyan") -> None:
        print(f"  {c['dim']}│{c['reset']} {label:<26} {c[color]}{value}{c['reset']}")

    def _header(title: str, color: str) -> None:
        print(f"\n  {c[color]}▶ {title}{c['reset']}")
        print(f"  {c['dim']}├{'─' * 50}{c['reset']}")

    _header("Service Configuration", "green")
    _line("Service Name", settings.SERVICE_NAME)
    _line("Version", settings.SERVICE_VERSION)
    _line("Environment", settings.ENVIRONMENT)
    _line("Host", settings.API_HOST)
    _line("Port", str(settings.PORT))
    _line("CORS Origins", ", ".join(settings.cors_origins))
    _line("Max Request Size", f"{settings.MAX_REQUEST_SIZE_MB} MB")

    _header("Authentication", "magenta")
    _line(
        "JWT Protection",
        "enabled" if settings.auth_enabled else "disabled",
        "green" if settings.auth_enabled else "yellow",
    )
    _line("JWT Secret", _mask_secret(settings.JWT_SECRET))
    _line("JWT Algorithm", settings.JWT_ALGORITHM)

    _header("Delivery", "blue")
    _line("SMTP Timeout", f"{settings.SMTP_TIMEOUT}s")
    _line("Settings Cache TTL", f"{settings.SETTINGS_CACHE_TTL_SECONDS}s")
    _line("Company Settings", settings.COMPANY_SETTINGS_FILE or "(not set)")

    _header("Logging Configuration", "yellow")
    _line("Level", settings.LOG_LEVEL, "green")
    _line("Log to File", str(settings.LOG_TO_FILE).lower())
    _line("Directory", settings.LOG_DIR)
    _line("Max File Size", f"{settings.LOG_MAX_SIZE_MB} MB")
    _line("Backup Count", str(settings.LOG_BACKUP_COUNT))

    print(f"\n{c['dim']}{'─' * 72}{c['reset']}")
    print(
        f"  {c['green']}{c['bold']}✓ Service ready{c['reset']} "
        f"{c['dim']}│{c['reset']} "
        f"Docs: {c['cyan']}http://localhost:{settings.PORT}/docs{c['reset']}"
    )
    print(f"{c['dim']}{'─' * 72}{c['reset']}\n")


def setup_logging(
    log_dir: Path | str | None = None,
    log_level: str = "INFO",
    file_level: str = "DEBUG",
    console_level: str | None = None,
    enable_file: bool = True,
    max_size_mb: int = 10,
    backup_count: int = 5,
    settings: Optional["DispatchConfig"] = None,
) -> None:
    """Configure root logger with file and console handlers.

    Should be called once at application startup (the API lifespan does it).

    Args:
        log_dir: Directory for log files. Defaults to mail_dispatch/logs.
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file_level: File handler level (usually DEBUG for comprehensive logging).
        console_level: Console handler level (defaults to log_level).
        enable_file: Whether to write logs to files.
        max_size_mb: Size of each log file before rotation.
        backup_count: Rotated files to keep.
        settings: Optional DispatchConfig for printing configuration summary.

    Example:
        setup_logging(
            log_level="INFO",
            console_level="WARNING",  # Only show warnings and errors on console
            settings=config,
        )
    """
    global _ROOT_LOGGER, _LOG_DIR

    _LOG_DIR = Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all levels, handlers filter

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(
        getattr(logging, (console_level or log_level).upper(), logging.INFO)
    )
    console_handler.setFormatter(
        logging.Formatter(_LOG_FORMAT_SIMPLE, datefmt=_DATE_FORMAT)
    )
    root_logger.addHandler(console_handler)

    if enable_file:
        _LOG_DIR.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            _LOG_DIR / "mail_dispatch.log",
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(getattr(logging, file_level.upper(), logging.DEBUG))
        file_handler.setFormatter(
            logging.Formatter(_LOG_FORMAT_DETAILED, datefmt=_DATE_FORMAT)
        )
        root_logger.addHandler(file_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            _LOG_DIR / "mail_dispatch.error.log",
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(
            logging.Formatter(_LOG_FORMAT_DETAILED, datefmt=_DATE_FORMAT)
        )
        root_logger.addHandler(error_handler)

    for module_name, level in _MODULE_LEVELS.items():
        logging.getLogger(module_name).setLevel(level)

    _ROOT_LOGGER = root_logger

    if settings:
        print_banner()
        print_config_summary(settings)


def get_logger(name: str, log_level: str | None = None) -> logging.Logger:
    """Get a configured logger instance for a module.

    Call setup_logging() once at startup for full configuration.

    Args:
        name: Logger name (typically __name__ of calling module).
        log_level: Optional override for logger level.

    Returns:
        Logger instance ready for use.

    Example:
        from mail_dispatch.core.logger import get_logger

        logger = get_logger(__name__)
        logger.info("Booking confirmation sent")
    """
    logger = logging.getLogger(name)

    if log_level:
        logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


def log_context(
    operation: str,
    recipient: str | None = None,
    **kwargs,
) -> str:
    """Format a log context string with metadata.

    Args:
        operation: Operation name (e.g., "booking_confirmation").
        recipient: Recipient email if applicable.
        **kwargs: Additional context key-value pairs.

    Returns:
        Formatted context string for logging.

    Example:
        msg = log_context(
            "payment_receipt",
            recipient="user@example.com",
            smtp_host="smtp.gmail.com",
        )
        # payment_receipt | →user@example.com (smtp_host=smtp.gmail.com)
    """
    context_parts = [operation]

    if recipient:
        context_parts.append(f"→{recipient}")

    context = " | ".join(context_parts)

    if kwargs:
        extra = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        context = f"{context} ({extra})"

    return context
