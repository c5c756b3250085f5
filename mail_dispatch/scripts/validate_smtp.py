#!/usr/bin/env python3
"""Validate SMTP settings and connectivity.

Tests SMTP server reachability, TLS/SSL, and authentication with the same
settings object the HTTP API receives, and optionally sends the diagnostic
test email to the sender address.

Usage:
    python -m mail_dispatch.scripts.validate_smtp --host smtp.gmail.com \\
        --port 587 --user me@example.com --password app-password
    python -m mail_dispatch.scripts.validate_smtp ... --send-test
    python -m mail_dispatch.scripts.validate_smtp ... --verbose
"""

from __future__ import annotations

import argparse
import os
import sys

from pydantic import ValidationError

from mail_dispatch.clients.smtp import SMTPClient
from mail_dispatch.config import DispatchConfig
from mail_dispatch.core.exceptions import MailDispatchError
from mail_dispatch.core.logger import get_logger, setup_logging
from mail_dispatch.models.requests import TestEmailRequest
from mail_dispatch.models.smtp_config import SmtpSettings
from mail_dispatch.services.dispatcher import MailDispatcher
from mail_dispatch.templates.renderer import TemplateRenderer

logger = get_logger(__name__)


def print_header() -> None:
    """Print script header."""
    print("\n" + "=" * 80)
    print("  📧 Mail Dispatch SMTP Settings Validator")
    print("=" * 80)


def print_footer() -> None:
    """Print script footer."""
    print("=" * 80 + "\n")


def print_settings(settings: SmtpSettings, timeout: int) -> None:
    """Print SMTP settings (with credentials masked)."""
    print("\n📋 SMTP Settings:")
    print(f"  SMTP Host:      {settings.smtp_host}")
    print(f"  SMTP Port:      {settings.smtp_port}")
    print(f"  SMTP Username:  {settings.smtp_user}")
    print(f"  SMTP Password:  {'*' * 8}")
    print(f"  Sender:         {settings.from_header}")
    print(f"  Transport:      {'implicit TLS' if settings.secure else 'STARTTLS'}")
    print(f"  Timeout:        {timeout}s")


def validate_smtp_connection(settings: SmtpSettings, timeout: int) -> bool:
    """Connect and authenticate.

    Returns:
        True if connection successful, False otherwise.
    """
    print("\n🧪 Testing SMTP Connection...")
    with SMTPClient(settings, timeout=timeout) as client:
        if client.validate_connection():
            print("✅ SMTP connection test PASSED")
            return True

    print("❌ SMTP connection test FAILED")
    return False


def send_test_email(settings: SmtpSettings, timeout: int) -> bool:
    """Send the diagnostic test email to the sender address.

    Returns:
        True if test email sent successfully, False otherwise.
    """
    print(f"\n📧 Sending Test Email to: {settings.from_email}")
    dispatcher = MailDispatcher(TemplateRenderer(), smtp_timeout=timeout)

    try:
        result = dispatcher.send_test_email(TestEmailRequest(settings=settings))
    except MailDispatchError as e:
        print(f"❌ Failed to send test email: {e}")
        return False

    print(f"✅ Test email sent ({result.message_id})")
    print("   Check your inbox for the test email!")
    return True


def build_parser() -> argparse.ArgumentParser:
    """Command-line parser. Password falls back to $SMTP_PASSWORD."""
    parser = argparse.ArgumentParser(
        description="Validate SMTP settings used by the mail dispatch API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Quick validation (STARTTLS on 587)
  python -m mail_dispatch.scripts.validate_smtp --host smtp.gmail.com \\
      --port 587 --user me@gmail.com --password app-password

  # Implicit TLS and a test email
  python -m mail_dispatch.scripts.validate_smtp --host smtp.gmail.com \\
      --port 465 --user me@gmail.com --send-test
        """,
    )

    parser.add_argument("--host", required=True, help="SMTP server hostname")
    parser.add_argument("--port", type=int, default=587, help="SMTP port")
    parser.add_argument("--user", required=True, help="SMTP username")
    parser.add_argument(
        "--password",
        default=os.environ.get("SMTP_PASSWORD"),
        help="SMTP password (default: $SMTP_PASSWORD)",
    )
    parser.add_argument("--sender-email", help="Sender address (default: user)")
    parser.add_argument("--sender-name", help="Sender display name")
    parser.add_argument(
        "--send-test",
        "-t",
        action="store_true",
        help="Send the diagnostic test email to the sender address",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging output",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Minimal output (only errors and results)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        0 if all checks passed, 1 if any check failed.
    """
    args = build_parser().parse_args(argv)

    setup_logging(
        log_level="DEBUG" if args.verbose else "INFO",
        console_level="DEBUG" if args.verbose else "WARNING",
        enable_file=False,
    )

    if not args.quiet:
        print_header()

    try:
        settings = SmtpSettings(
            smtp_host=args.host,
            smtp_port=args.port,
            smtp_user=args.user,
            smtp_password=args.password or "",
            sender_email=args.sender_email,
            sender_name=args.sender_name,
        )
    except ValidationError as e:
        fields = ", ".join(".".join(map(str, err["loc"])) for err in e.errors())
        print(f"\n❌ Invalid SMTP settings: {fields}")
        return 1

    timeout = DispatchConfig().SMTP_TIMEOUT

    if not args.quiet:
        print_settings(settings, timeout)

    exit_code = 0
    try:
        if not validate_smtp_connection(settings, timeout):
            exit_code = 1
        elif args.send_test and not send_test_email(settings, timeout):
            exit_code = 1
    finally:
        if not args.quiet:
            print_footer()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
