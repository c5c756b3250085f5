"""Pytest configuration and fixtures for mail dispatch tests.

Provides reusable fixtures for unit and integration tests including
SMTP settings, mocked SMTP connections, and FastAPI test clients.

Author: Triptics
Version: 1.0.0
"""

from __future__ import annotations

import os
from email.message import Message
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Generator
from unittest.mock import MagicMock, patch

import pytest

# Set test environment before importing application modules
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "")

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


# =============================================================================
# SMTP Settings Fixtures
# =============================================================================
@pytest.fixture
def smtp_settings_payload() -> dict[str, Any]:
    """SMTP settings as sent in a request body."""
    return {
        "smtp_host": "smtp.test.com",
        "smtp_port": 587,
        "smtp_user": "test@test.com",
        "smtp_password": "testpassword",
        "sender_name": "Test Travel",
        "sender_email": "noreply@test.com",
    }


@pytest.fixture
def smtp_settings(smtp_settings_payload: dict[str, Any]):
    """Validated SmtpSettings for direct client/dispatcher tests."""
    from mail_dispatch.models.smtp_config import SmtpSettings

    return SmtpSettings(**smtp_settings_payload)


@pytest.fixture
def pdf_bytes() -> bytes:
    """Minimal PDF document."""
    return PDF_BYTES


# =============================================================================
# SMTP Connection Fixtures
# =============================================================================
@pytest.fixture
def mock_smtp_connection() -> MagicMock:
    """Create a mock SMTP connection."""
    smtp = MagicMock()
    smtp.ehlo.return_value = (250, b"OK")
    smtp.has_extn.return_value = True
    smtp.send_message.return_value = {}
    smtp.starttls.return_value = (220, b"TLS ready")
    smtp.login.return_value = (235, b"Authentication successful")
    smtp.quit.return_value = (221, b"Bye")
    return smtp


@pytest.fixture
def mock_smtp(mock_smtp_connection: MagicMock) -> Generator[SimpleNamespace, None, None]:
    """Patch smtplib.SMTP and smtplib.SMTP_SSL in the SMTP client module.

    Both constructors return the same mock connection.
    """
    with patch(
        "mail_dispatch.clients.smtp.smtplib.SMTP", return_value=mock_smtp_connection
    ) as smtp_cls, patch(
        "mail_dispatch.clients.smtp.smtplib.SMTP_SSL",
        return_value=mock_smtp_connection,
    ) as smtp_ssl_cls:
        yield SimpleNamespace(
            smtp=smtp_cls,
            smtp_ssl=smtp_ssl_cls,
            connection=mock_smtp_connection,
        )


@pytest.fixture
def sent_message(mock_smtp_connection: MagicMock) -> Callable[[], Message]:
    """Return the MIME message passed to the last send_message call."""

    def _get() -> Message:
        assert mock_smtp_connection.send_message.called, "no message was sent"
        return mock_smtp_connection.send_message.call_args.args[0]

    return _get


# =============================================================================
# Template Fixtures
# =============================================================================
@pytest.fixture
def template_renderer():
    """Renderer over the packaged templates."""
    from mail_dispatch.templates.renderer import TemplateRenderer

    return TemplateRenderer()


@pytest.fixture
def company_settings_file(tmp_path: Path) -> Path:
    """Company settings JSON file."""
    path = tmp_path / "company.json"
    path.write_text(
        '{"company_settings": {"name": "Acme Travels", "email": "hello@acme.com",'
        ' "phone": "+1 555 0100", "website": "https://acme.com"}}',
        encoding="utf-8",
    )
    return path


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================
@pytest.fixture
def app_config_factory(tmp_path: Path) -> Callable[..., Any]:
    """Build a DispatchConfig suitable for tests, with overrides."""
    from mail_dispatch.config import DispatchConfig

    def _make(**overrides: Any) -> DispatchConfig:
        values: dict[str, Any] = {
            "ENVIRONMENT": "test",
            "LOG_TO_FILE": False,
            "LOG_LEVEL": "WARNING",
            "LOG_DIR": str(tmp_path / "logs"),
            "JWT_SECRET": "",
            "COMPANY_SETTINGS_FILE": "",
        }
        values.update(overrides)
        return DispatchConfig(**values)

    return _make


@pytest.fixture
def client_factory(
    app_config_factory: Callable[..., Any], mock_smtp: SimpleNamespace
) -> Generator[Callable[..., Any], None, None]:
    """Build TestClients over fresh apps; SMTP is always mocked."""
    from fastapi.testclient import TestClient

    from mail_dispatch.api.main import create_app

    clients: list[TestClient] = []

    def _make(**overrides: Any) -> TestClient:
        app = create_app(app_config_factory(**overrides))
        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def test_client(client_factory: Callable[..., Any]):
    """Create a FastAPI test client with default (unauthenticated) config."""
    return client_factory()
