"""Unit tests for the SMTP validation CLI.

Author: Triptics
Version: 1.0.0
"""

from __future__ import annotations

from mail_dispatch.scripts import validate_smtp

BASE_ARGS = [
    "--host",
    "smtp.test.com",
    "--user",
    "test@test.com",
    "--password",
    "testpassword",
    "--quiet",
]


class TestValidateSmtpCli:
    def test_connection_ok(self, mock_smtp):
        assert validate_smtp.main(BASE_ARGS) == 0

        mock_smtp.connection.login.assert_called_once_with(
            "test@test.com", "testpassword"
        )
        mock_smtp.connection.send_message.assert_not_called()

    def test_connection_failure(self, mock_smtp):
        mock_smtp.smtp.side_effect = ConnectionRefusedError("Connection refused")

        assert validate_smtp.main(BASE_ARGS) == 1

    def test_send_test_email(self, mock_smtp, sent_message):
        assert validate_smtp.main([*BASE_ARGS, "--send-test"]) == 0

        message = sent_message()
        assert message["To"] == "test@test.com"
        assert message["Subject"] == "Test Email - SMTP Configuration"

    def test_port_465(self, mock_smtp):
        assert validate_smtp.main([*BASE_ARGS, "--port", "465"]) == 0

        mock_smtp.smtp_ssl.assert_called_once()

    def test_invalid_settings(self, mock_smtp):
        args = ["--host", "smtp.test.com", "--user", "u", "--password", "", "--quiet"]

        assert validate_smtp.main(args) == 1
        mock_smtp.smtp.assert_not_called()
