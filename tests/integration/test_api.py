"""Integration tests for API endpoints.

Tests FastAPI endpoints including validation, transport selection,
attachments, error handling and optional JWT authentication. SMTP is
mocked at the smtplib level.

Author: Triptics
Version: 1.0.0
"""

from __future__ import annotations

import logging
import smtplib
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

JWT_SECRET = "test-jwt-secret"


@pytest.fixture
def booking_request(smtp_settings_payload):
    return {
        "to": "customer@example.com",
        "bookingDetails": {
            "bookingId": "BK-42",
            "bookingDate": "2024-05-01",
            "customerName": "Jane Doe",
        },
        "settings": smtp_settings_payload,
    }


def attachments_of(message):
    return [part for part in message.walk() if part.get_filename()]


def body_of(message, content_type):
    for part in message.walk():
        if part.get_content_type() == content_type:
            return part.get_payload(decode=True).decode("utf-8")
    return None


class TestStatusEndpoints:
    """Tests for GET /api and GET /api/status."""

    def test_status(self, test_client):
        response = test_client.get("/api/status")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "message": "Email server is running"}

    def test_index(self, test_client):
        response = test_client.get("/api")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == "1.0.0"

    def test_not_found(self, test_client):
        response = test_client.get("/api/nope")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "Not Found - /api/nope",
        }


class TestValidation:
    """Missing or invalid fields → 400 and no SMTP connection."""

    @pytest.mark.parametrize(
        "field", ["smtp_host", "smtp_port", "smtp_user", "smtp_password"]
    )
    def test_missing_smtp_field(self, test_client, mock_smtp, booking_request, field):
        del booking_request["settings"][field]

        response = test_client.post(
            "/api/email/booking-confirmation", json=booking_request
        )

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert f"settings.{field}" in data["error"]
        mock_smtp.smtp.assert_not_called()
        mock_smtp.smtp_ssl.assert_not_called()

    @pytest.mark.parametrize(
        "url,body_key",
        [
            ("/api/email/booking-confirmation", "bookingDetails"),
            ("/api/email/payment-receipt", "paymentDetails"),
            ("/api/email/transfer-details", "transferDetails"),
        ],
    )
    def test_missing_details(self, test_client, mock_smtp, smtp_settings_payload, url, body_key):
        response = test_client.post(
            url, json={"to": "a@example.com", "settings": smtp_settings_payload}
        )

        assert response.status_code == 400
        assert body_key in response.json()["error"]
        mock_smtp.smtp.assert_not_called()

    def test_missing_recipient(self, test_client, mock_smtp, booking_request):
        del booking_request["to"]

        response = test_client.post(
            "/api/email/booking-confirmation", json=booking_request
        )

        assert response.status_code == 400
        assert "to" in response.json()["error"]

    def test_missing_settings(self, test_client, mock_smtp):
        response = test_client.post("/api/email/test", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing or invalid required fields: settings"
        mock_smtp.smtp.assert_not_called()

    def test_itinerary_requires_recipient(self, test_client, smtp_settings_payload):
        response = test_client.post(
            "/api/email/itinerary",
            json={"itineraryDetails": {}, "settings": smtp_settings_payload},
        )

        assert response.status_code == 400
        assert "recipient" in response.json()["error"]

    def test_malformed_json(self, test_client, mock_smtp):
        response = test_client.post(
            "/api/email/test",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        mock_smtp.smtp.assert_not_called()

    def test_send_requires_body(self, test_client, smtp_settings_payload):
        response = test_client.post(
            "/api/email/send",
            json={"to": "a@example.com", "subject": "Hi", "settings": smtp_settings_payload},
        )

        assert response.status_code == 400


class TestTemplateEndpoints:
    """Successful sends of the template-backed kinds."""

    def test_booking_without_pdf(self, test_client, booking_request, sent_message):
        response = test_client.post(
            "/api/email/booking-confirmation", json=booking_request
        )

        assert response.status_code == 200
        assert response.json()["success"] is True

        message = sent_message()
        assert message["Subject"] == "Booking Confirmation - BK-42"
        assert "BK-42" in body_of(message, "text/plain")
        assert "2024-05-01" in body_of(message, "text/html")
        assert attachments_of(message) == []

    def test_booking_with_pdf(self, test_client, booking_request, sent_message, pdf_bytes):
        booking_request["pdfBuffer"] = list(pdf_bytes)

        response = test_client.post(
            "/api/email/booking-confirmation", json=booking_request
        )

        assert response.status_code == 200
        (attachment,) = attachments_of(sent_message())
        assert attachment.get_content_type() == "application/pdf"
        assert "BK-42" in attachment.get_filename()
        assert attachment.get_payload(decode=True) == pdf_bytes

    def test_corrupt_pdf_still_sends(self, test_client, booking_request, sent_message):
        booking_request["pdfBuffer"] = [999, -4]

        response = test_client.post(
            "/api/email/booking-confirmation", json=booking_request
        )

        assert response.status_code == 200
        assert attachments_of(sent_message()) == []

    def test_payment_receipt_scenario(self, test_client, mock_smtp, sent_message):
        """Payment receipt end to end, as the booking back office sends it."""
        response = test_client.post(
            "/api/email/payment-receipt",
            json={
                "to": "a@b.com",
                "paymentDetails": {
                    "paymentId": "PAY-1",
                    "amount": 500,
                    "date": "2024-01-01",
                },
                "settings": {
                    "smtp_host": "smtp.test",
                    "smtp_port": 587,
                    "smtp_user": "u",
                    "smtp_password": "p",
                    "sender_name": "Co",
                    "sender_email": "co@x.com",
                },
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["messageId"]

        message = sent_message()
        assert message["Subject"] == "Payment Receipt - PAY-1"
        assert message["From"] == "Co <co@x.com>"
        assert message["To"] == "a@b.com"
        assert data["messageId"] == message["Message-ID"]
        mock_smtp.smtp.assert_called_once_with("smtp.test", 587, timeout=120)
        mock_smtp.connection.login.assert_called_once_with("u", "p")

    def test_transfer_details(self, test_client, smtp_settings_payload, sent_message):
        response = test_client.post(
            "/api/email/transfer-details",
            json={
                "to": "a@example.com",
                "transferDetails": {
                    "transferId": "TR-7",
                    "vehicleType": "Sedan",
                    "driverName": "Ravi",
                },
                "settings": smtp_settings_payload,
            },
        )

        assert response.status_code == 200
        message = sent_message()
        assert message["Subject"] == "Transfer Confirmation - TR-7"
        assert "Ravi" in body_of(message, "text/plain")

    def test_itinerary(self, test_client, smtp_settings_payload, sent_message, pdf_bytes):
        response = test_client.post(
            "/api/email/itinerary",
            json={
                "recipient": "a@example.com",
                "itineraryDetails": {"itineraryName": "Goa Getaway"},
                "pdfBuffer": {"type": "Buffer", "data": list(pdf_bytes)},
                "settings": smtp_settings_payload,
            },
        )

        assert response.status_code == 200
        message = sent_message()
        assert message["Subject"] == "Your Travel Itinerary: Goa Getaway"
        (attachment,) = attachments_of(message)
        assert attachment.get_filename() == "Goa_Getaway_Itinerary.pdf"


class TestGenericEndpoints:
    """Tests for /api/email/test and /api/email/send."""

    def test_test_email_goes_to_sender(self, test_client, smtp_settings_payload, sent_message):
        response = test_client.post(
            "/api/email/test", json={"settings": smtp_settings_payload}
        )

        assert response.status_code == 200
        message = sent_message()
        assert message["To"] == "noreply@test.com"
        assert message["Subject"] == "Test Email - SMTP Configuration"

    def test_send_with_attachment(self, test_client, smtp_settings_payload, sent_message):
        response = test_client.post(
            "/api/email/send",
            json={
                "to": "a@example.com, b@example.com",
                "subject": "Documents",
                "html": "<p>Attached</p>",
                "attachments": [{"filename": "notes.txt", "content": "hello"}],
                "settings": smtp_settings_payload,
            },
        )

        assert response.status_code == 200
        message = sent_message()
        assert message["To"] == "a@example.com, b@example.com"
        assert message["Reply-To"] == "noreply@test.com"
        (attachment,) = attachments_of(message)
        assert attachment.get_payload(decode=True) == b"hello"

    @pytest.mark.parametrize(
        "content, encoding",
        [("héllo", "ascii"), ("hello", "no-such-codec"), ("zz", "hex")],
    )
    def test_undecodable_attachment_dropped(
        self, test_client, mock_smtp, smtp_settings_payload, sent_message, content, encoding
    ):
        response = test_client.post(
            "/api/email/send",
            json={
                "to": "a@example.com",
                "subject": "Documents",
                "text": "See attached",
                "attachments": [
                    {"filename": "bad.bin", "content": content, "encoding": encoding},
                    {"filename": "notes.txt", "content": "4869", "encoding": "hex"},
                ],
                "settings": smtp_settings_payload,
            },
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        mock_smtp.connection.send_message.assert_called_once()
        (attachment,) = attachments_of(sent_message())
        assert attachment.get_filename() == "notes.txt"
        assert attachment.get_payload(decode=True) == b"Hi"


class TestTransport:
    """Transport selection by port."""

    def test_port_465_implicit_tls(self, test_client, mock_smtp, smtp_settings_payload):
        smtp_settings_payload["smtp_port"] = 465

        response = test_client.post(
            "/api/email/test", json={"settings": smtp_settings_payload}
        )

        assert response.status_code == 200
        mock_smtp.smtp_ssl.assert_called_once()
        mock_smtp.smtp.assert_not_called()
        mock_smtp.connection.starttls.assert_not_called()

    def test_port_587_starttls(self, test_client, mock_smtp, smtp_settings_payload):
        response = test_client.post(
            "/api/email/test", json={"settings": smtp_settings_payload}
        )

        assert response.status_code == 200
        mock_smtp.smtp.assert_called_once()
        mock_smtp.smtp_ssl.assert_not_called()
        mock_smtp.connection.starttls.assert_called_once()


class TestFailures:
    """Delivery failures → 500 with the transport error text."""

    def test_unreachable_host(self, test_client, mock_smtp, booking_request):
        mock_smtp.smtp.side_effect = ConnectionRefusedError(
            "[Errno 111] Connection refused"
        )

        response = test_client.post(
            "/api/email/booking-confirmation", json=booking_request
        )

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert "Connection refused" in data["error"]

    def test_subsequent_requests_unaffected(
        self, test_client, mock_smtp, mock_smtp_connection, booking_request
    ):
        mock_smtp.smtp.side_effect = [
            ConnectionRefusedError("Connection refused"),
            mock_smtp_connection,
        ]

        first = test_client.post("/api/email/booking-confirmation", json=booking_request)
        second = test_client.post("/api/email/booking-confirmation", json=booking_request)
        status = test_client.get("/api/status")

        assert first.status_code == 500
        assert second.status_code == 200
        assert second.json()["success"] is True
        assert status.status_code == 200

    def test_auth_failure_text_passed_through(self, test_client, mock_smtp, booking_request):
        mock_smtp.connection.login.side_effect = smtplib.SMTPAuthenticationError(
            535, b"5.7.8 Username and Password not accepted"
        )

        response = test_client.post(
            "/api/email/booking-confirmation", json=booking_request
        )

        assert response.status_code == 500
        assert "Username and Password not accepted" in response.json()["error"]

    def test_temporary_failure_logged_as_retryable(
        self, test_client, mock_smtp, booking_request, caplog
    ):
        mock_smtp.connection.send_message.side_effect = smtplib.SMTPResponseException(
            421, b"Service not available, try again later"
        )

        with caplog.at_level(logging.ERROR):
            response = test_client.post(
                "/api/email/booking-confirmation", json=booking_request
            )

        assert response.status_code == 500
        assert "caller may retry" in caplog.text

    def test_permanent_failure_not_logged_as_retryable(
        self, test_client, mock_smtp, booking_request, caplog
    ):
        mock_smtp.connection.login.side_effect = smtplib.SMTPAuthenticationError(
            535, b"5.7.8 Username and Password not accepted"
        )

        with caplog.at_level(logging.ERROR):
            response = test_client.post(
                "/api/email/booking-confirmation", json=booking_request
            )

        assert response.status_code == 500
        assert "booking_confirmation failed" in caplog.text
        assert "caller may retry" not in caplog.text


class TestRequestSizeLimit:
    def test_oversized_body_rejected(self, client_factory, mock_smtp, booking_request):
        client = client_factory(MAX_REQUEST_SIZE_MB=1)
        booking_request["pdfBuffer"] = [37] * (1024 * 1024)

        response = client.post("/api/email/booking-confirmation", json=booking_request)

        assert response.status_code == 413
        assert response.json()["success"] is False
        mock_smtp.smtp.assert_not_called()

    def test_oversized_body_carries_cors_headers(
        self, client_factory, mock_smtp, booking_request
    ):
        client = client_factory(MAX_REQUEST_SIZE_MB=1)
        booking_request["pdfBuffer"] = [37] * (1024 * 1024)

        response = client.post(
            "/api/email/booking-confirmation",
            json=booking_request,
            headers={"Origin": "http://crm.example"},
        )

        assert response.status_code == 413
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.json()["success"] is False


class TestJWTAuthentication:
    """Optional bearer-token protection of /api/email/*."""

    @pytest.fixture
    def auth_client(self, client_factory):
        return client_factory(JWT_SECRET=JWT_SECRET)

    @staticmethod
    def make_token(secret: str = JWT_SECRET, expires_in: int = 300) -> str:
        expires = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return jwt.encode({"sub": "backoffice", "exp": expires}, secret, algorithm="HS256")

    def test_disabled_by_default(self, test_client, smtp_settings_payload):
        response = test_client.post(
            "/api/email/test", json={"settings": smtp_settings_payload}
        )

        assert response.status_code == 200

    def test_missing_token(self, auth_client, mock_smtp, smtp_settings_payload):
        response = auth_client.post(
            "/api/email/test", json={"settings": smtp_settings_payload}
        )

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Authentication required"}
        mock_smtp.smtp.assert_not_called()

    def test_invalid_token(self, auth_client, smtp_settings_payload):
        response = auth_client.post(
            "/api/email/test",
            json={"settings": smtp_settings_payload},
            headers={"Authorization": f"Bearer {self.make_token('wrong-secret')}"},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Invalid or expired token"

    def test_expired_token(self, auth_client, smtp_settings_payload):
        response = auth_client.post(
            "/api/email/test",
            json={"settings": smtp_settings_payload},
            headers={"Authorization": f"Bearer {self.make_token(expires_in=-60)}"},
        )

        assert response.status_code == 403

    def test_valid_token(self, auth_client, smtp_settings_payload):
        response = auth_client.post(
            "/api/email/test",
            json={"settings": smtp_settings_payload},
            headers={"Authorization": f"Bearer {self.make_token()}"},
        )

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_status_is_public(self, auth_client):
        assert auth_client.get("/api/status").status_code == 200
