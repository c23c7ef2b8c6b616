"""Tests for email delivery."""
import json

import httpx
import pytest


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
class TestResendEmailService:
    """Tests for the Resend-backed email service."""

    async def test_send_success(self):
        """Test an accepted message reports success."""
        from app.services.email_service import RESEND_API_URL, ResendEmailService

        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"id": "email_123"})

        async with _client(handler) as client:
            service = ResendEmailService("re_key", "Tracker <noreply@example.com>", client=client)
            delivered = await service.send("ana@example.com", "Start your day", "<p>Hi</p>")

        assert delivered is True
        assert str(requests[0].url) == RESEND_API_URL
        assert requests[0].headers["Authorization"] == "Bearer re_key"
        payload = json.loads(requests[0].content)
        assert payload == {
            "from": "Tracker <noreply@example.com>",
            "to": ["ana@example.com"],
            "subject": "Start your day",
            "html": "<p>Hi</p>",
        }

    async def test_send_provider_error(self):
        """Test a rejected message reports failure."""
        from app.services.email_service import ResendEmailService

        def handler(request):
            return httpx.Response(422, json={"message": "Invalid `to` field"})

        async with _client(handler) as client:
            service = ResendEmailService("re_key", "noreply@example.com", client=client)
            delivered = await service.send("not-an-email", "Subject", "<p>Hi</p>")

        assert delivered is False

    async def test_send_network_error(self):
        """Test a connection failure reports failure."""
        from app.services.email_service import ResendEmailService

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            service = ResendEmailService("re_key", "noreply@example.com", client=client)
            delivered = await service.send("ana@example.com", "Subject", "<p>Hi</p>")

        assert delivered is False

    async def test_post_raises_delivery_error(self):
        """Test the low-level post raises EmailDeliveryFailedError."""
        from app.errors import EmailDeliveryFailedError
        from app.services.email_service import ResendEmailService

        def handler(request):
            return httpx.Response(500)

        async with _client(handler) as client:
            service = ResendEmailService("re_key", "noreply@example.com", client=client)
            with pytest.raises(EmailDeliveryFailedError, match="500"):
                await service._post({"to": ["ana@example.com"]})


@pytest.mark.asyncio
class TestLogEmailService:
    """Tests for the logging fallback."""

    async def test_send_logs(self, caplog):
        """Test messages are logged and reported as sent."""
        import logging

        from app.services.email_service import LogEmailService

        with caplog.at_level(logging.INFO, logger="app.services.email_service"):
            delivered = await LogEmailService().send("ana@example.com", "Review your week", "")

        assert delivered is True
        assert "Review your week" in caplog.text


class TestGetEmailService:
    """Tests for email service selection."""

    def test_without_api_key(self, monkeypatch):
        """Test no API key selects the logging service."""
        from app.config import settings
        from app.services.email_service import LogEmailService, get_email_service

        monkeypatch.setattr(settings, "resend_api_key", "")

        assert isinstance(get_email_service(), LogEmailService)

    def test_with_api_key(self, monkeypatch):
        """Test an API key selects Resend."""
        from app.config import settings
        from app.services.email_service import ResendEmailService, get_email_service

        monkeypatch.setattr(settings, "resend_api_key", "re_key")

        service = get_email_service()
        assert isinstance(service, ResendEmailService)
        assert service.api_key == "re_key"
