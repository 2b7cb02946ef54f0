"""
Tests for Email Service.

Tests MockEmailService, the Resend client and the client templates.
"""

import httpx
import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from tracker_suite.services.email_service import (
    EMAIL_TEMPLATES,
    RESEND_API_URL,
    EmailService,
    MockEmailService,
    list_email_templates,
    render_email_template,
    template_display_name,
    trial_warning_email,
)


def mock_async_client(response=None, side_effect=None):
    """Patchable stand-in for httpx.AsyncClient used as a context manager."""
    client = MagicMock()
    client.post = AsyncMock(return_value=response, side_effect=side_effect)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


class TestMockEmailService:
    """Tests for MockEmailService."""

    @pytest.mark.asyncio
    async def test_mock_service_is_configured(self):
        """Test mock service reports as configured."""
        service = MockEmailService()
        assert service.is_configured is True

    @pytest.mark.asyncio
    async def test_send_email_success(self):
        """Test sending email via mock service."""
        service = MockEmailService()

        result = await service.send_email(
            to="recipient@example.com",
            subject="Test Subject",
            body="Test body content",
        )

        assert result["success"] is True
        assert result["message_id"].startswith("mock-")
        assert service._sent_emails[0]["subject"] == "Test Subject"

    @pytest.mark.asyncio
    async def test_trial_warning_email(self):
        """Test the trial warning goes through send_email."""
        service = MockEmailService()

        await service.send_trial_warning_email("user@example.com", "Sam", 1)

        sent = service._sent_emails[0]
        assert sent["subject"] == "Your Tracker Suite trial expires in 1 day"
        assert "Hi Sam" in sent["html_body"]


class TestResendEmailService:
    """Tests for EmailService against a patched httpx client."""

    @pytest.mark.asyncio
    async def test_not_configured(self):
        """Without an API key nothing is sent."""
        service = EmailService()
        service.api_key = None

        result = await service.send_email(to="a@example.com", subject="Hi", body="Hello")

        assert result["success"] is False
        assert "RESEND_API_KEY" in result["error"]
        assert service.is_configured is False

    @pytest.mark.asyncio
    async def test_send_success(self):
        service = EmailService()
        service.api_key = "re_test"
        response = MagicMock(status_code=200, text="")
        response.json.return_value = {"id": "msg_123"}
        client = mock_async_client(response=response)

        with patch("tracker_suite.services.email_service.httpx.AsyncClient", return_value=client):
            result = await service.send_email(
                to="a@example.com", to_name="Ann", subject="Hi", body="Line 1\nLine 2"
            )

        assert result == {"success": True, "status_code": 200, "message_id": "msg_123"}
        url = client.post.call_args.args[0]
        kwargs = client.post.call_args.kwargs
        assert url == RESEND_API_URL
        assert kwargs["headers"]["Authorization"] == "Bearer re_test"
        assert kwargs["json"]["to"] == ["Ann <a@example.com>"]
        assert kwargs["json"]["text"] == "Line 1\nLine 2"
        assert "Line 1<br>Line 2" in kwargs["json"]["html"]

    @pytest.mark.asyncio
    async def test_provider_error(self):
        service = EmailService()
        service.api_key = "re_test"
        response = MagicMock(status_code=422, text="invalid from")
        client = mock_async_client(response=response)

        with patch("tracker_suite.services.email_service.httpx.AsyncClient", return_value=client):
            result = await service.send_email(to="a@example.com", subject="Hi", html_body="<p>x</p>")

        assert result["success"] is False
        assert result["status_code"] == 422
        assert "invalid from" in result["error"]

    @pytest.mark.asyncio
    async def test_timeout(self):
        service = EmailService()
        service.api_key = "re_test"
        client = mock_async_client(side_effect=httpx.ReadTimeout("slow"))

        with patch("tracker_suite.services.email_service.httpx.AsyncClient", return_value=client):
            result = await service.send_email(to="a@example.com", subject="Hi", body="x")

        assert result["success"] is False
        assert result["error"] == "Resend API request timed out"


class TestTemplates:
    """Tests for the client email templates."""

    def test_display_name(self):
        assert template_display_name("followUpReminder") == "Follow Up Reminder"
        assert template_display_name("projectUpdate") == "Project Update"

    def test_list_templates(self):
        templates = list_email_templates()

        assert [t["id"] for t in templates] == list(EMAIL_TEMPLATES)
        assert templates[1] == {
            "id": "welcomeMessage",
            "name": "Welcome Message",
            "subject": "Welcome to our service!",
        }

    def test_render_substitutes_subject_and_body(self):
        rendered = render_email_template(
            "projectUpdate",
            {"projectName": "Website Redesign", "clientName": "Ann", "message": "On track"},
        )

        assert rendered["subject"] == "Project Update - Website Redesign"
        assert "Hello Ann," in rendered["html"]
        assert "On track" in rendered["html"]
        assert "{{senderName}}" in rendered["html"]

    def test_render_unknown_template(self):
        with pytest.raises(KeyError):
            render_email_template("nope", {})

    def test_trial_warning_pluralizes(self):
        assert trial_warning_email("Sam", 2)["subject"] == "Your Tracker Suite trial expires in 2 days"
