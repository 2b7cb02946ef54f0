"""Email Service - Resend integration for transactional emails.

Features:
- Send transactional emails via the Resend HTTP API
- HTML and plain text support
- Built-in client templates with {{variable}} substitution
- Trial warning and expiry emails
- No external SDK required (uses httpx)
"""

from tracker_suite.config import settings
import logging
import re
import uuid
from typing import Optional, Dict, Any
import httpx

logger = logging.getLogger(__name__)

# Resend API endpoint
RESEND_API_URL = "https://api.resend.com/emails"

_FOOTER = (
    '<hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">'
    '<p style="font-size: 12px; color: #666;">This email was sent from Tracker Suite CRM</p>'
)

EMAIL_TEMPLATES: Dict[str, Dict[str, str]] = {
    "followUpReminder": {
        "subject": "Follow-up on our recent conversation",
        "html": (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
            '<h2 style="color: #333;">Hello {{clientName}},</h2>'
            "<p>I hope this email finds you well. I wanted to follow up on our recent "
            "conversation regarding {{topic}}.</p>"
            "<p>{{message}}</p>"
            "<p>Please feel free to reach out if you have any questions or would like to "
            "schedule a call.</p>"
            "<p>Best regards,<br>{{senderName}}</p>" + _FOOTER + "</div>"
        ),
    },
    "welcomeMessage": {
        "subject": "Welcome to our service!",
        "html": (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
            '<h2 style="color: #333;">Welcome {{clientName}}!</h2>'
            "<p>Thank you for choosing our services. We're excited to work with you.</p>"
            "<p>{{message}}</p>"
            "<p>If you have any questions, please don't hesitate to reach out.</p>"
            "<p>Best regards,<br>{{senderName}}</p>" + _FOOTER + "</div>"
        ),
    },
    "projectUpdate": {
        "subject": "Project Update - {{projectName}}",
        "html": (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
            '<h2 style="color: #333;">Project Update: {{projectName}}</h2>'
            "<p>Hello {{clientName}},</p>"
            "<p>I wanted to provide you with an update on {{projectName}}:</p>"
            '<div style="background: #f9f9f9; padding: 15px; border-radius: 5px; margin: 15px 0;">'
            "{{message}}</div>"
            "<p>Please let me know if you have any questions or feedback.</p>"
            "<p>Best regards,<br>{{senderName}}</p>" + _FOOTER + "</div>"
        ),
    },
}


def template_display_name(template_id: str) -> str:
    """``followUpReminder`` -> ``Follow Up Reminder``."""
    spaced = re.sub(r"([A-Z])", r" \1", template_id)
    return spaced[:1].upper() + spaced[1:]


def list_email_templates() -> list[Dict[str, str]]:
    return [
        {"id": key, "name": template_display_name(key), "subject": template["subject"]}
        for key, template in EMAIL_TEMPLATES.items()
    ]


def render_email_template(template_id: str, variables: Dict[str, str]) -> Dict[str, str]:
    """
    Substitute ``{{name}}`` placeholders in a template's subject and body.

    Placeholders without a matching variable are left as-is.

    Raises:
        KeyError: if the template does not exist
    """
    template = EMAIL_TEMPLATES[template_id]
    subject = template["subject"]
    html = template["html"]
    for key, value in variables.items():
        placeholder = "{{" + key + "}}"
        subject = subject.replace(placeholder, value)
        html = html.replace(placeholder, value)
    return {"subject": subject, "html": html}


def _plural_days(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


def trial_warning_email(first_name: str, days_remaining: int) -> Dict[str, str]:
    upgrade_url = f"{settings.FRONTEND_URL}/upgrade"
    days = _plural_days(days_remaining)
    return {
        "subject": f"Your Tracker Suite trial expires in {days}",
        "html": (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
            '<h2 style="color: #2563eb;">Your Trial is Ending Soon</h2>'
            f"<p>Hi {first_name},</p>"
            f"<p>Your free trial of Tracker Suite will expire in <strong>{days}</strong>.</p>"
            "<p>To continue managing your client relationships without interruption, "
            "please upgrade your account:</p>"
            f'<p><a href="{upgrade_url}">Upgrade Now</a></p>'
            "<p>Best regards,<br>The Tracker Suite Team</p></div>"
        ),
        "text": (
            f"Hi {first_name},\n\n"
            f"Your free trial of Tracker Suite will expire in {days}.\n\n"
            f"To continue managing your client relationships without interruption, "
            f"please upgrade your account at: {upgrade_url}\n\n"
            "Best regards,\nThe Tracker Suite Team"
        ),
    }


def trial_expired_email(first_name: str) -> Dict[str, str]:
    upgrade_url = f"{settings.FRONTEND_URL}/upgrade"
    return {
        "subject": "Your Tracker Suite trial has expired",
        "html": (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
            '<h2 style="color: #dc2626;">Your Trial Has Expired</h2>'
            f"<p>Hi {first_name},</p>"
            "<p>Your free trial of Tracker Suite has expired. To continue accessing your "
            "client data, please upgrade your account.</p>"
            f'<p><a href="{upgrade_url}">Upgrade Now</a></p>'
            "<p>Your data is safe and will be restored once you upgrade.</p>"
            "<p>Best regards,<br>The Tracker Suite Team</p></div>"
        ),
        "text": (
            f"Hi {first_name},\n\n"
            "Your free trial of Tracker Suite has expired. To continue accessing your "
            f"client data, please upgrade your account at: {upgrade_url}\n\n"
            "Your data is safe and will be restored once you upgrade.\n\n"
            "Best regards,\nThe Tracker Suite Team"
        ),
    }


class EmailService:
    """Service for sending emails via the Resend API."""

    def __init__(self):
        self.api_key = settings.RESEND_API_KEY
        self.from_address = settings.EMAIL_FROM_ADDRESS
        self.from_name = settings.EMAIL_FROM_NAME

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured."""
        return bool(self.api_key) and bool(self.from_address)

    async def send_email(
        self,
        to: str,
        subject: str,
        body: Optional[str] = None,
        html_body: Optional[str] = None,
        to_name: Optional[str] = None,
        from_address: Optional[str] = None,
        from_name: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send an email via the Resend API.

        Args:
            to: Recipient email address
            subject: Email subject line
            body: Plain text body
            html_body: Optional HTML body (if not provided, plain text wrapped in basic HTML)
            to_name: Optional recipient display name
            from_address: Sender address, defaults to EMAIL_FROM_ADDRESS
            from_name: Sender display name, defaults to EMAIL_FROM_NAME
            reply_to: Optional reply-to address

        Returns:
            Dict with status_code, message_id, and success status
        """
        if not self.api_key:
            error_msg = (
                "Email service not configured. Please add your RESEND_API_KEY "
                "to enable email functionality."
            )
            logger.error("Resend API key not configured")
            return {
                "success": False,
                "error": error_msg,
                "status_code": None,
                "message_id": None,
            }

        sender = f"{from_name or self.from_name} <{from_address or self.from_address}>"
        recipient = f"{to_name} <{to}>" if to_name else to

        payload: Dict[str, Any] = {
            "from": sender,
            "to": [recipient],
            "subject": subject,
        }
        if body:
            payload["text"] = body
        if html_body:
            payload["html"] = html_body
        elif body:
            payload["html"] = f"<html><body><p>{body.replace(chr(10), '<br>')}</p></body></html>"
        if reply_to:
            payload["reply_to"] = reply_to

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    RESEND_API_URL,
                    json=payload,
                    headers=headers,
                    timeout=30.0,
                )

            if response.status_code in (200, 201):
                message_id = response.json().get("id")

                logger.info(
                    "Email sent successfully via Resend",
                    extra={
                        "to": to,
                        "subject": subject[:50],
                        "status_code": response.status_code,
                        "message_id": message_id,
                    },
                )

                return {
                    "success": True,
                    "status_code": response.status_code,
                    "message_id": message_id,
                }

            error_detail = response.text
            logger.error(
                "Resend API error",
                extra={
                    "status_code": response.status_code,
                    "error": error_detail,
                },
            )
            return {
                "success": False,
                "error": f"Resend API error: {error_detail}",
                "status_code": response.status_code,
                "message_id": None,
            }

        except httpx.TimeoutException:
            error_msg = "Resend API request timed out"
            logger.error(error_msg)
            return {
                "success": False,
                "error": error_msg,
                "status_code": None,
                "message_id": None,
            }
        except httpx.HTTPError as e:
            error_msg = str(e)
            logger.error(
                "Failed to send email via Resend",
                extra={
                    "to": to,
                    "error": error_msg,
                },
            )
            return {
                "success": False,
                "error": error_msg,
                "status_code": None,
                "message_id": None,
            }

    async def send_trial_warning_email(self, to: str, first_name: str, days_remaining: int) -> Dict[str, Any]:
        content = trial_warning_email(first_name, days_remaining)
        return await self.send_email(
            to=to, subject=content["subject"], body=content["text"], html_body=content["html"]
        )

    async def send_trial_expired_email(self, to: str, first_name: str) -> Dict[str, Any]:
        content = trial_expired_email(first_name)
        return await self.send_email(
            to=to, subject=content["subject"], body=content["text"], html_body=content["html"]
        )


class MockEmailService(EmailService):
    """Mock email service for testing and development."""

    def __init__(self):
        self.api_key = "mock-key"
        self.from_address = "test@example.com"
        self.from_name = "Test Sender"
        self._sent_emails = []

    @property
    def is_configured(self) -> bool:
        """Mock service is always configured."""
        return True

    async def send_email(
        self,
        to: str,
        subject: str,
        body: Optional[str] = None,
        html_body: Optional[str] = None,
        to_name: Optional[str] = None,
        from_address: Optional[str] = None,
        from_name: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Mock sending an email."""
        mock_message_id = f"mock-{uuid.uuid4().hex[:16]}"

        self._sent_emails.append(
            {
                "to": to,
                "to_name": to_name,
                "subject": subject,
                "body": body,
                "html_body": html_body,
                "from_address": from_address or self.from_address,
                "from_name": from_name or self.from_name,
                "reply_to": reply_to,
                "message_id": mock_message_id,
            }
        )

        logger.info(f"Mock email sent to {to}: {subject}")

        return {
            "success": True,
            "status_code": 201,
            "message_id": mock_message_id,
        }


_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """FastAPI dependency returning the process-wide email service."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
