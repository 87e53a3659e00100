"""SendGrid email client for admin notification emails."""

import asyncio
import logging
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Content, Email, Mail, To

from app.settings import settings

logger = logging.getLogger(__name__)


class SendGridClient:
    """Client for sending emails via SendGrid."""

    def __init__(self, api_key: str, from_email: str):
        """Initialize SendGrid client.

        Args:
            api_key: SendGrid API key
            from_email: Default sender email
        """
        if not api_key:
            raise ValueError("SendGrid API key must be provided or set in SENDGRID_API_KEY")
        self.api_key = api_key
        self.default_from_email = from_email
        self.client = SendGridAPIClient(api_key)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        from_email: Optional[str] = None,
    ) -> dict:
        """Send an email via SendGrid.

        The SDK is synchronous, so the request runs in a worker thread to keep
        concurrent notification sends from blocking each other.

        Returns:
            Response dict with status and message_id

        Raises:
            Exception: Whatever the SDK raises for HTTP or transport errors
        """
        message = Mail(
            from_email=Email(from_email or self.default_from_email),
            to_emails=To(to_email),
            subject=subject,
            plain_text_content=text_content,
            html_content=Content("text/html", html_content),
        )

        response = await asyncio.to_thread(self.client.send, message)

        logger.info(
            "Email sent",
            extra={"to": to_email, "status_code": response.status_code},
        )
        return {
            "status": "success",
            "message_id": response.headers.get("X-Message-Id"),
            "status_code": response.status_code,
        }


# Singleton instance
_sendgrid_client: Optional[SendGridClient] = None


def get_sendgrid_client() -> Optional[SendGridClient]:
    """Get or create the SendGrid client singleton.

    Returns:
        The client, or None when SENDGRID_API_KEY isn't configured
    """
    global _sendgrid_client
    if not settings.sendgrid_api_key:
        return None
    if _sendgrid_client is None:
        _sendgrid_client = SendGridClient(settings.sendgrid_api_key, settings.sendgrid_from_email)
    return _sendgrid_client
