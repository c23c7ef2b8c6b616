"""Outbound email delivery."""
import logging

import httpx

from app.config import settings
from app.errors import EmailDeliveryFailedError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailService:
    """Sends a single HTML email; reports success as a boolean."""

    async def send(self, to: str, subject: str, html: str) -> bool:
        raise NotImplementedError


class LogEmailService(EmailService):
    """Logs messages instead of sending them (no provider configured)."""

    async def send(self, to: str, subject: str, html: str) -> bool:
        logger.info("Email to %s: %s", to, subject)
        return True


class ResendEmailService(EmailService):
    """Delivers email through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.sender = sender
        self.client = client
        self.timeout = timeout

    async def send(self, to: str, subject: str, html: str) -> bool:
        """
        Send an email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body

        Returns:
            True if the provider accepted the message, False otherwise
        """
        try:
            await self._post({
                "from": self.sender,
                "to": [to],
                "subject": subject,
                "html": html,
            })
        except EmailDeliveryFailedError as e:
            logger.warning("Email to %s failed: %s", to, e)
            return False

        logger.info("Email sent to %s: %s", to, subject)
        return True

    async def _post(self, payload: dict) -> None:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            if self.client is not None:
                response = await self.client.post(
                    RESEND_API_URL, json=payload, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        RESEND_API_URL, json=payload, headers=headers
                    )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise EmailDeliveryFailedError(
                f"Provider returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise EmailDeliveryFailedError(str(e)) from e


def get_email_service() -> EmailService:
    """Dependency returning the configured email service."""
    if settings.resend_api_key:
        return ResendEmailService(settings.resend_api_key, settings.email_from)
    return LogEmailService()
