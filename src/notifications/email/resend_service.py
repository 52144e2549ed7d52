import logging
from typing import Protocol

import httpx

from src.config.settings import settings
from src.notifications.email.base import EmailServiceBase
from src.notifications.errors import EmailDeliveryError, EmailNotConfiguredError

logger = logging.getLogger(__name__)

RESEND_EMAILS_URL = "https://api.resend.com/emails"


class ResendEmailConfig(Protocol):
    resend_api_key: str
    emails_from: str


class ResendEmailService(EmailServiceBase):
    def __init__(
        self,
        config: ResendEmailConfig,
        app_url: str = settings.app_url,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        super().__init__(app_url)
        self._config = config
        self._http_client_class = http_client_class

    async def is_configured(self) -> bool:
        return bool(self._config.resend_api_key and self._config.emails_from)

    async def _send(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
        email_type: str,
        reply_to: str | None = None,
    ) -> str | None:
        """Send email via Resend, returning the Resend email id."""
        if not await self.is_configured():
            raise EmailNotConfiguredError()

        payload = {
            "from": self._config.emails_from,
            "to": [to_address],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }
        if reply_to:
            payload["reply_to"] = reply_to

        try:
            async with self._http_client_class() as client:
                response = await client.post(
                    RESEND_EMAILS_URL,
                    headers={
                        "Authorization": f"Bearer {self._config.resend_api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
                response.raise_for_status()
                resend_email_id = response.json().get("id")
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Failed to send {email_type} email: {e}", to_address=to_address) from e

        logger.info("Sent %s email to %s (resend id %s)", email_type, to_address, resend_email_id)
        return resend_email_id
