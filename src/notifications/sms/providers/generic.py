import logging
from datetime import UTC, datetime

import httpx

from src.notifications.sms.types import SmsProvider, SmsProviderConfig, SmsResult

logger = logging.getLogger(__name__)


class GenericWebhookProvider(SmsProvider):
    """POSTs ``{to, message, timestamp}`` as JSON to a host-supplied URL."""

    name = "generic"

    def __init__(
        self,
        config: SmsProviderConfig,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        self._webhook_url = config.webhook_url or None
        self._api_key = config.api_key or None
        self._custom_headers = dict(config.custom_headers or {})
        self._http_client_class = http_client_class

    def is_configured(self) -> bool:
        return bool(self._webhook_url)

    async def send_sms(self, to: str, message: str) -> SmsResult:
        if not self._webhook_url:
            return SmsResult(sent=False, reason="WEBHOOK_URL_NOT_CONFIGURED")

        headers = {"Content-Type": "application/json", **self._custom_headers}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            async with self._http_client_class() as client:
                response = await client.post(
                    self._webhook_url,
                    headers=headers,
                    json={
                        "to": to,
                        "message": message,
                        # lets the receiver reject replays
                        "timestamp": datetime.now(UTC).isoformat(),
                    },
                )
        except httpx.HTTPError as e:
            logger.exception("Generic webhook SMS error")
            return SmsResult(sent=False, reason=str(e) or "UNKNOWN_ERROR")

        if response.status_code >= 400:
            return SmsResult(sent=False, reason=f"HTTP {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        return SmsResult(sent=True, message_id=data.get("messageId") or data.get("id"))
