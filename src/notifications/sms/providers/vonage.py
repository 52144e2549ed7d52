import logging

import httpx

from src.notifications.sms.types import SmsProvider, SmsProviderConfig, SmsResult

logger = logging.getLogger(__name__)

VONAGE_SMS_URL = "https://rest.nexmo.com/sms/json"


class VonageProvider(SmsProvider):
    """Vonage (formerly Nexmo) SMS API."""

    name = "vonage"

    def __init__(
        self,
        config: SmsProviderConfig,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        self._api_key = config.api_key or None
        self._api_secret = config.api_secret or None
        self._from = config.from_number or None
        self._http_client_class = http_client_class

    @property
    def _has_credentials(self) -> bool:
        return bool(self._api_key and self._api_secret)

    def is_configured(self) -> bool:
        return bool(self._has_credentials and self._from)

    async def send_sms(self, to: str, message: str) -> SmsResult:
        if not self._has_credentials:
            return SmsResult(sent=False, reason="VONAGE_SDK_NOT_AVAILABLE")

        if not self._from:
            return SmsResult(sent=False, reason="FROM_NUMBER_REQUIRED")

        try:
            async with self._http_client_class() as client:
                response = await client.post(
                    VONAGE_SMS_URL,
                    data={
                        "api_key": self._api_key,
                        "api_secret": self._api_secret,
                        "from": self._from,
                        "to": to,
                        "text": message,
                    },
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.exception("Vonage SMS error")
            return SmsResult(sent=False, reason=str(e) or "UNKNOWN_ERROR")

        if not isinstance(data, dict):
            data = {}
        messages = data.get("messages")
        first = messages[0] if isinstance(messages, list) and messages else {}
        if not isinstance(first, dict):
            first = {}
        # Vonage reports per-message status, "0" is success
        if first.get("status") == "0":
            return SmsResult(sent=True, message_id=first.get("message-id"))
        return SmsResult(sent=False, reason=first.get("error-text") or "UNKNOWN_ERROR")
