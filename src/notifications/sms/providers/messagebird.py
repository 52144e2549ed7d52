import logging

import httpx

from src.notifications.sms.types import SmsProvider, SmsProviderConfig, SmsResult

logger = logging.getLogger(__name__)

MESSAGEBIRD_MESSAGES_URL = "https://rest.messagebird.com/messages"


class MessageBirdProvider(SmsProvider):
    name = "messagebird"

    def __init__(
        self,
        config: SmsProviderConfig,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        self._api_key = config.api_key or None
        self._originator = config.originator or None
        self._http_client_class = http_client_class

    def is_configured(self) -> bool:
        return bool(self._api_key and self._originator)

    async def send_sms(self, to: str, message: str) -> SmsResult:
        if not self._api_key:
            return SmsResult(sent=False, reason="MESSAGEBIRD_SDK_NOT_AVAILABLE")

        if not self._originator:
            return SmsResult(sent=False, reason="ORIGINATOR_REQUIRED")

        try:
            async with self._http_client_class() as client:
                response = await client.post(
                    MESSAGEBIRD_MESSAGES_URL,
                    headers={"Authorization": f"AccessKey {self._api_key}"},
                    json={
                        "originator": self._originator,
                        "recipients": [to],
                        "body": message,
                    },
                )
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.exception("MessageBird SMS error")
            return SmsResult(sent=False, reason=str(e) or "UNKNOWN_ERROR")

        if not isinstance(data, dict):
            data = {}

        if response.status_code >= 400:
            errors = data.get("errors")
            first = errors[0] if isinstance(errors, list) and errors else {}
            if not isinstance(first, dict):
                first = {}
            reason = first.get("description") or f"HTTP {response.status_code}"
            logger.error("MessageBird rejected SMS: %s", reason)
            return SmsResult(sent=False, reason=reason)

        return SmsResult(sent=True, message_id=data.get("id"))
