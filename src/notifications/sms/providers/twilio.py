import asyncio
import logging

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from src.notifications.sms.phone import format_phone_number
from src.notifications.sms.types import SmsProvider, SmsProviderConfig, SmsResult

logger = logging.getLogger(__name__)


class TwilioProvider(SmsProvider):
    """Default provider."""

    name = "twilio"

    def __init__(self, config: SmsProviderConfig, client_class: type[Client] = Client):
        self._client: Client | None = None
        if config.account_sid and config.auth_token:
            self._client = client_class(config.account_sid, config.auth_token)
        self._from_number = config.phone_number or None

    def is_configured(self) -> bool:
        return bool(self._client and self._from_number)

    async def send_sms(self, to: str, message: str) -> SmsResult:
        if not self.is_configured():
            return SmsResult(sent=False, reason="SMS_NOT_CONFIGURED")

        try:
            # the SDK is synchronous
            result = await asyncio.to_thread(
                self._client.messages.create,
                body=message,
                from_=self._from_number,
                to=format_phone_number(to),
            )
        except (TwilioException, OSError) as e:
            logger.exception("Twilio SMS error")
            return SmsResult(sent=False, reason=str(e) or "UNKNOWN_ERROR")

        return SmsResult(sent=True, message_id=result.sid)
