import asyncio
import logging
from collections.abc import Callable
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.notifications.sms.phone import format_phone_number
from src.notifications.sms.types import SmsProvider, SmsProviderConfig, SmsResult

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"


class AwsSnsProvider(SmsProvider):
    name = "aws-sns"

    def __init__(self, config: SmsProviderConfig, client_factory: Callable[..., Any] = boto3.client):
        self._region = config.region or DEFAULT_REGION
        self._phone_number = config.phone_number or None
        self._client: Any = None
        if config.access_key_id and config.secret_access_key:
            self._client = client_factory(
                "sns",
                region_name=self._region,
                aws_access_key_id=config.access_key_id,
                aws_secret_access_key=config.secret_access_key,
            )

    def is_configured(self) -> bool:
        return bool(self._client and (self._phone_number or self._region))

    async def send_sms(self, to: str, message: str) -> SmsResult:
        if not self._client:
            return SmsResult(sent=False, reason="AWS_SDK_NOT_AVAILABLE")

        if not to:
            return SmsResult(sent=False, reason="PHONE_NUMBER_REQUIRED")

        try:
            response = await asyncio.to_thread(
                self._client.publish,
                PhoneNumber=format_phone_number(to),
                Message=message,
            )
        except (BotoCoreError, ClientError) as e:
            logger.exception("AWS SNS SMS error")
            return SmsResult(sent=False, reason=str(e) or "UNKNOWN_ERROR")

        return SmsResult(sent=True, message_id=response.get("MessageId"))
