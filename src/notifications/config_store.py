import abc
import json
import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.config.settings import settings
from src.guests.repository.orm_models import AppConfig
from src.notifications.sms.types import DEFAULT_PROVIDER, SmsProviderConfig

logger = logging.getLogger(__name__)

EMAIL_CATEGORY = "email"
SMS_CATEGORY = "sms"


@dataclass(frozen=True)
class EmailConfig:
    host: str
    port: int
    user: str
    password: str
    from_address: str | None = None


class NotificationConfigStore(abc.ABC):
    """Read-only source of channel credentials."""

    @abc.abstractmethod
    async def get_email_config(self) -> EmailConfig | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_sms_config(self) -> SmsProviderConfig | None:
        raise NotImplementedError


class SqlNotificationConfigStore(NotificationConfigStore):
    """Reads ``app_config`` rows; environment settings fill in missing keys.

    When no rows exist for a category the channel is configured from the
    environment alone, or not at all.
    """

    def __init__(self, session: AsyncSession | None = None):
        self._session = session

    async def _load(self, category: str) -> dict[str, str]:
        async with async_session_manager(session_overwrite=self._session) as session:
            result = await session.execute(select(AppConfig).where(AppConfig.category == category))
            return {row.key: row.value for row in result.scalars().all()}

    async def get_email_config(self) -> EmailConfig | None:
        values = await self._load(EMAIL_CATEGORY)

        if values:
            port = values.get("SMTP_PORT") or settings.smtp_port
            return EmailConfig(
                host=values.get("SMTP_HOST") or settings.smtp_host,
                port=int(port),
                user=values.get("SMTP_USER") or settings.smtp_user,
                password=values.get("SMTP_PASSWORD") or settings.smtp_password,
                from_address=values.get("SMTP_FROM") or settings.emails_from or None,
            )

        if settings.smtp_host and settings.smtp_user and settings.smtp_password:
            return EmailConfig(
                host=settings.smtp_host,
                port=settings.smtp_port,
                user=settings.smtp_user,
                password=settings.smtp_password,
                from_address=settings.emails_from or None,
            )

        return None

    async def get_sms_config(self) -> SmsProviderConfig | None:
        values = await self._load(SMS_CATEGORY)

        if values:
            return sms_config_from_values(values)

        if settings.twilio_account_sid and settings.twilio_auth_token and settings.twilio_phone_number:
            return SmsProviderConfig(
                account_sid=settings.twilio_account_sid,
                auth_token=settings.twilio_auth_token,
                phone_number=settings.twilio_phone_number,
            )

        return None


def sms_config_from_values(values: dict[str, str]) -> SmsProviderConfig:
    """Build the config for the stored ``SMS_PROVIDER`` from its own keys only."""
    provider = values.get("SMS_PROVIDER") or DEFAULT_PROVIDER

    if provider == "aws-sns":
        return SmsProviderConfig(
            provider=provider,
            access_key_id=values.get("AWS_ACCESS_KEY_ID"),
            secret_access_key=values.get("AWS_SECRET_ACCESS_KEY"),
            region=values.get("AWS_REGION") or "us-east-1",
            phone_number=values.get("AWS_SNS_PHONE_NUMBER"),
        )

    if provider == "vonage":
        return SmsProviderConfig(
            provider=provider,
            api_key=values.get("VONAGE_API_KEY"),
            api_secret=values.get("VONAGE_API_SECRET"),
            from_number=values.get("VONAGE_FROM"),
        )

    if provider == "messagebird":
        return SmsProviderConfig(
            provider=provider,
            api_key=values.get("MESSAGEBIRD_API_KEY"),
            originator=values.get("MESSAGEBIRD_ORIGINATOR"),
        )

    if provider == "generic":
        custom_headers: dict[str, str] = {}
        raw_headers = values.get("GENERIC_CUSTOM_HEADERS")
        if raw_headers:
            try:
                custom_headers = json.loads(raw_headers)
            except ValueError:
                logger.warning("Ignoring malformed GENERIC_CUSTOM_HEADERS")
            if not isinstance(custom_headers, dict):
                custom_headers = {}
        return SmsProviderConfig(
            provider=provider,
            webhook_url=values.get("GENERIC_WEBHOOK_URL"),
            api_key=values.get("GENERIC_API_KEY"),
            custom_headers=custom_headers,
        )

    # twilio, and anything unknown which the factory maps to twilio anyway
    return SmsProviderConfig(
        provider=provider,
        account_sid=values.get("TWILIO_ACCOUNT_SID") or settings.twilio_account_sid,
        auth_token=values.get("TWILIO_AUTH_TOKEN") or settings.twilio_auth_token,
        phone_number=values.get("TWILIO_PHONE_NUMBER") or settings.twilio_phone_number,
    )
