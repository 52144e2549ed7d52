import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from src.guests.dtos import GuestStatus
from src.notifications.config_store import NotificationConfigStore
from src.notifications.formatting import format_datetime, rsvp_link
from src.notifications.sms.cache import SmsProviderCache
from src.notifications.sms.provider_factory import get_default_provider
from src.notifications.sms.types import SmsProvider, SmsResult

logger = logging.getLogger(__name__)

SMS_MAX_LENGTH = 1600
NOT_CONFIGURED = SmsResult(sent=False, reason="SMS_NOT_CONFIGURED")
PROVIDER_UNAVAILABLE = SmsResult(sent=False, reason="SMS_PROVIDER_UNAVAILABLE")


def _greeting(guest_name: str | None) -> str:
    return f"Hi {guest_name}!" if guest_name else "Hi!"


def _at_location(location: str | None) -> str:
    return f" at {location}" if location else ""


class SmsService:
    """Composes SMS texts and hands them to whichever provider is configured.

    Every method returns an ``SmsResult``; none of them raise for an
    unconfigured channel or an upstream rejection.
    """

    def __init__(
        self,
        config_store: NotificationConfigStore,
        cache: SmsProviderCache | None = None,
        app_url: str = "http://localhost:3000",
    ):
        self._config_store = config_store
        self._cache = cache or SmsProviderCache()
        self._app_url = app_url

    async def get_provider(self) -> SmsProvider:
        try:
            config = await self._config_store.get_sms_config()
        except (SQLAlchemyError, OSError, ValueError):
            logger.exception("Error reading SMS config, using default provider")
            return get_default_provider()

        if config is None:
            return get_default_provider()
        return self._cache.get(config)

    async def is_configured(self) -> bool:
        try:
            provider = await self.get_provider()
        except Exception:
            logger.exception("Could not set up the SMS provider")
            return False
        return provider.is_configured()

    async def _send(self, to: str, message: str, kind: str) -> SmsResult:
        try:
            provider = await self.get_provider()
        except Exception:
            # a stored config the provider SDK rejects, e.g. an unknown AWS region
            logger.exception("Could not set up the SMS provider - skipping SMS %s", kind)
            return PROVIDER_UNAVAILABLE
        if not provider.is_configured():
            logger.info("SMS not configured - skipping SMS %s", kind)
            return NOT_CONFIGURED
        return await provider.send_sms(to, message)

    async def send_invitation(
        self,
        to: str,
        guest_name: str | None,
        event_title: str,
        event_date: datetime,
        rsvp_token: str,
        event_location: str | None = None,
        host_name: str | None = None,
    ) -> SmsResult:
        inviter = f"{host_name} has" if host_name else "You have been"
        message = (
            f"{_greeting(guest_name)} {inviter} invited you to {event_title} on "
            f"{format_datetime(event_date)}{_at_location(event_location)}. "
            f"RSVP here: {rsvp_link(self._app_url, rsvp_token)}"
        )
        return await self._send(to, message, "invitation")

    async def send_reminder(
        self,
        to: str,
        guest_name: str | None,
        event_title: str,
        event_date: datetime,
        rsvp_token: str,
    ) -> SmsResult:
        message = (
            f"{_greeting(guest_name)} Reminder: You haven't responded to {event_title} on "
            f"{format_datetime(event_date)}. Please RSVP: {rsvp_link(self._app_url, rsvp_token)}"
        )
        return await self._send(to, message, "reminder")

    async def send_confirmation(
        self,
        to: str,
        guest_name: str | None,
        event_title: str,
        event_date: datetime,
        status: GuestStatus | str,
        event_location: str | None = None,
    ) -> SmsResult:
        greeting = _greeting(guest_name)
        messages = {
            "ATTENDING": (
                f"{greeting} You're confirmed for {event_title} on "
                f"{format_datetime(event_date)}{_at_location(event_location)}. See you there!"
            ),
            "NOT_ATTENDING": (
                f"{greeting} Thanks for letting us know you can't make it to {event_title}. "
                "Maybe next time!"
            ),
            "MAYBE": f"{greeting} Thanks for responding to {event_title}. We hope you can make it!",
        }
        message = messages.get(
            getattr(status, "value", status),
            f"{greeting} Thanks for your response to {event_title}.",
        )
        return await self._send(to, message, "confirmation")

    async def send_broadcast(
        self,
        to: str,
        guest_name: str | None,
        event_title: str,
        message: str,
    ) -> SmsResult:
        text = f"{_greeting(guest_name)} Update from {event_title}: {message}"
        return await self._send(to, text[:SMS_MAX_LENGTH], "broadcast")
