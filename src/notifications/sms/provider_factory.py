import logging

from src.config.settings import settings
from src.notifications.sms.providers.aws_sns import AwsSnsProvider
from src.notifications.sms.providers.generic import GenericWebhookProvider
from src.notifications.sms.providers.messagebird import MessageBirdProvider
from src.notifications.sms.providers.twilio import TwilioProvider
from src.notifications.sms.providers.vonage import VonageProvider
from src.notifications.sms.types import SmsProvider, SmsProviderConfig

logger = logging.getLogger(__name__)

PROVIDERS: dict[str, type[SmsProvider]] = {
    TwilioProvider.name: TwilioProvider,
    AwsSnsProvider.name: AwsSnsProvider,
    VonageProvider.name: VonageProvider,
    MessageBirdProvider.name: MessageBirdProvider,
    GenericWebhookProvider.name: GenericWebhookProvider,
}


def create_sms_provider(config: SmsProviderConfig) -> SmsProvider:
    provider_class = PROVIDERS.get(config.provider)
    if provider_class is None:
        logger.warning("Unknown SMS provider %r, falling back to Twilio", config.provider)
        provider_class = TwilioProvider
    return provider_class(config)


def get_default_provider() -> SmsProvider:
    """Twilio built from environment settings; unconfigured when they are empty."""
    return TwilioProvider(
        SmsProviderConfig(
            account_sid=settings.twilio_account_sid or None,
            auth_token=settings.twilio_auth_token or None,
            phone_number=settings.twilio_phone_number or None,
        )
    )
