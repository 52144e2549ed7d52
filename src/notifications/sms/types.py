from abc import ABC, abstractmethod
from dataclasses import dataclass, field

DEFAULT_PROVIDER = "twilio"


@dataclass(frozen=True)
class SmsResult:
    sent: bool
    reason: str | None = None
    message_id: str | None = None


@dataclass(frozen=True)
class SmsProviderConfig:
    """Stored SMS settings. Equality is structural, which the provider cache relies on."""

    provider: str = DEFAULT_PROVIDER
    # Twilio, and the sender number for AWS SNS
    account_sid: str | None = None
    auth_token: str | None = None
    phone_number: str | None = None
    # AWS SNS
    access_key_id: str | None = None
    secret_access_key: str | None = None
    region: str | None = None
    # Vonage, MessageBird and the generic webhook
    api_key: str | None = None
    api_secret: str | None = None
    from_number: str | None = None
    originator: str | None = None
    webhook_url: str | None = None
    custom_headers: dict[str, str] = field(default_factory=dict)


class SmsProvider(ABC):
    """One way of delivering a text message.

    ``send_sms`` never raises: unconfigured providers and upstream rejections
    come back as ``SmsResult(sent=False, reason=...)``.
    """

    name: str = ""

    @abstractmethod
    def is_configured(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def send_sms(self, to: str, message: str) -> SmsResult:
        raise NotImplementedError
