from collections.abc import Callable

from src.notifications.sms.provider_factory import create_sms_provider
from src.notifications.sms.types import SmsProvider, SmsProviderConfig


class SmsProviderCache:
    """Keeps the last built provider until the stored configuration changes."""

    def __init__(self, factory: Callable[[SmsProviderConfig], SmsProvider] = create_sms_provider):
        self._factory = factory
        self._config: SmsProviderConfig | None = None
        self._provider: SmsProvider | None = None

    def get(self, config: SmsProviderConfig) -> SmsProvider:
        if self._provider is None or self._config != config:
            self._provider = self._factory(config)
            self._config = config
        return self._provider

    def clear(self) -> None:
        self._config = None
        self._provider = None
