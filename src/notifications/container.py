from dataclasses import dataclass
from functools import lru_cache

from src.access.roles import EventAccessReadModel, SqlEventAccessReadModel
from src.config.settings import settings
from src.notifications.config_store import NotificationConfigStore, SqlNotificationConfigStore
from src.notifications.dispatcher import HostNotificationDispatcher
from src.notifications.email import EmailServiceBase, get_email_service
from src.notifications.sms.cache import SmsProviderCache
from src.notifications.sms.service import SmsService


@dataclass
class NotificationServices:
    config_store: NotificationConfigStore
    email_service: EmailServiceBase
    sms_service: SmsService
    access_read_model: EventAccessReadModel
    dispatcher: HostNotificationDispatcher


@lru_cache
def get_notification_services() -> NotificationServices:
    """One set per process, so the SMS provider cache and the dispatcher queue are shared."""
    config_store = SqlNotificationConfigStore()
    email_service = get_email_service(config_store)
    access_read_model = SqlEventAccessReadModel()
    return NotificationServices(
        config_store=config_store,
        email_service=email_service,
        sms_service=SmsService(config_store, cache=SmsProviderCache(), app_url=settings.app_url),
        access_read_model=access_read_model,
        dispatcher=HostNotificationDispatcher(
            email_service=email_service,
            access_read_model=access_read_model,
            maxsize=settings.host_notification_queue_size,
            workers=settings.host_notification_workers,
        ),
    )
