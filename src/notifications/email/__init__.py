from src.config.settings import settings
from src.notifications.config_store import NotificationConfigStore
from src.notifications.email.base import EmailServiceBase
from src.notifications.email.resend_service import ResendEmailService
from src.notifications.email.smtp_service import SMTPEmailService
from src.notifications.email.templates import EmailTemplates


def get_email_service(config_store: NotificationConfigStore) -> EmailServiceBase:
    if settings.resend_api_key:
        return ResendEmailService(config=settings, app_url=settings.app_url)
    return SMTPEmailService(config_store=config_store, app_url=settings.app_url)


__all__ = [
    "EmailServiceBase",
    "EmailTemplates",
    "ResendEmailService",
    "SMTPEmailService",
    "get_email_service",
]
