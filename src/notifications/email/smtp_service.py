import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from sqlalchemy.exc import SQLAlchemyError

from src.config.settings import settings
from src.notifications.config_store import EmailConfig, NotificationConfigStore
from src.notifications.email.base import EmailServiceBase
from src.notifications.errors import EmailDeliveryError, EmailNotConfiguredError

logger = logging.getLogger(__name__)

SMTP_SSL_PORT = 465


class SMTPEmailService(EmailServiceBase):
    """SMTP delivery with credentials looked up from the config store on every send."""

    def __init__(
        self,
        config_store: NotificationConfigStore,
        app_url: str = settings.app_url,
        smtp_class: type[smtplib.SMTP] = smtplib.SMTP,
        smtp_ssl_class: type[smtplib.SMTP_SSL] = smtplib.SMTP_SSL,
    ):
        super().__init__(app_url)
        self._config_store = config_store
        self._smtp_class = smtp_class
        self._smtp_ssl_class = smtp_ssl_class

    async def _get_config(self) -> EmailConfig | None:
        try:
            config = await self._config_store.get_email_config()
        except (SQLAlchemyError, OSError, ValueError):
            # an unreadable or malformed stored config counts as no config
            logger.exception("Error reading email config")
            return None
        if config and config.host and config.user and config.password:
            return config
        return None

    async def is_configured(self) -> bool:
        return await self._get_config() is not None

    @staticmethod
    def _from_address(config: EmailConfig) -> str:
        if config.from_address and config.from_address.strip():
            return config.from_address
        return f"OwnRSVP <{config.user}>"

    def _create_message(
        self,
        from_address: str,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
        reply_to: str | None = None,
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = from_address
        msg["To"] = to_address
        if reply_to:
            msg["Reply-To"] = reply_to

        part1 = MIMEText(text_body, "plain")
        part2 = MIMEText(html_body, "html")
        msg.attach(part1)
        msg.attach(part2)

        return msg

    def _deliver(self, config: EmailConfig, msg: MIMEMultipart) -> None:
        if config.port == SMTP_SSL_PORT:
            with self._smtp_ssl_class(config.host, config.port) as server:
                server.login(config.user, config.password)
                server.send_message(msg)
        else:
            with self._smtp_class(config.host, config.port) as server:
                server.starttls()
                server.login(config.user, config.password)
                server.send_message(msg)

    async def _send(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
        email_type: str,
        reply_to: str | None = None,
    ) -> str | None:
        config = await self._get_config()
        if config is None:
            raise EmailNotConfiguredError()

        msg = self._create_message(
            from_address=self._from_address(config),
            to_address=to_address,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            reply_to=reply_to,
        )

        try:
            # smtplib blocks
            await asyncio.to_thread(self._deliver, config, msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"Failed to send {email_type} email: {e}", to_address=to_address) from e

        return None
