import logging
from abc import ABC, abstractmethod
from html import escape

from src.guests.dtos import ChangeType, EventDTO, GuestDTO, GuestStatus
from src.notifications.email.templates import (
    CHANGE_TYPE_INTROS,
    CHANGE_TYPE_LABELS,
    CONFIRMATION_MESSAGES,
    STATUS_LABELS,
    EmailTemplates,
)
from src.notifications.formatting import format_datetime, rsvp_link

logger = logging.getLogger(__name__)


def _greeting(name: str | None, fallback: str = "Hi there,") -> str:
    return f"Hi {name}," if name else fallback


def _status_value(status: GuestStatus | str) -> str:
    return getattr(status, "value", status)


class EmailServiceBase(ABC):
    """Renders the templated messages and leaves delivery to ``_send``.

    Every ``send_*`` except ``send_rsvp_change_notification`` raises
    ``EmailNotConfiguredError`` when no transport is configured, and
    ``EmailDeliveryError`` when the transport rejects the message.
    """

    def __init__(self, app_url: str):
        self.app_url = app_url

    @abstractmethod
    async def is_configured(self) -> bool:
        pass

    @abstractmethod
    async def _send(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
        email_type: str,
        reply_to: str | None = None,
    ) -> str | None:
        pass

    def _render_html(self, title: str, content: str) -> str:
        return EmailTemplates.LAYOUT_HTML.format(title=escape(title), content=content)

    def _event_details_html(self, event: EventDTO) -> str:
        location_html = f"<p><strong>Where:</strong> {escape(event.location)}</p>" if event.location else ""
        return EmailTemplates.EVENT_DETAILS_HTML.format(
            event_title=escape(event.title),
            event_date=format_datetime(event.date),
            location_html=location_html,
        )

    @staticmethod
    def _location_text(event: EventDTO) -> str:
        return f"Where: {event.location}\n" if event.location else ""

    @staticmethod
    def _button(url: str, label: str) -> str:
        return EmailTemplates.BUTTON_HTML.format(url=escape(url), label=label)

    async def send_invitation(
        self,
        to_address: str,
        guest_name: str | None,
        event: EventDTO,
        rsvp_token: str,
        host_name: str | None = None,
    ) -> None:
        rsvp_url = rsvp_link(self.app_url, rsvp_token)
        inviter = f"{host_name} has" if host_name else "You have been"
        subject = EmailTemplates.INVITATION_SUBJECT.format(event_title=event.title)

        description_html = f"<p>{escape(event.description)}</p>" if event.description else ""
        content = EmailTemplates.INVITATION_CONTENT_HTML.format(
            greeting=escape(_greeting(guest_name)),
            inviter=escape(inviter),
            event_details=self._event_details_html(event),
            description_html=description_html,
            button=self._button(rsvp_url, "RSVP Now"),
        )
        text_body = EmailTemplates.INVITATION_TEXT.format(
            greeting=_greeting(guest_name),
            inviter=inviter,
            event_title=event.title,
            event_date=format_datetime(event.date),
            location_text=self._location_text(event),
            rsvp_url=rsvp_url,
        )

        await self._send(
            to_address=to_address,
            subject=subject,
            html_body=self._render_html(subject, content),
            text_body=text_body,
            email_type="invitation",
            reply_to=event.reply_to,
        )

    async def send_reminder(
        self,
        to_address: str,
        guest_name: str | None,
        event: EventDTO,
        rsvp_token: str,
    ) -> None:
        rsvp_url = rsvp_link(self.app_url, rsvp_token)
        subject = EmailTemplates.REMINDER_SUBJECT.format(event_title=event.title)

        content = EmailTemplates.REMINDER_CONTENT_HTML.format(
            greeting=escape(_greeting(guest_name)),
            event_details=self._event_details_html(event),
            button=self._button(rsvp_url, "RSVP Now"),
        )
        text_body = EmailTemplates.REMINDER_TEXT.format(
            greeting=_greeting(guest_name),
            event_title=event.title,
            event_date=format_datetime(event.date),
            location_text=self._location_text(event),
            rsvp_url=rsvp_url,
        )

        await self._send(
            to_address=to_address,
            subject=subject,
            html_body=self._render_html(subject, content),
            text_body=text_body,
            email_type="reminder",
            reply_to=event.reply_to,
        )

    async def send_confirmation(
        self,
        to_address: str,
        guest_name: str | None,
        event: EventDTO,
        status: GuestStatus | str,
        rsvp_token: str,
    ) -> None:
        status = _status_value(status)
        rsvp_url = rsvp_link(self.app_url, rsvp_token)
        status_label = STATUS_LABELS.get(status, status)
        status_message = CONFIRMATION_MESSAGES.get(status, CONFIRMATION_MESSAGES["PENDING"])
        subject = EmailTemplates.CONFIRMATION_SUBJECT.format(event_title=event.title)

        content = EmailTemplates.CONFIRMATION_CONTENT_HTML.format(
            greeting=escape(_greeting(guest_name)),
            status_label=status_label,
            status_message=escape(status_message),
            event_details=self._event_details_html(event),
            button=self._button(rsvp_url, "Update Your RSVP"),
        )
        text_body = EmailTemplates.CONFIRMATION_TEXT.format(
            greeting=_greeting(guest_name),
            event_title=event.title,
            status_label=status_label,
            status_message=status_message,
            event_date=format_datetime(event.date),
            location_text=self._location_text(event),
            rsvp_url=rsvp_url,
        )

        await self._send(
            to_address=to_address,
            subject=subject,
            html_body=self._render_html(subject, content),
            text_body=text_body,
            email_type="confirmation",
            reply_to=event.reply_to,
        )

    async def send_rsvp_change_notification(
        self,
        to_address: str,
        host_name: str | None,
        event: EventDTO,
        guest: GuestDTO,
        change_type: ChangeType,
        event_url: str,
        previous_status: GuestStatus | None = None,
    ) -> None:
        """Tell a host about a guest's response. Skipped, not raised, when email is unconfigured."""
        if not await self.is_configured():
            logger.warning("Email not configured - skipping RSVP change notification to %s", to_address)
            return

        change = _status_value(change_type)
        status = _status_value(guest.status)
        change_label = CHANGE_TYPE_LABELS[change]
        intro = CHANGE_TYPE_INTROS[change]
        status_label = STATUS_LABELS.get(status, status)
        guest_name = guest.name or guest.email.split("@")[0]
        subject = EmailTemplates.RSVP_CHANGE_SUBJECT.format(change_label=change_label, event_title=event.title)

        status_change_html = ""
        status_change_text = ""
        if change_type == ChangeType.STATUS_CHANGED and previous_status:
            previous_label = STATUS_LABELS.get(_status_value(previous_status), previous_status)
            status_change_html = f"<p><strong>Status Changed:</strong> {previous_label} &rarr; {status_label}</p>"
            status_change_text = f"Status Changed: {previous_label} -> {status_label}\n"

        names = [additional.name for additional in guest.additional_guests]
        additional_guests_html = ""
        additional_guests_text = ""
        if names:
            items = "".join(f"<li>{escape(name)}</li>" for name in names)
            additional_guests_html = f"<p><strong>Additional Guests:</strong></p><ul>{items}</ul>"
            additional_guests_text = "Additional Guests: " + ", ".join(names) + "\n"

        dietary_notes_html = ""
        dietary_notes_text = ""
        if guest.dietary_notes:
            dietary_notes_html = f"<p><strong>Dietary Notes:</strong> {escape(guest.dietary_notes)}</p>"
            dietary_notes_text = f"Dietary Notes: {guest.dietary_notes}\n"

        greeting = _greeting(host_name, fallback="Hello,")
        content = EmailTemplates.RSVP_CHANGE_CONTENT_HTML.format(
            greeting=escape(greeting),
            intro=intro,
            event_details=self._event_details_html(event),
            guest_name=escape(guest_name),
            guest_email=escape(guest.email),
            status_label=status_label,
            status_change_html=status_change_html,
            additional_guests_html=additional_guests_html,
            dietary_notes_html=dietary_notes_html,
            button=self._button(event_url, "View Event &amp; Guest List"),
        )
        text_body = EmailTemplates.RSVP_CHANGE_TEXT.format(
            greeting=greeting,
            intro=intro,
            event_title=event.title,
            event_date=format_datetime(event.date),
            guest_name=guest_name,
            guest_email=guest.email,
            status_label=status_label,
            status_change_text=status_change_text,
            additional_guests_text=additional_guests_text,
            dietary_notes_text=dietary_notes_text,
            event_url=event_url,
        )

        await self._send(
            to_address=to_address,
            subject=subject,
            html_body=self._render_html(change_label, content),
            text_body=text_body,
            email_type="rsvp_change",
            # hosts reply straight to the guest
            reply_to=guest.email,
        )

    async def send_broadcast(
        self,
        to_address: str,
        guest_name: str | None,
        event: EventDTO,
        subject: str,
        message: str,
        rsvp_token: str,
    ) -> None:
        rsvp_url = rsvp_link(self.app_url, rsvp_token)
        full_subject = EmailTemplates.BROADCAST_SUBJECT.format(event_title=event.title, subject=subject)

        content = EmailTemplates.BROADCAST_CONTENT_HTML.format(
            greeting=escape(_greeting(guest_name)),
            subject=escape(subject),
            message=escape(message),
            button=self._button(rsvp_url, "View Your Invitation"),
        )
        text_body = EmailTemplates.BROADCAST_TEXT.format(
            greeting=_greeting(guest_name),
            subject=subject,
            message=message,
            rsvp_url=rsvp_url,
        )

        await self._send(
            to_address=to_address,
            subject=full_subject,
            html_body=self._render_html(subject, content),
            text_body=text_body,
            email_type="broadcast",
            reply_to=event.reply_to,
        )
