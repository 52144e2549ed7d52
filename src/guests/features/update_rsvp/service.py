import logging
from datetime import datetime

from src.guests.dtos import ChangeType, GuestDTO, RSVPPatchDTO, RSVPUpdateResultDTO
from src.guests.repository.write_models import RSVPWriteModel
from src.notifications.dispatcher import HostNotificationDispatcher, HostNotificationJob
from src.notifications.email.base import EmailServiceBase
from src.notifications.formatting import event_link
from src.notifications.sms.service import SmsService

logger = logging.getLogger(__name__)


def detect_change(
    previous: GuestDTO,
    current: GuestDTO,
    is_new_response: bool = False,
) -> ChangeType | None:
    """What hosts should be told about, or None when nothing they can see changed."""
    status_changed = previous.status != current.status
    changed = (
        status_changed
        or previous.name != current.name
        or previous.phone != current.phone
        or previous.dietary_notes != current.dietary_notes
        or [g.name for g in previous.additional_guests] != [g.name for g in current.additional_guests]
    )
    if not changed:
        return None
    if is_new_response:
        return ChangeType.NEW
    if status_changed:
        return ChangeType.STATUS_CHANGED
    return ChangeType.UPDATED


class RSVPUpdateService:
    """Applies a guest's RSVP and handles everything that follows from it.

    The write is the only part that can fail the request. The guest's own
    confirmation is awaited but failures are only logged; host emails go to
    the background dispatcher.
    """

    def __init__(
        self,
        write_model: RSVPWriteModel,
        email_service: EmailServiceBase,
        sms_service: SmsService,
        dispatcher: HostNotificationDispatcher,
        app_url: str,
    ):
        self._write_model = write_model
        self._email_service = email_service
        self._sms_service = sms_service
        self._dispatcher = dispatcher
        self._app_url = app_url

    async def update(
        self,
        token: str,
        patch: RSVPPatchDTO,
        now: datetime | None = None,
        is_new_response: bool = False,
    ) -> RSVPUpdateResultDTO:
        result = await self._write_model.apply_update(token, patch, now)

        await self._send_guest_confirmation(result)

        change_type = detect_change(result.previous, result.guest, is_new_response)
        if change_type is not None:
            self._dispatcher.enqueue(
                HostNotificationJob(
                    event=result.event,
                    guest=result.guest,
                    change_type=change_type,
                    event_url=event_link(self._app_url, result.event.uuid),
                    previous_status=result.previous.status,
                )
            )

        return result

    async def _send_guest_confirmation(self, result: RSVPUpdateResultDTO) -> None:
        guest, event = result.guest, result.event

        if guest.notify_by_email:
            try:
                await self._email_service.send_confirmation(
                    to_address=guest.email,
                    guest_name=guest.name,
                    event=event,
                    status=guest.status,
                    rsvp_token=guest.token,
                )
            except Exception:
                # the RSVP is already saved, so no channel error may reach the guest
                logger.exception("Failed to send confirmation email to guest %s", guest.uuid)

        if guest.notify_by_sms and guest.phone:
            try:
                sms_result = await self._sms_service.send_confirmation(
                    to=guest.phone,
                    guest_name=guest.name,
                    event_title=event.title,
                    event_date=event.date,
                    status=guest.status,
                    event_location=event.location,
                )
            except Exception:
                logger.exception("Failed to send confirmation SMS to guest %s", guest.uuid)
                return
            if not sms_result.sent:
                logger.warning(
                    "Confirmation SMS to guest %s not sent: %s", guest.uuid, sms_result.reason
                )
