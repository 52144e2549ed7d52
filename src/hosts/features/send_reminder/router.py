import logging
from datetime import UTC, datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.guests.dtos import GuestStatus
from src.hosts.dependencies import require_event_manager
from src.hosts.repository import HostEventModel, get_host_event_model
from src.hosts.urls import SEND_REMINDER_URL
from src.notifications.container import get_notification_services
from src.notifications.email.base import EmailServiceBase
from src.notifications.errors import EmailNotConfiguredError, NotificationError

logger = logging.getLogger(__name__)

router = APIRouter()


class SendReminderResponse(BaseModel):
    success: bool
    email_sent: bool


def get_email_service() -> EmailServiceBase:
    return get_notification_services().email_service


@router.post(SEND_REMINDER_URL, response_model=SendReminderResponse)
async def send_reminder(
    event_id: UUID,
    guest_id: UUID,
    _: UUID = Depends(require_event_manager),
    host_event_model: HostEventModel = Depends(get_host_event_model),
    email_service: EmailServiceBase = Depends(get_email_service),
) -> SendReminderResponse:
    """Nudge one guest who has not responded yet, outside the automatic schedule."""
    event = await host_event_model.get_event(event_id)
    if not event:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": "Event not found"})

    guest = await host_event_model.get_guest(event_id, guest_id)
    if not guest:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": "Guest not found"})

    if guest.status != GuestStatus.PENDING:
        raise HTTPException(
            status_code=400,
            detail={"code": "ALREADY_RESPONDED", "message": "Guest has already responded"},
        )

    email_sent = False
    if guest.notify_by_email:
        try:
            await email_service.send_reminder(
                to_address=guest.email,
                guest_name=guest.name,
                event=event,
                rsvp_token=guest.token,
            )
        except EmailNotConfiguredError as e:
            raise HTTPException(status_code=503, detail={"code": e.code, "message": str(e)})
        except NotificationError as e:
            logger.exception("Failed to send manual reminder to guest %s", guest.uuid)
            raise HTTPException(
                status_code=502,
                detail={"code": e.code, "message": "Failed to send reminder email"},
            )
        email_sent = True

    await host_event_model.mark_reminder_sent(guest.uuid, datetime.now(UTC))

    return SendReminderResponse(success=True, email_sent=email_sent)
