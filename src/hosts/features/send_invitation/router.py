import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field

from src.hosts.dependencies import require_event_manager
from src.hosts.repository import HostEventModel, get_host_event_model
from src.hosts.urls import SEND_INVITATION_URL
from src.notifications.container import get_notification_services
from src.notifications.email.base import EmailServiceBase
from src.notifications.sms.service import SmsService

logger = logging.getLogger(__name__)

router = APIRouter()


class SendInvitationSubmit(BaseModel):
    notify_by_email: bool = Field(default=True, validation_alias=AliasChoices("notify_by_email", "notifyByEmail"))
    notify_by_sms: bool = Field(default=False, validation_alias=AliasChoices("notify_by_sms", "notifyBySms"))


class SendInvitationResponse(BaseModel):
    success: bool = True
    email_sent: bool
    sms_sent: bool


def get_invitation_channels() -> tuple[EmailServiceBase, SmsService]:
    services = get_notification_services()
    return services.email_service, services.sms_service


@router.post(SEND_INVITATION_URL, response_model=SendInvitationResponse)
async def send_invitation(
    event_id: UUID,
    guest_id: UUID,
    body: SendInvitationSubmit | None = None,
    _: UUID = Depends(require_event_manager),
    host_event_model: HostEventModel = Depends(get_host_event_model),
    channels: tuple[EmailServiceBase, SmsService] = Depends(get_invitation_channels),
) -> SendInvitationResponse:
    """
    Send, or resend, a guest their RSVP link whatever their RSVP status.
    Delivery failures are logged and reported per channel, never raised.
    """
    body = body or SendInvitationSubmit()
    email_service, sms_service = channels

    event = await host_event_model.get_event(event_id)
    if not event:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": "Event not found"})

    guest = await host_event_model.get_guest(event_id, guest_id)
    if not guest:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": "Guest not found"})

    send_sms = body.notify_by_sms and bool(guest.phone)
    if not (body.notify_by_email or send_sms):
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": "Please select at least one delivery method"},
        )

    host_name = await host_event_model.get_host_name(event_id)

    email_sent = False
    if body.notify_by_email:
        try:
            await email_service.send_invitation(
                to_address=guest.email,
                guest_name=guest.name,
                event=event,
                rsvp_token=guest.token,
                host_name=host_name,
            )
            email_sent = True
        except Exception:
            logger.exception("Failed to send invitation email to guest %s", guest.uuid)

    sms_sent = False
    if send_sms:
        try:
            result = await sms_service.send_invitation(
                to=guest.phone,
                guest_name=guest.name,
                event_title=event.title,
                event_date=event.date,
                rsvp_token=guest.token,
                event_location=event.location,
                host_name=host_name,
            )
        except Exception:
            logger.exception("Failed to send invitation SMS to guest %s", guest.uuid)
        else:
            sms_sent = result.sent
            if not result.sent:
                logger.warning("Invitation SMS to guest %s not sent: %s", guest.uuid, result.reason)

    return SendInvitationResponse(email_sent=email_sent, sms_sent=sms_sent)
